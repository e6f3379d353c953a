"""
Pydantic schemas for user operations
"""

from pydantic import BaseModel, Field, validator, EmailStr
from typing import Optional
from datetime import datetime
import re

from order_tracker.utils.enums import Role

class UserBase(BaseModel):
    """Base user schema"""
    email: EmailStr = Field(..., description="Valid email address")
    full_name: str = Field(..., min_length=1, max_length=100, description="Full name")
    phone: Optional[str] = Field(None, max_length=20, description="Phone number")

    @validator('phone')
    def validate_phone(cls, v):
        if v is None:
            return v
        # Remove all non-digit characters for validation
        digits_only = re.sub(r'\D', '', v)
        if len(digits_only) < 10 or len(digits_only) > 15:
            raise ValueError('Phone number must be between 10-15 digits')
        return v

    @validator('full_name')
    def validate_full_name(cls, v):
        if not re.match(r"^[^\W\d_]+(?:[\s'-][^\W\d_]+)*$", v.strip()):
            raise ValueError('Names can only contain letters, spaces, hyphens, and apostrophes')
        return v.strip()

class UserCreate(UserBase):
    """Schema for customer self-registration"""
    password: str = Field(..., min_length=8, max_length=72, description="Password (minimum 8 characters)")
    confirm_password: str = Field(..., description="Password confirmation")

    @validator('password')
    def validate_password(cls, v):
        # Check for at least one uppercase, one lowercase, one digit, one special character
        if not re.search(r'[A-Z]', v):
            raise ValueError('Password must contain at least one uppercase letter')
        if not re.search(r'[a-z]', v):
            raise ValueError('Password must contain at least one lowercase letter')
        if not re.search(r'\d', v):
            raise ValueError('Password must contain at least one digit')
        if not re.search(r'[!@#$%^&*(),.?":{}|<>]', v):
            raise ValueError('Password must contain at least one special character')
        return v

    @validator('confirm_password')
    def passwords_match(cls, v, values, **kwargs):
        if 'password' in values and v != values['password']:
            raise ValueError('Passwords do not match')
        return v

class UserLogin(BaseModel):
    """Schema for user login"""
    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password")

    @validator('email')
    def validate_email(cls, v):
        v = v.strip().lower()
        if not v:
            raise ValueError('Email is required')
        return v

class RoleUpdate(BaseModel):
    """Schema for an admin changing a user's role"""
    role: Role

class UserResponse(BaseModel):
    """Schema for user responses (excludes sensitive data)"""
    id: str
    email: str
    full_name: str
    phone: Optional[str]
    role: str
    is_active: bool
    is_verified: bool
    last_login: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True

class TokenResponse(BaseModel):
    """Schema for authentication token response"""
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse

class UserListResponse(BaseModel):
    """Schema for paginated user list response"""
    users: list[UserResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
