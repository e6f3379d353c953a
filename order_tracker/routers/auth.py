"""
Authentication endpoints for signup, login and role management
"""

from fastapi import APIRouter, Depends, HTTPException, status, Request, Query
from sqlalchemy.orm import Session
from slowapi import Limiter
from slowapi.util import get_remote_address
from datetime import timedelta
from typing import Optional
import logging
import math

from order_tracker import config
from order_tracker.database import get_db
from order_tracker.schemas.user import (
    UserCreate, UserLogin, RoleUpdate, UserResponse, TokenResponse, UserListResponse
)
from order_tracker.services.user_service import UserService
from order_tracker.auth.auth_handler import AuthHandler, get_current_user, admin_required
from order_tracker.utils.enums import Role
from order_tracker.utils.error_handler import NotFoundError, PermissionDeniedError

logger = logging.getLogger(__name__)
limiter = Limiter(key_func=get_remote_address, enabled=config.RATE_LIMIT_ENABLED)

router = APIRouter()

@router.post("/signup", response_model=UserResponse, status_code=201)
@limiter.limit("5/minute")  # Strict limit to prevent spam registrations
async def signup(
    request: Request,
    user_data: UserCreate,
    db: Session = Depends(get_db)
):
    """Register a new customer account"""
    user_service = UserService(db)
    new_user = await user_service.create_user(user_data)

    logger.info(f"New user registered: {new_user.email}")
    return new_user

@router.post("/login", response_model=TokenResponse)
@limiter.limit("10/minute")  # Prevent brute force attacks
async def login(
    request: Request,
    login_data: UserLogin,
    db: Session = Depends(get_db)
):
    """Authenticate user and return access token"""
    user_service = UserService(db)
    auth_handler = AuthHandler()

    user = await user_service.authenticate_user(login_data)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    expires_in = config.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    token_data = {
        "sub": user.id,
        "role": user.role,
        "email": user.email
    }
    access_token = auth_handler.create_access_token(
        data=token_data,
        expires_delta=timedelta(seconds=expires_in)
    )

    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=expires_in,
        user=UserResponse.from_orm(user)
    )

@router.get("/me", response_model=UserResponse)
@limiter.limit("30/minute")
async def get_current_user_info(
    request: Request,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get current user information"""
    user_service = UserService(db)
    user = await user_service.get_user_by_id(current_user["user_id"])
    if not user:
        raise NotFoundError("User not found")

    return UserResponse.from_orm(user)

# Admin endpoints
@router.get("/users", response_model=UserListResponse)
@limiter.limit("20/minute")
async def get_users(
    request: Request,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    role: Optional[Role] = None,
    current_user: dict = Depends(admin_required),
    db: Session = Depends(get_db)
):
    """Get paginated list of users (Admin only)"""
    user_service = UserService(db)
    users, total = await user_service.get_users_paginated(page, page_size, role.value if role else None)

    return UserListResponse(
        users=[UserResponse.from_orm(user) for user in users],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size)
    )

@router.put("/users/{user_id}/role", response_model=UserResponse)
@limiter.limit("10/minute")
async def update_user_role(
    request: Request,
    user_id: str,
    role_update: RoleUpdate,
    current_user: dict = Depends(admin_required),
    db: Session = Depends(get_db)
):
    """Change a user's role (Admin only)"""
    # Only a super administrator may hand out administrative roles
    if role_update.role in (Role.ADMIN, Role.SUPER_ADMIN) and current_user["role"] != Role.SUPER_ADMIN.value:
        raise PermissionDeniedError("Only a super administrator can grant administrative roles")

    if user_id == current_user["user_id"]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot change your own role"
        )

    user_service = UserService(db)
    user = await user_service.update_role(user_id, role_update.role.value)

    logger.info(f"Admin {current_user['email']} set role of user {user_id} to {role_update.role.value}")
    return UserResponse.from_orm(user)
