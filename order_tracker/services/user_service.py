"""
User service for authentication and user management
Provides the user lookup the order lifecycle relies on
"""

from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from datetime import datetime
from typing import Optional
import logging

from order_tracker.models.user import User
from order_tracker.schemas.user import UserCreate, UserLogin
from order_tracker.auth.auth_handler import AuthHandler
from order_tracker.utils.enums import Role
from order_tracker.utils.error_handler import NotFoundError, StorageError

logger = logging.getLogger(__name__)

class UserService:
    """Service for user management operations"""

    def __init__(self, db: Session):
        self.db = db
        self.auth_handler = AuthHandler()

    def user_exists(self, user_id: str) -> bool:
        """Whether `user_id` references an existing user"""
        return self.db.query(User.id).filter(User.id == str(user_id)).first() is not None

    async def create_user(self, user_data: UserCreate, role: str = Role.CUSTOMER.value) -> User:
        """Create a new user account"""
        try:
            existing_user = self.db.query(User).filter(User.email == user_data.email.lower()).first()
            if existing_user:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="An account with this email already exists"
                )

            db_user = User(
                email=user_data.email.lower(),
                hashed_password=self.auth_handler.get_password_hash(user_data.password),
                full_name=user_data.full_name,
                phone=user_data.phone,
                role=role,
                is_active=True,
                is_verified=False
            )

            self.db.add(db_user)
            self.db.commit()
            self.db.refresh(db_user)

            logger.info(f"Created new user: {db_user.email} ({db_user.role})")
            return db_user

        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create user: {e}")
            raise StorageError(f"Failed to create user account: {str(e)}", e)

    async def authenticate_user(self, login_data: UserLogin) -> Optional[User]:
        """Authenticate user credentials"""
        user = self.db.query(User).filter(User.email == login_data.email.lower()).first()

        if not user:
            logger.warning(f"Login attempt with non-existent user: {login_data.email}")
            return None

        if not user.is_active:
            logger.warning(f"Login attempt with inactive user: {user.email}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Account is deactivated"
            )

        if not self.auth_handler.verify_password(login_data.password, user.hashed_password):
            logger.warning(f"Failed login attempt for user: {user.email}")
            return None

        user.last_login = datetime.utcnow()
        self.db.commit()

        logger.info(f"Successful login for user: {user.email}")
        return user

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == str(user_id)).first()

    async def update_role(self, user_id: str, role: str) -> User:
        """Change a user's role (admin operation)"""
        user = await self.get_user_by_id(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")

        try:
            user.role = role
            user.updated_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(user)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update role for user {user_id}: {e}")
            raise StorageError(f"Failed to update user role: {str(e)}", e)

        logger.info(f"Changed role of {user.email} to {role}")
        return user

    async def get_users_paginated(self, page: int = 1, page_size: int = 10, role: Optional[str] = None) -> tuple[list[User], int]:
        """Get paginated list of users"""
        query = self.db.query(User)
        if role:
            query = query.filter(User.role == role)

        total = query.count()
        offset = (page - 1) * page_size
        users = query.order_by(User.created_at.desc()).offset(offset).limit(page_size).all()
        return users, total
