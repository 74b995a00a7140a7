"""
Authentication and user Pydantic schemas.

Defines request and response schemas for authentication and user
management endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from backoffice.app.models.enums import UserRole
from backoffice.app.schemas.common import CamelModel


class UserLogin(BaseModel):
    """
    Schema for user login.

    Used by POST /auth/login endpoint.
    """
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="Password")


class UserPublic(CamelModel):
    """Public projection returned by login and verify."""
    id: str
    name: str
    email: str
    role: UserRole


class LoginResponse(BaseModel):
    """
    Schema for a successful login.

    The same token is also set as the session cookie.
    """
    success: bool = True
    message: str = "Login successful"
    token: str = Field(..., description="Signed session token")
    user: UserPublic


class VerifyResponse(BaseModel):
    success: bool = True
    message: str = "Authenticated"
    user: UserPublic


class UserCreate(CamelModel):
    """
    Schema for creating a user (admin action).

    Default role is USER.
    """
    name: str = Field(..., min_length=1, max_length=150, description="Display name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")
    role: UserRole = Field(default=UserRole.USER, description="User role")


class UserUpdate(CamelModel):
    """Schema for partially updating a user; the password is re-hashed when sent."""
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class UserResponse(CamelModel):
    """
    Schema for user information response.

    Never includes the password hash or login-attempt bookkeeping.
    """
    id: str
    name: str
    email: str
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime
