"""
User management API endpoints.

Reads are open to admins and managers; writes are admin-only.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from backoffice.app.core.exceptions import ConflictError, ResourceNotFoundError
from backoffice.app.core.guards import require_admin, require_staff
from backoffice.app.core.security import get_password_hash
from backoffice.app.db.session import get_db
from backoffice.app.models.user import User
from backoffice.app.schemas.auth import UserCreate, UserResponse, UserUpdate
from backoffice.app.schemas.common import Envelope, MessageResponse, NonEmptyStr

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])


async def _get_user_or_404(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise ResourceNotFoundError("User", user_id)
    return user


@router.get("/users", response_model=Envelope[List[UserResponse]])
async def list_users(
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    """List all users, newest first."""
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.email))
    users = result.scalars().all()
    return Envelope(
        message="Users retrieved",
        data=[UserResponse.model_validate(user) for user in users],
    )


@router.get("/users/{user_id}", response_model=Envelope[UserResponse])
@router.get("/user/{user_id}", response_model=Envelope[UserResponse], include_in_schema=False)
async def get_user(
    user_id: NonEmptyStr,
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    user = await _get_user_or_404(db, user_id)
    return Envelope(message="User retrieved", data=UserResponse.model_validate(user))


@router.post("/users", response_model=Envelope[UserResponse], status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a user (admin-only).

    The unique email constraint decides duplicates.
    """
    user = User(
        name=user_data.name,
        email=user_data.email,
        hashed_password=await run_in_threadpool(get_password_hash, user_data.password),
        role=user_data.role,
        is_active=True,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("User", message="A user with this email already exists")

    await db.refresh(user)
    logger.info("User %s created by %s", user.id, admin.id)
    return Envelope(message="User created", data=UserResponse.model_validate(user))


@router.put("/users/{user_id}", response_model=Envelope[UserResponse])
@router.put("/user/{user_id}", response_model=Envelope[UserResponse], include_in_schema=False)
async def update_user(
    user_id: NonEmptyStr,
    user_data: UserUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Partially update a user; a new password is re-hashed."""
    user = await _get_user_or_404(db, user_id)

    changes = user_data.model_dump(exclude_unset=True, exclude_none=True)
    password = changes.pop("password", None)
    if password is not None:
        user.hashed_password = await run_in_threadpool(get_password_hash, password)
    for field, value in changes.items():
        setattr(user, field, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("User", message="This email is already in use by another user")

    await db.refresh(user)
    return Envelope(message="User updated", data=UserResponse.model_validate(user))


@router.delete("/users/{user_id}", response_model=MessageResponse)
@router.delete("/user/{user_id}", response_model=MessageResponse, include_in_schema=False)
async def delete_user(
    user_id: NonEmptyStr,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await _get_user_or_404(db, user_id)
    await db.delete(user)
    await db.commit()
    logger.info("User %s deleted by %s", user_id, admin.id)
    return MessageResponse(message="User deleted")
