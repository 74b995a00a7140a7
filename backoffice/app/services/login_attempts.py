"""
Failed-login bookkeeping for the temporary account lockout.

The counter and the timestamp of the last failure live on the user row.
An account is locked once it reaches the configured number of failures
and stays locked until the lockout window after the last failure passes.
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import and_, case, update
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.app.core.config import settings
from backoffice.app.models.user import User

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_locked_out(user: User, now: datetime) -> bool:
    if (user.login_attempts or 0) < settings.login_max_attempts:
        return False
    if user.last_login_attempt is None:
        return False
    window = timedelta(minutes=settings.login_lockout_minutes)
    return _as_utc(now) - _as_utc(user.last_login_attempt) < window


async def register_failed_attempt(db: AsyncSession, user_id: str, now: datetime) -> int:
    """
    Count one failed login for ``user_id`` and return the new total.

    The increment happens in a single UPDATE so parallel failures are all
    counted. A failure after an expired lockout window starts a fresh count.
    The caller commits.
    """
    now = _as_utc(now)
    window_start = now - timedelta(minutes=settings.login_lockout_minutes)
    window_expired = and_(
        User.last_login_attempt.is_not(None),
        User.last_login_attempt <= window_start,
    )
    result = await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(
            login_attempts=case((window_expired, 1), else_=User.login_attempts + 1),
            last_login_attempt=now,
        )
        .returning(User.login_attempts)
        .execution_options(synchronize_session=False)
    )
    attempts = result.scalar_one()
    if attempts >= settings.login_max_attempts:
        logger.warning("User %s locked out after %d failed logins", user_id, attempts)
    return attempts


def reset_attempts(user: User) -> None:
    user.login_attempts = 0
    user.last_login_attempt = None
