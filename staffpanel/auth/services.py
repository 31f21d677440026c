import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple

from fastapi import status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from staffpanel.auth.models import Role, User, UserSession
from staffpanel.auth.schemas import LoginRequest, RoleInfo, UserWithRole
from staffpanel.auth.security import create_session_token, verify_password_async
from staffpanel.core.config import settings
from staffpanel.core.exceptions import ServiceError

logger = logging.getLogger(__name__)


def role_to_info(role: Optional[Role]) -> Optional[RoleInfo]:
    if role is None:
        return None
    return RoleInfo(id=role.id, name=role.name, color=role.color)


def user_to_response(user: User) -> UserWithRole:
    """Requires user.role to be loaded (selectinload)."""
    return UserWithRole(
        id=user.id,
        username=user.username,
        email=user.email,
        name=user.name,
        avatar=user.avatar,
        is_admin=user.is_admin,
        role_id=user.role_id,
        is_approved=user.is_approved,
        role=role_to_info(user.role),
    )


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    result = await db.execute(
        select(User)
        .options(selectinload(User.role))
        .where(User.id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def get_user_with_role(db: AsyncSession, user_id: int) -> Optional[UserWithRole]:
    user = await get_user(db, user_id)
    if user is None:
        return None
    return user_to_response(user)


async def authenticate(db: AsyncSession, payload: LoginRequest) -> User:
    user = await get_user_by_username(db, payload.username)
    if not user or not await verify_password_async(payload.password, user.password_hash):
        logger.info("Failed login for username %r", payload.username)
        raise ServiceError("Invalid credentials", status.HTTP_401_UNAUTHORIZED)
    if not user.can_login:
        raise ServiceError("Account pending approval", status.HTTP_401_UNAUTHORIZED)
    return user


async def open_session(db: AsyncSession, user: User) -> str:
    """Persist a new session for user and return its opaque token."""
    token, expires_at = create_session_token()
    await db.execute(
        delete(UserSession).where(
            UserSession.user_id == user.id,
            UserSession.expires_at <= datetime.utcnow(),
        )
    )
    db.add(UserSession(user_id=user.id, token=token, expires_at=expires_at))
    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        raise ServiceError(
            "Failed to persist authentication state",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        ) from e
    return token


async def close_session(db: AsyncSession, token: Optional[str]) -> None:
    if not token:
        return
    await db.execute(delete(UserSession).where(UserSession.token == token))
    await db.commit()


async def resolve_session(db: AsyncSession, token: str) -> Tuple[Optional[User], bool]:
    """Return (user, renewed) for a session token; user is None if missing or expired.

    Sessions slide: once less than half of the lifetime remains, expires_at is
    pushed a full window forward from now and renewed is True.
    """
    result = await db.execute(
        select(UserSession)
        .options(selectinload(UserSession.user).selectinload(User.role))
        .where(UserSession.token == token)
    )
    session = result.scalar_one_or_none()
    if session is None:
        return None, False

    now = datetime.utcnow()
    if session.expires_at <= now:
        await db.delete(session)
        await db.commit()
        return None, False

    window = timedelta(days=settings.session_max_age_days)
    if session.expires_at - now < window / 2:
        session.expires_at = now + window
        await db.commit()
        return session.user, True
    return session.user, False
