from typing import Optional, Tuple

from fastapi import Depends, HTTPException, Response, status
from fastapi.security import APIKeyCookie
from sqlalchemy.ext.asyncio import AsyncSession

from staffpanel.auth.models import User
from staffpanel.auth.schemas import CurrentUser
from staffpanel.auth.security import sign_session_token, unsign_session_token
from staffpanel.auth.services import resolve_session
from staffpanel.core.config import settings
from staffpanel.db.session import get_db


session_cookie = APIKeyCookie(name=settings.session_cookie_name, auto_error=False)


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=sign_session_token(token),
        max_age=settings.session_max_age_days * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.session_cookie_name)


def to_current_user(user: User) -> CurrentUser:
    return CurrentUser(
        id=user.id,
        username=user.username,
        name=user.name,
        email=user.email,
        is_admin=user.is_admin,
    )


async def get_session_user(
    db: AsyncSession, cookie_value: Optional[str]
) -> Tuple[Optional[User], Optional[str]]:
    """Resolve a raw cookie value to (user, renewed_token).

    renewed_token is set only when the session's expiry was pushed forward and the
    cookie should be re-issued.
    """
    token = unsign_session_token(cookie_value)
    if token is None:
        return None, None
    user, renewed = await resolve_session(db, token)
    if user is None or not user.can_login:
        return None, None
    return user, token if renewed else None


async def get_current_user(
    response: Response,
    cookie_value: Optional[str] = Depends(session_cookie),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Resolve the authenticated user from the session cookie."""
    user, renewed_token = await get_session_user(db, cookie_value)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    if renewed_token:
        set_session_cookie(response, renewed_token)
    return to_current_user(user)
