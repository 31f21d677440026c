import asyncio
from datetime import datetime, timedelta
import secrets
from typing import Optional, Tuple

from jose import jws
from jose.exceptions import JOSEError
from werkzeug.security import check_password_hash, generate_password_hash

from staffpanel.core.config import settings

# scrypt, N=2**14 r=8 p=1: 16 MiB per derivation
PASSWORD_HASH_METHOD = "scrypt:16384:8:1"
SALT_LENGTH = 16


def hash_password(plain_password: str) -> str:
    """Return werkzeug's "scrypt:16384:8:1$<salt>$<hash-hex>"."""
    return generate_password_hash(plain_password, method=PASSWORD_HASH_METHOD, salt_length=SALT_LENGTH)


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return check_password_hash(password_hash, plain_password)
    except (AttributeError, TypeError, ValueError):
        # Stored value is malformed or names an unknown method
        return False


async def hash_password_async(plain_password: str) -> str:
    return await asyncio.to_thread(hash_password, plain_password)


async def verify_password_async(plain_password: str, password_hash: str) -> bool:
    return await asyncio.to_thread(verify_password, plain_password, password_hash)


def create_session_token(*, expires_days: Optional[int] = None) -> Tuple[str, datetime]:
    if expires_days is None:
        expires_days = settings.session_max_age_days
    expire = datetime.utcnow() + timedelta(days=expires_days)
    token = secrets.token_urlsafe(48)
    return token, expire


def sign_session_token(token: str) -> str:
    """Cookie value: JWS over the opaque session token."""
    return jws.sign(token.encode("utf-8"), settings.session_secret, algorithm=settings.session_algorithm)


def unsign_session_token(cookie_value: Optional[str]) -> Optional[str]:
    if not cookie_value:
        return None
    try:
        payload = jws.verify(cookie_value, settings.session_secret, algorithms=[settings.session_algorithm])
    except JOSEError:
        return None
    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError:
        return None
