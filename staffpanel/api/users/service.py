from typing import List, Optional

from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from staffpanel.auth.models import Role, User
from staffpanel.auth.schemas import UserWithRole
from staffpanel.auth.security import hash_password_async, verify_password_async
from staffpanel.auth.services import get_user, user_to_response
from staffpanel.core.exceptions import bad_request, not_found

from .schemas import ChangePasswordRequest

_email_adapter = TypeAdapter(EmailStr)


async def list_users(db: AsyncSession) -> List[UserWithRole]:
    result = await db.execute(
        select(User).options(selectinload(User.role)).order_by(User.id.desc())
    )
    return [user_to_response(u) for u in result.scalars().all()]


async def list_admins(db: AsyncSession) -> List[User]:
    result = await db.execute(select(User).where(User.is_admin.is_(True)))
    return list(result.scalars().all())


async def assign_role(db: AsyncSession, user_id: int, role_id: Optional[int]) -> None:
    user = await db.get(User, user_id)
    if user is None:
        raise not_found("User")
    if role_id is not None and await db.get(Role, role_id) is None:
        raise not_found("Role")
    user.role_id = role_id
    await db.commit()


async def update_profile(
    db: AsyncSession,
    user_id: int,
    name: Optional[str],
    email: Optional[str],
    avatar: Optional[str],
) -> UserWithRole:
    """Apply the provided profile fields; omitted (None/blank) fields stay unchanged."""
    user = await db.get(User, user_id)
    if user is None:
        raise not_found("User")
    if name is not None and name.strip():
        user.name = name.strip()
    if email is not None and email.strip():
        try:
            user.email = _email_adapter.validate_python(email.strip())
        except ValidationError:
            raise bad_request("Invalid email address")
    if avatar is not None:
        user.avatar = avatar
    await db.commit()
    return user_to_response(await get_user(db, user_id))


async def change_password(db: AsyncSession, user_id: int, payload: ChangePasswordRequest) -> None:
    user = await db.get(User, user_id)
    if user is None:
        raise not_found("User")
    if not await verify_password_async(payload.old_password, user.password_hash):
        raise bad_request("Current password is incorrect")
    user.password_hash = await hash_password_async(payload.new_password)
    await db.commit()
