from typing import List

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from staffpanel.auth.models import Role, User
from staffpanel.core.exceptions import bad_request, not_found

from .schemas import RoleCreate, RoleResponse


def _role_to_response(role: Role) -> RoleResponse:
    return RoleResponse(id=role.id, name=role.name, color=role.color)


async def list_roles(db: AsyncSession) -> List[RoleResponse]:
    result = await db.execute(select(Role).order_by(Role.name))
    return [_role_to_response(r) for r in result.scalars().all()]


async def create_role(db: AsyncSession, payload: RoleCreate) -> RoleResponse:
    role = Role(name=payload.name, color=payload.color)
    db.add(role)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise bad_request("A role with this name already exists")
    await db.refresh(role)
    return _role_to_response(role)


async def delete_role(db: AsyncSession, role_id: int) -> int:
    """Detach the role from every user, then delete it. Returns how many users were detached."""
    role = await db.get(Role, role_id)
    if role is None:
        raise not_found("Role")
    detached = await db.execute(
        update(User)
        .where(User.role_id == role_id)
        .values(role_id=None)
        .execution_options(synchronize_session="fetch")
    )
    await db.execute(delete(Role).where(Role.id == role_id))
    await db.commit()
    return detached.rowcount
