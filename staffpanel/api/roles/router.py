from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from staffpanel.auth.dependencies import get_current_user
from staffpanel.auth.rbac import require_admin
from staffpanel.auth.schemas import CurrentUser
from staffpanel.core.exceptions import ServiceError
from staffpanel.core.schemas import SuccessResponse
from staffpanel.db.session import get_db

from . import service
from .schemas import RoleCreate, RoleResponse

router = APIRouter(prefix="/api/roles", tags=["roles"])


@router.get("", response_model=List[RoleResponse])
async def list_roles(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[RoleResponse]:
    return await service.list_roles(db)


@router.post(
    "",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_role(
    payload: RoleCreate,
    db: AsyncSession = Depends(get_db),
) -> RoleResponse:
    try:
        return await service.create_role(db, payload)
    except ServiceError as e:
        raise e.to_http()


@router.delete(
    "/{role_id}",
    response_model=SuccessResponse,
    dependencies=[Depends(require_admin)],
)
async def delete_role(
    role_id: int,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    try:
        await service.delete_role(db, role_id)
    except ServiceError as e:
        raise e.to_http()
    return SuccessResponse()
