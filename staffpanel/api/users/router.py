from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from staffpanel.auth.dependencies import get_current_user
from staffpanel.auth.rbac import require_admin
from staffpanel.auth.schemas import CurrentUser, UserWithRole
from staffpanel.core.exceptions import ServiceError
from staffpanel.core.schemas import SuccessResponse
from staffpanel.core.uploads import discard_media, save_media
from staffpanel.db.session import get_db

from . import service
from .schemas import ChangePasswordRequest, RoleAssign

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/users", response_model=List[UserWithRole])
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[UserWithRole]:
    """All users with their role badge, newest first."""
    return await service.list_users(db)


@router.patch(
    "/users/{user_id}/role",
    response_model=SuccessResponse,
    dependencies=[Depends(require_admin)],
)
async def assign_role(
    user_id: int,
    payload: RoleAssign,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    try:
        await service.assign_role(db, user_id, payload.role_id)
    except ServiceError as e:
        raise e.to_http()
    return SuccessResponse()


@router.patch("/user/profile", response_model=UserWithRole)
async def update_profile(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None, description="jpeg/png/gif/webp/mp4/webm/mov, up to 10MB"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> UserWithRole:
    avatar_url = None
    try:
        if avatar is not None and avatar.filename:
            avatar_url = await save_media(avatar)
        return await service.update_profile(db, current_user.id, name, email, avatar_url)
    except ServiceError as e:
        discard_media(avatar_url)
        raise e.to_http()


@router.post("/user/change-password", response_model=SuccessResponse)
async def change_password(
    payload: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse:
    try:
        await service.change_password(db, current_user.id, payload)
    except ServiceError as e:
        raise e.to_http()
    return SuccessResponse()
