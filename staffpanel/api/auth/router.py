from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi import status as http_status
from sqlalchemy.ext.asyncio import AsyncSession

from staffpanel.auth.dependencies import (
    clear_session_cookie,
    get_current_user,
    session_cookie,
    set_session_cookie,
)
from staffpanel.auth.schemas import CurrentUser, LoginRequest, UserWithRole
from staffpanel.auth.security import unsign_session_token
from staffpanel.auth.services import (
    authenticate,
    close_session,
    get_user_with_role,
    open_session,
)
from staffpanel.core.exceptions import ServiceError
from staffpanel.core.schemas import SuccessResponse
from staffpanel.db.session import get_db

router = APIRouter(prefix="/api", tags=["auth"])


@router.post(
    "/login",
    response_model=UserWithRole,
    status_code=http_status.HTTP_200_OK,
)
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> UserWithRole:
    try:
        user = await authenticate(db, payload)
        token = await open_session(db, user)
    except ServiceError as e:
        raise e.to_http()
    set_session_cookie(response, token)
    return await get_user_with_role(db, user.id)


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    response: Response,
    cookie_value: Optional[str] = Depends(session_cookie),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuccessResponse:
    await close_session(db, unsign_session_token(cookie_value))
    clear_session_cookie(response)
    return SuccessResponse()


@router.get("/user", response_model=UserWithRole)
async def me(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> UserWithRole:
    user = await get_user_with_role(db, current_user.id)
    if user is None:
        raise HTTPException(status_code=http_status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
