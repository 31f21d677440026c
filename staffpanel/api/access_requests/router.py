from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from staffpanel.auth.rbac import require_admin
from staffpanel.core.email import send_access_approved_email, send_access_rejected_email
from staffpanel.core.exceptions import ServiceError
from staffpanel.core.outbox import Outbox, get_outbox
from staffpanel.core.schemas import SuccessResponse
from staffpanel.db.session import get_db

from . import service
from .schemas import AccessRequestCreate, AccessRequestResponse

router = APIRouter(prefix="/api/access-requests", tags=["access-requests"])


@router.post(
    "",
    response_model=AccessRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_access_request(
    payload: AccessRequestCreate,
    db: AsyncSession = Depends(get_db),
) -> AccessRequestResponse:
    """Public: request an account. An admin must approve it before login works."""
    try:
        return await service.create_access_request(db, payload)
    except ServiceError as e:
        raise e.to_http()


@router.get(
    "",
    response_model=List[AccessRequestResponse],
    dependencies=[Depends(require_admin)],
)
async def list_access_requests(
    db: AsyncSession = Depends(get_db),
) -> List[AccessRequestResponse]:
    return await service.list_access_requests(db)


@router.post(
    "/{request_id}/approve",
    response_model=SuccessResponse,
    dependencies=[Depends(require_admin)],
)
async def approve_access_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    outbox: Outbox = Depends(get_outbox),
) -> SuccessResponse:
    try:
        req = await service.approve_access_request(db, request_id)
    except ServiceError as e:
        raise e.to_http()
    if req.email:
        outbox.add(send_access_approved_email, req.email, req.username)
    return SuccessResponse()


@router.post(
    "/{request_id}/reject",
    response_model=SuccessResponse,
    dependencies=[Depends(require_admin)],
)
async def reject_access_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    outbox: Outbox = Depends(get_outbox),
) -> SuccessResponse:
    try:
        req = await service.reject_access_request(db, request_id)
    except ServiceError as e:
        raise e.to_http()
    if req.email:
        outbox.add(send_access_rejected_email, req.email, req.username)
    return SuccessResponse()
