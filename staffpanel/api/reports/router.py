from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from staffpanel.api.users.service import list_admins
from staffpanel.auth.dependencies import get_current_user
from staffpanel.auth.rbac import require_admin
from staffpanel.auth.schemas import CurrentUser
from staffpanel.core.email import send_report_submitted_email
from staffpanel.core.exceptions import ServiceError
from staffpanel.core.outbox import Outbox, get_outbox
from staffpanel.core.schemas import SuccessResponse
from staffpanel.db.session import get_db

from . import service
from .schemas import ReportStats, WorkReportCreate, WorkReportStatusUpdate, WorkReportWithUser

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("", response_model=List[WorkReportWithUser])
async def list_reports(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[WorkReportWithUser]:
    """Admin: all reports. Others: their own."""
    if current_user.is_admin:
        return await service.list_all_reports(db)
    return await service.list_user_reports(db, current_user.id)


@router.get("/stats", response_model=ReportStats)
async def report_stats(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ReportStats:
    user_id = None if current_user.is_admin else current_user.id
    return ReportStats(pending_count=await service.count_pending(db, user_id))


@router.post("", response_model=WorkReportWithUser, status_code=status.HTTP_201_CREATED)
async def submit_report(
    payload: WorkReportCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    outbox: Outbox = Depends(get_outbox),
) -> WorkReportWithUser:
    """Submit a work report; every admin is notified by email."""
    report = await service.create_report(db, current_user.id, payload)
    submitter = current_user.name or current_user.username
    for admin in await list_admins(db):
        if admin.email:
            outbox.add(send_report_submitted_email, admin.email, submitter, report.title, report.content)
    return report


@router.patch(
    "/{report_id}",
    response_model=SuccessResponse,
)
async def review_report(
    report_id: int,
    payload: WorkReportStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
) -> SuccessResponse:
    try:
        await service.update_report_status(db, current_user, report_id, payload.status)
    except ServiceError as e:
        raise e.to_http()
    return SuccessResponse()
