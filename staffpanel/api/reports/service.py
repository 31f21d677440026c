from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from staffpanel.auth.models import User
from staffpanel.auth.schemas import CurrentUser
from staffpanel.auth.services import user_to_response
from staffpanel.core.enums import ReportStatus
from staffpanel.core.exceptions import forbidden, not_found
from staffpanel.core.models import WorkReport

from .schemas import WorkReportCreate, WorkReportWithUser


def _report_to_response(r: WorkReport) -> WorkReportWithUser:
    return WorkReportWithUser(
        id=r.id,
        user_id=r.user_id,
        title=r.title,
        content=r.content,
        status=r.status,
        created_at=r.created_at,
        user=user_to_response(r.user),
    )


def _with_user():
    return selectinload(WorkReport.user).selectinload(User.role)


async def get_work_report(db: AsyncSession, report_id: int) -> Optional[WorkReport]:
    return await db.get(WorkReport, report_id)


async def list_all_reports(db: AsyncSession) -> List[WorkReportWithUser]:
    result = await db.execute(
        select(WorkReport).options(_with_user()).order_by(WorkReport.created_at.desc(), WorkReport.id.desc())
    )
    return [_report_to_response(r) for r in result.scalars().all()]


async def list_user_reports(db: AsyncSession, user_id: int) -> List[WorkReportWithUser]:
    result = await db.execute(
        select(WorkReport)
        .options(_with_user())
        .where(WorkReport.user_id == user_id)
        .order_by(WorkReport.created_at.desc(), WorkReport.id.desc())
    )
    return [_report_to_response(r) for r in result.scalars().all()]


async def count_pending(db: AsyncSession, user_id: Optional[int] = None) -> int:
    """Pending reports overall, or for one submitter when user_id is given."""
    q = select(func.count(WorkReport.id)).where(WorkReport.status == ReportStatus.PENDING.value)
    if user_id is not None:
        q = q.where(WorkReport.user_id == user_id)
    result = await db.execute(q)
    return result.scalar_one()


async def create_report(db: AsyncSession, user_id: int, payload: WorkReportCreate) -> WorkReportWithUser:
    report = WorkReport(
        user_id=user_id,
        title=payload.title,
        content=payload.content,
        status=ReportStatus.PENDING.value,
    )
    db.add(report)
    await db.commit()
    result = await db.execute(
        select(WorkReport)
        .options(_with_user())
        .where(WorkReport.id == report.id)
        .execution_options(populate_existing=True)
    )
    return _report_to_response(result.scalar_one())


async def update_report_status(
    db: AsyncSession,
    reviewer: CurrentUser,
    report_id: int,
    new_status: ReportStatus,
) -> None:
    """Admin review. Nobody reviews their own report."""
    report = await get_work_report(db, report_id)
    if report is None:
        raise not_found("Report")
    if report.user_id == reviewer.id:
        raise forbidden("You cannot review your own report")
    report.status = new_status.value
    await db.commit()
