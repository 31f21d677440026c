"""Attendance API router."""

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from staffpanel.auth.dependencies import get_current_user
from staffpanel.auth.schemas import CurrentUser
from staffpanel.core.exceptions import ServiceError
from staffpanel.db.session import get_db

from . import service
from .schemas import AttendanceRecord, AttendanceWithUser

router = APIRouter(prefix="/api/attendance", tags=["attendance"])


@router.get("", response_model=List[AttendanceWithUser])
async def list_attendance(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[AttendanceWithUser]:
    """Admin: everyone's records. Others: own records only."""
    if current_user.is_admin:
        return await service.list_all_attendance(db)
    return await service.list_user_attendance(db, current_user.id)


@router.get("/today", response_model=Optional[AttendanceRecord])
async def get_today(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Optional[AttendanceRecord]:
    """Today's record for the current user, or null before clock-in."""
    return await service.get_today(db, current_user.id)


@router.post(
    "/clock-in",
    response_model=AttendanceRecord,
    status_code=status.HTTP_201_CREATED,
)
async def clock_in(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> AttendanceRecord:
    try:
        return await service.clock_in(db, current_user.id)
    except ServiceError as e:
        raise e.to_http()


@router.post("/clock-out", response_model=AttendanceRecord)
async def clock_out(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> AttendanceRecord:
    try:
        return await service.clock_out(db, current_user.id)
    except ServiceError as e:
        raise e.to_http()
