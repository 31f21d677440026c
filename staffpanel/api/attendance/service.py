"""Clock-in/out per user per calendar date: absent -> clocked_in -> clocked_out.

clocked_out is terminal for the day. Both guards are enforced in the database
as well (unique (user_id, date); conditional UPDATE on clock_out IS NULL) so
concurrent requests cannot double clock-in or double clock-out.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from staffpanel.auth.models import User
from staffpanel.auth.services import user_to_response
from staffpanel.core.clock import today_key
from staffpanel.core.exceptions import bad_request
from staffpanel.core.models import Attendance

from .schemas import AttendanceRecord, AttendanceWithUser


def _record_to_response(a: Attendance) -> AttendanceRecord:
    return AttendanceRecord(
        id=a.id,
        user_id=a.user_id,
        clock_in=a.clock_in,
        clock_out=a.clock_out,
        date=a.date,
    )


def _record_with_user(a: Attendance) -> AttendanceWithUser:
    return AttendanceWithUser(
        id=a.id,
        user_id=a.user_id,
        clock_in=a.clock_in,
        clock_out=a.clock_out,
        date=a.date,
        user=user_to_response(a.user),
    )


async def get_day_record(db: AsyncSession, user_id: int, day: str) -> Optional[Attendance]:
    result = await db.execute(
        select(Attendance)
        .where(Attendance.user_id == user_id, Attendance.date == day)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_today(db: AsyncSession, user_id: int) -> Optional[AttendanceRecord]:
    record = await get_day_record(db, user_id, today_key())
    return _record_to_response(record) if record is not None else None


async def _list(db: AsyncSession, user_id: Optional[int] = None) -> List[AttendanceWithUser]:
    q = select(Attendance).options(selectinload(Attendance.user).selectinload(User.role))
    if user_id is not None:
        q = q.where(Attendance.user_id == user_id)
    q = q.order_by(Attendance.clock_in.desc(), Attendance.id.desc())
    result = await db.execute(q)
    return [_record_with_user(a) for a in result.scalars().all()]


async def list_all_attendance(db: AsyncSession) -> List[AttendanceWithUser]:
    return await _list(db)


async def list_user_attendance(db: AsyncSession, user_id: int) -> List[AttendanceWithUser]:
    return await _list(db, user_id)


async def clock_in(db: AsyncSession, user_id: int) -> AttendanceRecord:
    day = today_key()
    if await get_day_record(db, user_id, day) is not None:
        raise bad_request("Already clocked in today")
    record = Attendance(user_id=user_id, clock_in=datetime.utcnow(), clock_out=None, date=day)
    db.add(record)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent clock-in for the same day
        await db.rollback()
        raise bad_request("Already clocked in today")
    return _record_to_response(record)


async def clock_out(db: AsyncSession, user_id: int) -> AttendanceRecord:
    day = today_key()
    record = await get_day_record(db, user_id, day)
    if record is None:
        raise bad_request("Not clocked in today")
    if record.clock_out is not None:
        raise bad_request("Already clocked out today")

    now = datetime.utcnow()
    if now < record.clock_in:
        raise bad_request("Clock-out time cannot be earlier than clock-in time")
    result = await db.execute(
        update(Attendance)
        .where(Attendance.id == record.id, Attendance.clock_out.is_(None))
        .values(clock_out=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise bad_request("Already clocked out today")
    await db.commit()
    record = await get_day_record(db, user_id, day)
    return _record_to_response(record)
