from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

import staffpanel.api.attendance.service as attendance_service
from staffpanel.auth.models import User
from staffpanel.core.clock import today_key
from staffpanel.core.models import Attendance


@pytest.mark.asyncio
async def test_today_is_null_before_clock_in(staff_client: AsyncClient) -> None:
    response = await staff_client.get("/api/attendance/today")
    assert response.status_code == 200
    assert response.json() is None


@pytest.mark.asyncio
async def test_clock_in_then_out(staff_client: AsyncClient, staff: User) -> None:
    clocked_in = await staff_client.post("/api/attendance/clock-in")
    assert clocked_in.status_code == 201
    record = clocked_in.json()
    assert record["userId"] == staff.id
    assert record["date"] == today_key()
    assert record["clockOut"] is None

    today = (await staff_client.get("/api/attendance/today")).json()
    assert today["id"] == record["id"]

    clocked_out = await staff_client.post("/api/attendance/clock-out")
    assert clocked_out.status_code == 200
    out = clocked_out.json()
    assert out["id"] == record["id"]
    assert out["clockOut"] is not None
    assert datetime.fromisoformat(out["clockOut"]) >= datetime.fromisoformat(out["clockIn"])


@pytest.mark.asyncio
async def test_double_clock_in_rejected(staff_client: AsyncClient) -> None:
    assert (await staff_client.post("/api/attendance/clock-in")).status_code == 201
    again = await staff_client.post("/api/attendance/clock-in")
    assert again.status_code == 400
    assert again.json()["detail"] == "Already clocked in today"


@pytest.mark.asyncio
async def test_clock_out_without_clock_in(staff_client: AsyncClient) -> None:
    response = await staff_client.post("/api/attendance/clock-out")
    assert response.status_code == 400
    assert response.json()["detail"] == "Not clocked in today"


@pytest.mark.asyncio
async def test_double_clock_out_rejected(staff_client: AsyncClient) -> None:
    await staff_client.post("/api/attendance/clock-in")
    first = (await staff_client.post("/api/attendance/clock-out")).json()

    again = await staff_client.post("/api/attendance/clock-out")
    assert again.status_code == 400
    assert again.json()["detail"] == "Already clocked out today"

    # Clocked out is terminal for the day
    assert (await staff_client.post("/api/attendance/clock-in")).status_code == 400
    today = (await staff_client.get("/api/attendance/today")).json()
    assert today["clockOut"] == first["clockOut"]


@pytest.mark.asyncio
async def test_clock_out_before_clock_in_time_rejected(
    staff_client: AsyncClient, db_session: AsyncSession, staff: User
) -> None:
    await staff_client.post("/api/attendance/clock-in")
    await db_session.execute(
        update(Attendance)
        .where(Attendance.user_id == staff.id)
        .values(clock_in=datetime.utcnow() + timedelta(hours=1))
    )
    await db_session.commit()

    response = await staff_client.post("/api/attendance/clock-out")
    assert response.status_code == 400
    assert response.json()["detail"] == "Clock-out time cannot be earlier than clock-in time"


@pytest.mark.asyncio
async def test_concurrent_clock_in_hits_unique_constraint(
    staff_client: AsyncClient, db_session: AsyncSession, staff: User, monkeypatch
) -> None:
    async def stale_lookup(db, user_id, day):
        # Both requests see "no record yet", as two racing requests would
        return None

    monkeypatch.setattr(attendance_service, "get_day_record", stale_lookup)

    assert (await staff_client.post("/api/attendance/clock-in")).status_code == 201
    loser = await staff_client.post("/api/attendance/clock-in")
    assert loser.status_code == 400
    assert loser.json()["detail"] == "Already clocked in today"

    count = await db_session.scalar(
        select(func.count()).select_from(Attendance).where(Attendance.user_id == staff.id)
    )
    assert count == 1


@pytest.mark.asyncio
async def test_listing_scopes(
    admin: User, staff: User, admin_client: AsyncClient, staff_client: AsyncClient
) -> None:
    await staff_client.post("/api/attendance/clock-in")
    await admin_client.post("/api/attendance/clock-in")

    everyone = (await admin_client.get("/api/attendance")).json()
    assert {r["userId"] for r in everyone} == {admin.id, staff.id}
    assert all("user" in r for r in everyone)

    own = (await staff_client.get("/api/attendance")).json()
    assert [r["userId"] for r in own] == [staff.id]
    assert own[0]["user"]["username"] == "alice"
