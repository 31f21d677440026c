from datetime import datetime
from typing import Optional

from staffpanel.auth.schemas import UserWithRole
from staffpanel.core.schemas import CamelModel


class AttendanceRecord(CamelModel):
    """Single clock-in/out record."""

    id: int
    user_id: int
    clock_in: datetime
    clock_out: Optional[datetime] = None
    date: str


class AttendanceWithUser(AttendanceRecord):
    user: UserWithRole
