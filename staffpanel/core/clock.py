from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

from staffpanel.core.config import settings


def attendance_zone() -> tzinfo:
    name = settings.attendance_timezone
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def today_key() -> str:
    """Calendar date (YYYY-MM-DD) that keys today's attendance record."""
    return datetime.now(attendance_zone()).date().isoformat()
