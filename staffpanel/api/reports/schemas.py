from datetime import datetime

from pydantic import Field

from staffpanel.auth.schemas import UserWithRole
from staffpanel.core.enums import ReportStatus
from staffpanel.core.schemas import CamelModel, TrimmedStr


class WorkReportCreate(CamelModel):
    title: TrimmedStr = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)


class WorkReportStatusUpdate(CamelModel):
    status: ReportStatus


class WorkReportWithUser(CamelModel):
    id: int
    user_id: int
    title: str
    content: str
    status: str
    created_at: datetime
    user: UserWithRole


class ReportStats(CamelModel):
    pending_count: int
