from datetime import datetime
from typing import Annotated, Optional

from pydantic import Field, StringConstraints

from staffpanel.auth.schemas import UserWithRole
from staffpanel.core.enums import TaskPriority, TaskStatus
from staffpanel.core.schemas import CamelModel, TrimmedStr


class TaskCreate(CamelModel):
    title: TrimmedStr = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    assigned_to: Optional[int] = None
    due_date: Optional[datetime] = None


class TaskUpdate(CamelModel):
    """Partial update. Non-admin assignees may only send status."""

    title: Optional[Annotated[TrimmedStr, StringConstraints(min_length=1, max_length=255)]] = None
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    assigned_to: Optional[int] = None
    due_date: Optional[datetime] = None


class TaskWithUsers(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    priority: str
    status: str
    assigned_to: Optional[int] = None
    created_by: int
    due_date: Optional[datetime] = None
    created_at: datetime
    assignee: Optional[UserWithRole] = None
    creator: UserWithRole
