from staffpanel.core.models.access_request import AccessRequest
from staffpanel.core.models.attendance import Attendance
from staffpanel.core.models.message import Message
from staffpanel.core.models.task import Task
from staffpanel.core.models.work_report import WorkReport

__all__ = [
    "AccessRequest",
    "Attendance",
    "Message",
    "Task",
    "WorkReport",
]
