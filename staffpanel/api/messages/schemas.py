from datetime import datetime
from typing import Optional

from staffpanel.auth.schemas import UserWithRole
from staffpanel.core.schemas import CamelModel


class MessageWithSender(CamelModel):
    """Chat message joined with its sender. Deleted messages keep their slot but carry no content."""

    id: int
    sender_id: int
    content: Optional[str] = None
    message_type: str
    media_url: Optional[str] = None
    is_deleted: bool
    created_at: datetime
    sender: UserWithRole


class MessageStats(CamelModel):
    # Read tracking is not implemented; always 0
    unread_count: int = 0


class MessageDeleted(CamelModel):
    id: int
