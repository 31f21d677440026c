"""Self-registration requests awaiting admin approval."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from staffpanel.core.enums import AccessRequestStatus
from staffpanel.db.session import Base


class AccessRequest(Base):
    """Approval creates a separate User row; nothing links the two afterwards."""

    __tablename__ = "access_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False, unique=True)
    email = Column(String(255), nullable=False)
    password_hash = Column(Text, nullable=False)
    name = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, default=AccessRequestStatus.PENDING.value)
    requested_at = Column(DateTime, default=datetime.utcnow, nullable=False)
