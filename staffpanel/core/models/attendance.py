from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from staffpanel.db.session import Base


class Attendance(Base):
    """Clock-in/out record: one per user per calendar date."""

    __tablename__ = "attendance"
    __table_args__ = (
        # Second clock-in on the same date fails here even when requests race
        UniqueConstraint("user_id", "date", name="uq_attendance_user_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    clock_in = Column(DateTime, nullable=False)
    clock_out = Column(DateTime, nullable=True)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD

    user = relationship("User", foreign_keys=[user_id])
