from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from staffpanel.db.session import Base


class User(Base):
    """Staff account. Only approved users (or admins) may log in."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False, unique=True)
    # werkzeug scrypt hash: "scrypt:16384:8:1$<salt>$<hash-hex>"
    password_hash = Column(Text, nullable=False)
    email = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    # Public path under /uploads
    avatar = Column(Text, nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="SET NULL"), nullable=True, index=True)
    is_approved = Column(Boolean, nullable=False, default=False)

    role = relationship("Role", back_populates="users")
    sessions = relationship(
        "UserSession", back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def can_login(self) -> bool:
        return bool(self.is_admin or self.is_approved)


class Role(Base):
    """Named, colored badge shown next to a user's name."""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    color = Column(String(20), nullable=False)  # hex, e.g. #3b82f6

    users = relationship("User", back_populates="role")


class UserSession(Base):
    """Server-side login session; the client only holds the signed token."""

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(128), nullable=False, unique=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="sessions")
