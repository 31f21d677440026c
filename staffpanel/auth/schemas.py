from typing import Optional

from pydantic import Field

from staffpanel.core.schemas import CamelModel


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RoleInfo(CamelModel):
    id: int
    name: str
    color: str


class UserWithRole(CamelModel):
    """User as seen by clients: never carries the password hash."""

    id: int
    username: str
    email: str
    name: str
    avatar: Optional[str] = None
    is_admin: bool
    role_id: Optional[int] = None
    is_approved: bool
    role: Optional[RoleInfo] = None


class CurrentUser(CamelModel):
    """Lightweight representation of the authenticated user for route gates."""

    id: int
    username: str
    name: str
    email: str
    is_admin: bool
