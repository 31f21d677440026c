from datetime import datetime

from pydantic import EmailStr, Field

from staffpanel.core.schemas import CamelModel, TrimmedStr


class AccessRequestCreate(CamelModel):
    """Self-registration form submitted before the account exists."""

    username: TrimmedStr = Field(..., min_length=3, max_length=100)
    email: EmailStr
    name: TrimmedStr = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=6)


class AccessRequestResponse(CamelModel):
    id: int
    username: str
    email: str
    name: str
    status: str
    requested_at: datetime
