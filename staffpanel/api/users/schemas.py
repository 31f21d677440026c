from typing import Optional

from pydantic import Field

from staffpanel.core.schemas import CamelModel


class RoleAssign(CamelModel):
    # null removes the badge
    role_id: Optional[int] = None


class ChangePasswordRequest(CamelModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)
