from pydantic import Field

from staffpanel.core.schemas import CamelModel, TrimmedStr


class RoleCreate(CamelModel):
    name: TrimmedStr = Field(..., min_length=1, max_length=100)
    color: str = Field(..., pattern=r"^#(?:[0-9a-fA-F]{3}){1,2}$", description="Hex color, e.g. #3b82f6")


class RoleResponse(CamelModel):
    id: int
    name: str
    color: str
