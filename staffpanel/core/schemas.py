from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

# Leading/trailing whitespace is removed before length checks run
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire (isAdmin, roleId, createdAt, ...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SuccessResponse(CamelModel):
    success: bool = True
