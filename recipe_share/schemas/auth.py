"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None
