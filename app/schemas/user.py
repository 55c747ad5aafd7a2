"""
User request / response schemas.

POST /users/sync → UserSyncRequest → UserResponse
GET  /users/me   → UserResponse
"""
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class UserSyncRequest(BaseModel):
    """Identity forwarded by the gateway after a successful external login."""
    open_id: Annotated[str, Field(
        min_length=1,
        max_length=64,
        description="Stable external identity. Upsert key.",
        examples=["oauth|9f2c1e"],
    )]
    name: Optional[str] = Field(default=None, description="Display name.")
    email: Optional[str] = Field(default=None, max_length=320)
    login_method: Optional[str] = Field(default=None, max_length=64, examples=["google"])
    role: Optional[Literal["user", "admin"]] = Field(
        default=None,
        description="Omit to keep the stored role (owner open_id is promoted to admin).",
    )


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    open_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    login_method: Optional[str] = None
    role: str
    created_at: str
    last_signed_in: str
