"""
Dream request / response schemas.

POST  /dreams         → DreamCreateRequest → DreamCreatedResponse
PATCH /dreams/{id}    → DreamUpdateRequest → DreamOut
GET   /dreams         → DreamListResponse
GET   /dreams/{id}    → DreamDetailResponse
"""
from __future__ import annotations

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import AuthorOut, strip_non_empty

TITLE_MAX_LENGTH = 255

# Unix-ms range that converts to a datetime: 0001-01-02 .. 9999-12-31 UTC.
DREAM_DATE_MIN_MS = -62135510400000
DREAM_DATE_MAX_MS = 253402214400000


class DreamCreateRequest(BaseModel):
    title: Annotated[str, Field(
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
        examples=["Flying over a frozen sea"],
    )]
    content: Annotated[str, Field(
        min_length=1,
        description="Free-text account of the dream.",
    )]
    dream_date: int = Field(
        ge=DREAM_DATE_MIN_MS,
        le=DREAM_DATE_MAX_MS,
        description="When the dream happened, as unix milliseconds.",
        examples=[1760832000000],
    )
    image_url: Optional[str] = Field(default=None, description="Illustration URL.")
    image_key: Optional[str] = Field(default=None, description="Storage key of the illustration.")

    @field_validator("title", "content", mode="before")
    @classmethod
    def strip_and_check_empty(cls, v, info):
        return strip_non_empty(v, info.field_name)


class DreamUpdateRequest(BaseModel):
    """Partial update: only the fields present in the body are changed."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    content: Optional[str] = Field(default=None, min_length=1)
    dream_date: Optional[int] = Field(
        default=None, ge=DREAM_DATE_MIN_MS, le=DREAM_DATE_MAX_MS, description="Unix milliseconds.",
    )
    image_url: Optional[str] = None
    image_key: Optional[str] = None

    @field_validator("title", "content", "dream_date", mode="before")
    @classmethod
    def reject_blank(cls, v, info):
        return strip_non_empty(v, info.field_name)


class DreamCreatedResponse(BaseModel):
    dream_id: int


class DreamOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    content: str
    dream_date: int = Field(description="Unix milliseconds.")
    image_url: Optional[str] = None
    image_key: Optional[str] = None
    likes_count: int
    comments_count: int
    favorites_count: int
    average_rating: int = Field(description="Mean rating in tenths of a star (43 = 4.3).")
    rating_count: int
    created_at: str
    updated_at: str


class FeedDreamOut(DreamOut):
    author: Optional[AuthorOut] = None
    is_liked: bool = False
    is_favorited: bool = False


class DreamListResponse(BaseModel):
    items: list[FeedDreamOut]


class DreamDetailResponse(BaseModel):
    dream: DreamOut
    author: Optional[AuthorOut] = None
