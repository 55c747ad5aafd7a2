"""
Like, favorite and comment schemas.
"""
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import AuthorOut, strip_non_empty


class LikeToggleResponse(BaseModel):
    liked: bool
    likes_count: int


class LikeStatusResponse(BaseModel):
    liked: bool


class FavoriteToggleResponse(BaseModel):
    favorited: bool
    favorites_count: int


class FavoriteStatusResponse(BaseModel):
    favorited: bool


class CommentCreateRequest(BaseModel):
    content: Annotated[str, Field(min_length=1, examples=["I had the same dream last week!"])]

    @field_validator("content", mode="before")
    @classmethod
    def strip_and_check_empty(cls, v):
        return strip_non_empty(v, "content")


class CommentCreatedResponse(BaseModel):
    comment_id: int


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    dream_id: int
    user_id: int
    content: str
    created_at: str
    author: Optional[AuthorOut] = None


class CommentListResponse(BaseModel):
    items: list[CommentOut]
