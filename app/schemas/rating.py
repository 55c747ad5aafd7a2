"""
Rating and leaderboard schemas.

PUT /dreams/{id}/rating    → RateRequest → RatingStatsResponse
GET /leaderboard/top-rated → LeaderboardResponse
"""
import enum
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.common import AuthorOut
from app.schemas.dream import DreamOut


class TimeRange(str, enum.Enum):
    all = "all"
    week = "week"
    month = "month"


class RateRequest(BaseModel):
    rating: int = Field(ge=1, le=5, description="Stars, 1 to 5.", examples=[4])


class RatingStatsResponse(BaseModel):
    dream_id: int
    average_rating: int = Field(description="Mean rating in tenths of a star.")
    rating_count: int


class UserRatingResponse(BaseModel):
    rating: Optional[int] = Field(default=None, description="Null when the viewer has not rated.")


class LeaderboardEntry(BaseModel):
    dream: DreamOut
    author: Optional[AuthorOut] = None


class LeaderboardResponse(BaseModel):
    time_range: TimeRange
    items: list[LeaderboardEntry]
