"""
Ratings router.

PUT /dreams/{id}/rating        rate 1..5 (rating again overwrites)
GET /dreams/{id}/rating        the caller's rating, or null
GET /leaderboard/top-rated     best-rated dreams
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.principal import get_current_user, get_reader_id
from app.db.base import get_db
from app.models.user import User
from app.routers.serializers import author_out, dream_out
from app.schemas.rating import (
    LeaderboardEntry,
    LeaderboardResponse,
    RateRequest,
    RatingStatsResponse,
    TimeRange,
    UserRatingResponse,
)
from app.services.ratings import get_user_rating, rate_dream, top_rated

router = APIRouter(tags=["ratings"])


@router.put(
    "/dreams/{dream_id}/rating",
    response_model=RatingStatsResponse,
    summary="Rate a dream",
    responses={404: {"description": "Dream not found."}},
)
def rate(
    dream_id: int,
    payload: RateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Upserts the caller's rating and returns the dream's recomputed aggregates."""
    stats = rate_dream(db, user.id, dream_id, payload.rating)
    return RatingStatsResponse(
        dream_id=stats.dream_id,
        average_rating=stats.average_rating,
        rating_count=stats.rating_count,
    )


@router.get("/dreams/{dream_id}/rating", response_model=UserRatingResponse)
def my_rating(
    dream_id: int,
    reader_id: int = Depends(get_reader_id),
    db: Session = Depends(get_db),
):
    return UserRatingResponse(rating=get_user_rating(db, reader_id, dream_id))


@router.get(
    "/leaderboard/top-rated",
    response_model=LeaderboardResponse,
    summary="Top-rated dreams",
)
def leaderboard(
    limit: int = Query(default=10, ge=1, le=100),
    time_range: TimeRange = Query(
        default=TimeRange.all,
        description='"all", or only dreams created in the trailing "week" / "month".',
    ),
    db: Session = Depends(get_db),
):
    """Ordered by average rating, ties broken by number of ratings."""
    ranked = top_rated(db, limit=limit, time_range=time_range.value)
    return LeaderboardResponse(
        time_range=time_range,
        items=[LeaderboardEntry(dream=dream_out(r.dream), author=author_out(r.author)) for r in ranked],
    )
