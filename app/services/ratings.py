"""
Rating aggregation and leaderboard.

Per (user, dream) there is at most one rating, 1..5. Rating again
overwrites the previous value.

After each upsert the dream's aggregates are recomputed from the ratings
table inside the same transaction:

  average_rating = round_half_up(mean(rating) * 10)   # tenths of a star
  rating_count   = number of rating rows
  (both 0 when the dream has no ratings)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import InvalidInputError
from app.db.base import degrade_on_outage
from app.models.dream import Dream
from app.models.rating import Rating
from app.models.user import User
from app.services.dreams import lock_dream
from app.services.users import get_users_by_ids

logger = logging.getLogger(__name__)

# Trailing windows for the leaderboard; "all" applies no filter.
TIME_RANGE_DAYS: dict[str, Optional[int]] = {
    "all": None,
    "week": 7,
    "month": 30,
}


@dataclass
class RatingStats:
    dream_id: int
    average_rating: int
    rating_count: int


@dataclass
class RankedDream:
    dream: Dream
    author: Optional[User]


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def average_in_tenths(values: list[int]) -> int:
    """Mean of `values` times ten, rounded half up. 0 for no values."""
    if not values:
        return 0
    mean_x10 = Decimal(sum(values) * 10) / Decimal(len(values))
    return int(mean_x10.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def recompute_rating_stats(db: Session, dream_id: int) -> RatingStats:
    """Rewrite the dream's aggregates from its rating rows. Flush only."""
    values = [r.rating for r in db.query(Rating.rating).filter(Rating.dream_id == dream_id).all()]
    stats = RatingStats(
        dream_id=dream_id,
        average_rating=average_in_tenths(values),
        rating_count=len(values),
    )
    dream = db.get(Dream, dream_id)
    if dream is not None:
        dream.average_rating = stats.average_rating
        dream.rating_count = stats.rating_count
        db.flush()
    return stats


def rate_dream(db: Session, user_id: int, dream_id: int, rating: int) -> RatingStats:
    """
    Upsert the user's rating and recompute the dream's aggregates.
    `rating` is validated at the HTTP boundary.
    """
    lock_dream(db, dream_id)

    existing: Optional[Rating] = (
        db.query(Rating)
        .filter(Rating.user_id == user_id, Rating.dream_id == dream_id)
        .first()
    )
    if existing is not None:
        existing.rating = rating
        existing.updated_at = _now()
    else:
        db.add(Rating(user_id=user_id, dream_id=dream_id, rating=rating))
    db.flush()

    stats = recompute_rating_stats(db, dream_id)
    db.commit()
    logger.info(
        "Rated dream_id=%s user_id=%s rating=%s -> avg=%s count=%s",
        dream_id, user_id, rating, stats.average_rating, stats.rating_count,
    )
    return stats


@degrade_on_outage(lambda: None)
def get_user_rating(db: Session, user_id: int, dream_id: int) -> Optional[int]:
    row = (
        db.query(Rating.rating)
        .filter(Rating.user_id == user_id, Rating.dream_id == dream_id)
        .first()
    )
    return row.rating if row else None


@degrade_on_outage(list)
def _top_rated_dreams(db: Session, limit: int, since: Optional[datetime]) -> list[Dream]:
    q = db.query(Dream)
    if since is not None:
        q = q.filter(Dream.created_at >= since)
    return (
        q.order_by(
            Dream.average_rating.desc(),
            Dream.rating_count.desc(),
            Dream.id.asc(),
        )
        .limit(limit)
        .all()
    )


def top_rated(db: Session, limit: int = 10, time_range: str = "all") -> list[RankedDream]:
    """
    Dreams ordered by average rating, ties broken by number of ratings.
    "week" / "month" keep only dreams created in the trailing 7 / 30 days,
    measured from now.
    """
    if time_range not in TIME_RANGE_DAYS:
        raise InvalidInputError(f"Unknown time range {time_range!r}.", details={"time_range": time_range})
    days = TIME_RANGE_DAYS[time_range]
    since = _now() - timedelta(days=days) if days else None

    dreams = _top_rated_dreams(db, limit, since)
    authors = get_users_by_ids(db, {d.user_id for d in dreams})
    return [RankedDream(dream=d, author=authors.get(d.user_id)) for d in dreams]
