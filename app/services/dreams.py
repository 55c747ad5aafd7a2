"""
Dream repository and ownership-checked mutations.

Repository functions (`create_dream`, `update_dream_fields`, `delete_dream`,
`increment_counter`, `decrement_counter`) perform no authorization. The
`*_owned_dream` functions check ownership first and own the transaction.

Counters
--------
increment : count = count + 1
decrement : count = max(count - 1, 0)
Counter statements only flush; the caller commits them together with the
child-row change that triggered them.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import case, delete, update
from sqlalchemy.orm import Session

from app.core.errors import DreamNotFoundError, ForbiddenError, InvalidInputError
from app.db.base import degrade_on_outage
from app.models.comment import Comment
from app.models.dream import Dream
from app.models.dream_analysis import DreamAnalysis
from app.models.favorite import Favorite
from app.models.like import Like
from app.models.rating import Rating
from app.models.user import User
from app.services.users import get_users_by_ids

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "content", "dream_date", "image_url", "image_key")

# Child tables removed together with their dream.
_CASCADE_MODELS = (Like, Favorite, Comment, Rating, DreamAnalysis)


class Counter(str, enum.Enum):
    likes = "likes_count"
    comments = "comments_count"
    favorites = "favorites_count"


@dataclass
class FeedItem:
    """A dream as seen by a particular viewer."""
    dream: Dream
    author: Optional[User] = None
    is_liked: bool = False
    is_favorited: bool = False


# ---------------------------------------------------------------------------
# Time helpers
# ---------------------------------------------------------------------------

def from_unix_ms(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def to_unix_ms(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

@degrade_on_outage(lambda: None)
def get_dream(db: Session, dream_id: int) -> Optional[Dream]:
    return db.get(Dream, dream_id)


def lock_dream(db: Session, dream_id: int) -> Dream:
    """
    Load a dream for a write path, locking its row until the transaction ends.
    Raises DreamNotFoundError. Not degraded: writes must fail loudly.
    """
    dream = (
        db.query(Dream)
        .filter(Dream.id == dream_id)
        .with_for_update()
        .first()
    )
    if dream is None:
        raise DreamNotFoundError(dream_id)
    return dream


@degrade_on_outage(list)
def list_dreams(db: Session, limit: int = 20, offset: int = 0) -> list[Dream]:
    """All dreams, newest first."""
    return (
        db.query(Dream)
        .order_by(Dream.created_at.desc(), Dream.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


@degrade_on_outage(list)
def list_dreams_by_owner(
    db: Session, user_id: int, limit: int = 20, offset: int = 0
) -> list[Dream]:
    """Dreams written by `user_id`, newest first."""
    return (
        db.query(Dream)
        .filter(Dream.user_id == user_id)
        .order_by(Dream.created_at.desc(), Dream.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


@degrade_on_outage(set)
def _viewer_dream_ids(db: Session, model, viewer_id: int, dream_ids: list[int]) -> set[int]:
    if not dream_ids:
        return set()
    rows = (
        db.query(model.dream_id)
        .filter(model.user_id == viewer_id, model.dream_id.in_(dream_ids))
        .all()
    )
    return {r.dream_id for r in rows}


def decorate_feed(
    db: Session,
    dreams: list[Dream],
    viewer_id: Optional[int] = None,
    favorited: bool = False,
) -> list[FeedItem]:
    """
    Attach author info and the viewer's like/favorite flags.
    Anonymous viewers get False for both flags. `favorited=True` skips the
    favorite lookup for lists that are already the viewer's favorites.
    """
    authors = get_users_by_ids(db, {d.user_id for d in dreams})
    ids = [d.id for d in dreams]
    liked_ids: set[int] = set()
    favorited_ids: set[int] = set(ids) if favorited else set()
    if viewer_id is not None:
        liked_ids = _viewer_dream_ids(db, Like, viewer_id, ids)
        if not favorited:
            favorited_ids = _viewer_dream_ids(db, Favorite, viewer_id, ids)
    return [
        FeedItem(
            dream=d,
            author=authors.get(d.user_id),
            is_liked=d.id in liked_ids,
            is_favorited=d.id in favorited_ids,
        )
        for d in dreams
    ]


# ---------------------------------------------------------------------------
# Repository writes (no authorization)
# ---------------------------------------------------------------------------

def create_dream(
    db: Session,
    user_id: int,
    title: str,
    content: str,
    dream_date: datetime,
    image_url: Optional[str] = None,
    image_key: Optional[str] = None,
) -> Dream:
    dream = Dream(
        user_id=user_id,
        title=title,
        content=content,
        dream_date=dream_date,
        image_url=image_url,
        image_key=image_key,
    )
    db.add(dream)
    db.commit()
    db.refresh(dream)
    logger.info("Created dream id=%s user_id=%s", dream.id, user_id)
    return dream


def update_dream_fields(db: Session, dream: Dream, fields: dict[str, Any]) -> Dream:
    """Apply only the supplied fields. Flush only."""
    for name, value in fields.items():
        if name not in UPDATABLE_FIELDS:
            raise InvalidInputError(f"Field {name!r} cannot be updated.", details={"field": name})
        setattr(dream, name, value)
    db.flush()
    return dream


def delete_dream(db: Session, dream: Dream) -> None:
    """Remove the dream and every child row that points at it. Flush only."""
    for model in _CASCADE_MODELS:
        db.execute(
            delete(model)
            .where(model.dream_id == dream.id)
            .execution_options(synchronize_session=False)
        )
    db.delete(dream)
    db.flush()


def increment_counter(db: Session, dream_id: int, counter: Counter) -> None:
    column = getattr(Dream, counter.value)
    db.execute(
        update(Dream)
        .where(Dream.id == dream_id)
        .values({column: column + 1})
        .execution_options(synchronize_session=False)
    )


def decrement_counter(db: Session, dream_id: int, counter: Counter) -> None:
    column = getattr(Dream, counter.value)
    db.execute(
        update(Dream)
        .where(Dream.id == dream_id)
        .values({column: case((column > 0, column - 1), else_=0)})
        .execution_options(synchronize_session=False)
    )


# ---------------------------------------------------------------------------
# Ownership-checked mutations (own the transaction)
# ---------------------------------------------------------------------------

def _owned(db: Session, user_id: int, dream_id: int) -> Dream:
    dream = lock_dream(db, dream_id)
    if dream.user_id != user_id:
        db.rollback()
        raise ForbiddenError("dream", dream_id)
    return dream


def update_owned_dream(
    db: Session, user_id: int, dream_id: int, fields: dict[str, Any]
) -> Dream:
    dream = _owned(db, user_id, dream_id)
    if fields:
        update_dream_fields(db, dream, fields)
    db.commit()
    db.refresh(dream)
    logger.info("Updated dream id=%s fields=%s", dream_id, sorted(fields))
    return dream


def delete_owned_dream(db: Session, user_id: int, dream_id: int) -> None:
    dream = _owned(db, user_id, dream_id)
    delete_dream(db, dream)
    db.commit()
    logger.info("Deleted dream id=%s with its likes, favorites, comments, ratings and analysis", dream_id)
