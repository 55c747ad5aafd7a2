"""
Like / Favorite toggles.

State machine per (user, dream): absent <-> present.

  toggle on absent  -> insert row, counter + 1, active=True
  toggle on present -> delete row, counter - 1 (floored at 0), active=False

Existence check, row mutation and counter update share one transaction
with the dream row locked, so the counter always matches the join table.
The unique index on (user_id, dream_id) is the final guard: a conflicting
insert means another request already created the row, so the result is
reported as active without touching the counter.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Type, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.base import degrade_on_outage
from app.models.dream import Dream
from app.models.favorite import Favorite
from app.models.like import Like
from app.services.dreams import (
    Counter,
    decorate_feed,
    decrement_counter,
    FeedItem,
    increment_counter,
    lock_dream,
)

logger = logging.getLogger(__name__)

JoinModel = Type[Union[Like, Favorite]]


@dataclass
class ToggleResult:
    active: bool
    count: int


def _toggle(db: Session, model: JoinModel, counter: Counter, user_id: int, dream_id: int) -> ToggleResult:
    lock_dream(db, dream_id)

    existing = (
        db.query(model)
        .filter(model.user_id == user_id, model.dream_id == dream_id)
        .first()
    )
    if existing is not None:
        db.delete(existing)
        decrement_counter(db, dream_id, counter)
        active = False
    else:
        db.add(model(user_id=user_id, dream_id=dream_id))
        increment_counter(db, dream_id, counter)
        active = True

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(
            "Concurrent %s insert for user_id=%s dream_id=%s, keeping existing row",
            model.__tablename__, user_id, dream_id,
        )
        active = True

    count = db.query(getattr(Dream, counter.value)).filter(Dream.id == dream_id).scalar() or 0
    logger.info(
        "Toggled %s user_id=%s dream_id=%s active=%s count=%s",
        model.__tablename__, user_id, dream_id, active, count,
    )
    return ToggleResult(active=active, count=count)


def toggle_like(db: Session, user_id: int, dream_id: int) -> ToggleResult:
    return _toggle(db, Like, Counter.likes, user_id, dream_id)


def toggle_favorite(db: Session, user_id: int, dream_id: int) -> ToggleResult:
    return _toggle(db, Favorite, Counter.favorites, user_id, dream_id)


@degrade_on_outage(lambda: False)
def is_liked(db: Session, user_id: int, dream_id: int) -> bool:
    return (
        db.query(Like.id)
        .filter(Like.user_id == user_id, Like.dream_id == dream_id)
        .first()
        is not None
    )


@degrade_on_outage(lambda: False)
def is_favorited(db: Session, user_id: int, dream_id: int) -> bool:
    return (
        db.query(Favorite.id)
        .filter(Favorite.user_id == user_id, Favorite.dream_id == dream_id)
        .first()
        is not None
    )


@degrade_on_outage(list)
def _favorite_dreams(db: Session, user_id: int, limit: int, offset: int) -> list[Dream]:
    return (
        db.query(Dream)
        .join(Favorite, Favorite.dream_id == Dream.id)
        .filter(Favorite.user_id == user_id)
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def list_favorite_dreams(
    db: Session, user_id: int, limit: int = 20, offset: int = 0
) -> list[FeedItem]:
    """The user's favorited dreams, most recently favorited first."""
    dreams = _favorite_dreams(db, user_id, limit, offset)
    return decorate_feed(db, dreams, viewer_id=user_id, favorited=True)
