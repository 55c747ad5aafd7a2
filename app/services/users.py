"""
User service: login upsert and author lookups.

Users are created or refreshed on every successful external login and are
never deleted.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import InvalidInputError
from app.db.base import degrade_on_outage
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("name", "email", "login_method")
_UPSERT_ATTEMPTS = 2


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def upsert_user(
    db: Session,
    open_id: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
    login_method: Optional[str] = None,
    role: Optional[str] = None,
    last_signed_in: Optional[datetime] = None,
) -> User:
    """
    Insert or update the user keyed by `open_id`.

    Only the fields that are passed overwrite stored values. When no role is
    given and `open_id` is the configured owner, the user becomes an admin.
    A unique-index conflict (concurrent first login for the same open_id) is
    retried once as an update of the row that won; a second conflict raises.
    """
    if not open_id:
        raise InvalidInputError("open_id is required to upsert a user.")

    supplied = {"name": name, "email": email, "login_method": login_method}
    if role is None and settings.OWNER_OPEN_ID and open_id == settings.OWNER_OPEN_ID:
        role = UserRole.admin.value

    for attempt in range(_UPSERT_ATTEMPTS):
        user = get_user_by_open_id(db, open_id)
        if user is None:
            user = User(open_id=open_id)
            db.add(user)

        for field in _TEXT_FIELDS:
            if supplied[field] is not None:
                setattr(user, field, supplied[field])
        if role is not None:
            user.role = role
        user.last_signed_in = last_signed_in or _now()

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if attempt + 1 == _UPSERT_ATTEMPTS:
                raise
            logger.info("Concurrent upsert for open_id=%s, retrying as update", open_id)
            continue
        break

    db.refresh(user)
    logger.info("Upserted user id=%s open_id=%s", user.id, open_id)
    return user


@degrade_on_outage(lambda: None)
def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


@degrade_on_outage(lambda: None)
def get_user_by_open_id(db: Session, open_id: str) -> Optional[User]:
    return db.query(User).filter(User.open_id == open_id).first()


@degrade_on_outage(dict)
def get_users_by_ids(db: Session, user_ids: Iterable[int]) -> dict[int, User]:
    """Return {id: User} for the given ids; unknown ids are simply absent."""
    ids = set(user_ids)
    if not ids:
        return {}
    return {u.id: u for u in db.query(User).filter(User.id.in_(ids)).all()}
