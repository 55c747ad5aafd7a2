"""
Resolved principal.

Authentication happens upstream; the gateway forwards the authenticated
user's id in the `X-User-Id` header. This module only resolves that id to a
User row.

Read endpoints keep working while the store is down: `get_optional_user`
falls back to an anonymous viewer and `get_reader_id` to the gateway's id,
so the degraded reads behind them can return their empty results.
"""
import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.core.errors import UnauthenticatedError
from app.db.base import get_db
from app.models.user import User

logger = logging.getLogger(__name__)

USER_HEADER = "X-User-Id"


def _user_id(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise UnauthenticatedError(f"{USER_HEADER} must be an integer user id.")


def _resolve(db: Session, raw: Optional[str]) -> Optional[User]:
    user_id = _user_id(raw)
    if user_id is None:
        return None
    user = db.get(User, user_id)
    if user is None:
        raise UnauthenticatedError(f"Unknown user {user_id}.")
    return user


def get_current_user(
    x_user_id: Optional[str] = Header(default=None, alias=USER_HEADER),
    db: Session = Depends(get_db),
) -> User:
    """Required principal for mutating endpoints."""
    user = _resolve(db, x_user_id)
    if user is None:
        raise UnauthenticatedError()
    return user


def get_reader_id(
    x_user_id: Optional[str] = Header(default=None, alias=USER_HEADER),
    db: Session = Depends(get_db),
) -> int:
    """Required principal for per-user reads; only the id is needed."""
    user_id = _user_id(x_user_id)
    if user_id is None:
        raise UnauthenticatedError()
    try:
        user = db.get(User, user_id)
    except OperationalError as exc:
        logger.warning("Store unavailable resolving user %s, trusting gateway id: %s", user_id, exc)
        db.rollback()
        return user_id
    if user is None:
        raise UnauthenticatedError(f"Unknown user {user_id}.")
    return user_id


def get_optional_user(
    x_user_id: Optional[str] = Header(default=None, alias=USER_HEADER),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Principal for public reads; None for anonymous viewers."""
    try:
        return _resolve(db, x_user_id)
    except OperationalError as exc:
        logger.warning("Store unavailable resolving viewer, serving as anonymous: %s", exc)
        db.rollback()
        return None
