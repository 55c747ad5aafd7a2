"""
Engine, session factory and declarative base.

`get_db` yields one Session per request. Services own commit/rollback.
"""
from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Generator

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    if url.startswith("postgresql"):
        return {"connect_timeout": settings.DB_CONNECT_TIMEOUT}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL),
    pool_pre_ping=True,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def degrade_on_outage(default_factory: Callable[[], Any]):
    """
    Read-path guard: if the store is unreachable, log and return
    `default_factory()` instead of raising. Never use on write paths.
    """
    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(db: Session, *args, **kwargs):
            try:
                return fn(db, *args, **kwargs)
            except OperationalError as exc:
                logger.warning("Store unavailable in %s, degrading: %s", fn.__name__, exc)
                db.rollback()
                return default_factory()
        return wrapper
    return decorator
