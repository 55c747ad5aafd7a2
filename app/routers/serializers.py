"""
ORM -> response-schema mapping shared by the routers.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from app.models.comment import Comment
from app.models.dream import Dream
from app.models.dream_analysis import DreamAnalysis
from app.models.user import User
from app.schemas.analysis import AnalysisOut
from app.schemas.common import AuthorOut
from app.schemas.dream import DreamOut, FeedDreamOut
from app.schemas.interaction import CommentOut
from app.schemas.user import UserResponse
from app.services.comments import CommentWithAuthor
from app.services.dreams import FeedItem, to_unix_ms


def _iso(dt: Optional[datetime]) -> str:
    return dt.isoformat() if dt else ""


def _ev(v) -> str:
    """Extract bare string value from a str-enum or plain str."""
    return v.value if hasattr(v, "value") else str(v)


def author_out(user: Optional[User]) -> Optional[AuthorOut]:
    if user is None:
        return None
    return AuthorOut(id=user.id, name=user.name)


def user_out(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        open_id=user.open_id,
        name=user.name,
        email=user.email,
        login_method=user.login_method,
        role=_ev(user.role),
        created_at=_iso(user.created_at),
        last_signed_in=_iso(user.last_signed_in),
    )


def _dream_fields(d: Dream) -> dict:
    return {
        "id": d.id,
        "user_id": d.user_id,
        "title": d.title,
        "content": d.content,
        "dream_date": to_unix_ms(d.dream_date),
        "image_url": d.image_url,
        "image_key": d.image_key,
        "likes_count": d.likes_count,
        "comments_count": d.comments_count,
        "favorites_count": d.favorites_count,
        "average_rating": d.average_rating,
        "rating_count": d.rating_count,
        "created_at": _iso(d.created_at),
        "updated_at": _iso(d.updated_at),
    }


def dream_out(d: Dream) -> DreamOut:
    return DreamOut(**_dream_fields(d))


def feed_item_out(item: FeedItem) -> FeedDreamOut:
    return FeedDreamOut(
        **_dream_fields(item.dream),
        author=author_out(item.author),
        is_liked=item.is_liked,
        is_favorited=item.is_favorited,
    )


def comment_out(row: CommentWithAuthor) -> CommentOut:
    c: Comment = row.comment
    return CommentOut(
        id=c.id,
        dream_id=c.dream_id,
        user_id=c.user_id,
        content=c.content,
        created_at=_iso(c.created_at),
        author=author_out(row.author),
    )


def analysis_out(a: Optional[DreamAnalysis]) -> Optional[AnalysisOut]:
    if a is None:
        return None
    return AnalysisOut(
        id=a.id,
        dream_id=a.dream_id,
        symbolism=a.symbolism,
        emotional_analysis=a.emotional_analysis,
        psychological_insight=a.psychological_insight,
        created_at=_iso(a.created_at),
    )
