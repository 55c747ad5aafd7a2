"""
Comment service.

create -> insert + dream.comments_count + 1   (one transaction)
delete -> author only; delete + comments_count - 1 (one transaction)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import CommentNotFoundError, ForbiddenError
from app.db.base import degrade_on_outage
from app.models.comment import Comment
from app.models.dream import Dream
from app.models.user import User
from app.services.dreams import Counter, decrement_counter, increment_counter, lock_dream

logger = logging.getLogger(__name__)


@dataclass
class CommentWithAuthor:
    comment: Comment
    author: Optional[User]


def create_comment(db: Session, user_id: int, dream_id: int, content: str) -> Comment:
    lock_dream(db, dream_id)
    comment = Comment(user_id=user_id, dream_id=dream_id, content=content)
    db.add(comment)
    db.flush()
    increment_counter(db, dream_id, Counter.comments)
    db.commit()
    db.refresh(comment)
    logger.info("Created comment id=%s dream_id=%s user_id=%s", comment.id, dream_id, user_id)
    return comment


@degrade_on_outage(list)
def list_comments(
    db: Session, dream_id: int, limit: int = 50, offset: int = 0
) -> list[CommentWithAuthor]:
    """Comments on a dream, newest first, each with its author."""
    rows = (
        db.query(Comment, User)
        .outerjoin(User, User.id == Comment.user_id)
        .filter(Comment.dream_id == dream_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [CommentWithAuthor(comment=c, author=u) for c, u in rows]


def delete_comment(db: Session, user_id: int, comment_id: int) -> None:
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise CommentNotFoundError(comment_id)
    if comment.user_id != user_id:
        raise ForbiddenError("comment", comment_id)

    dream_id = comment.dream_id
    db.query(Dream.id).filter(Dream.id == dream_id).with_for_update().first()
    db.delete(comment)
    decrement_counter(db, dream_id, Counter.comments)
    db.commit()
    logger.info("Deleted comment id=%s dream_id=%s", comment_id, dream_id)
