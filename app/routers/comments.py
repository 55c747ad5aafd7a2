"""
Comments router.

POST   /dreams/{id}/comments     add a comment
GET    /dreams/{id}/comments     newest first, with authors
DELETE /comments/{id}            author only
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.principal import get_current_user
from app.db.base import get_db
from app.models.user import User
from app.routers.serializers import comment_out
from app.schemas.common import SuccessResponse
from app.schemas.interaction import (
    CommentCreatedResponse,
    CommentCreateRequest,
    CommentListResponse,
)
from app.services.comments import create_comment, delete_comment, list_comments

router = APIRouter(tags=["comments"])


@router.post(
    "/dreams/{dream_id}/comments",
    response_model=CommentCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a dream",
    responses={404: {"description": "Dream not found."}},
)
def create(
    dream_id: int,
    payload: CommentCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    comment = create_comment(db, user.id, dream_id, payload.content)
    return CommentCreatedResponse(comment_id=comment.id)


@router.get("/dreams/{dream_id}/comments", response_model=CommentListResponse)
def list_for_dream(
    dream_id: int,
    limit: int = Query(default=50, ge=1, le=100, description="Page size."),
    offset: int = Query(default=0, ge=0, description="Skip N items."),
    db: Session = Depends(get_db),
):
    rows = list_comments(db, dream_id, limit=limit, offset=offset)
    return CommentListResponse(items=[comment_out(r) for r in rows])


@router.delete(
    "/comments/{comment_id}",
    response_model=SuccessResponse,
    summary="Delete one of your comments",
    responses={
        403: {"description": "Not the author."},
        404: {"description": "Comment not found."},
    },
)
def remove(
    comment_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    delete_comment(db, user.id, comment_id)
    return SuccessResponse()
