"""
Dreams router.

POST   /dreams            create
GET    /dreams            public feed (newest first)
GET    /dreams/mine       the caller's dreams
GET    /dreams/{id}       one dream with its author
PATCH  /dreams/{id}       partial update (owner only)
DELETE /dreams/{id}       delete with child rows (owner only)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.errors import DreamNotFoundError
from app.core.principal import get_current_user, get_optional_user, get_reader_id
from app.db.base import get_db
from app.models.user import User
from app.routers.serializers import author_out, dream_out, feed_item_out
from app.schemas.common import SuccessResponse
from app.schemas.dream import (
    DreamCreatedResponse,
    DreamCreateRequest,
    DreamDetailResponse,
    DreamListResponse,
    DreamOut,
    DreamUpdateRequest,
)
from app.services.dreams import (
    create_dream,
    decorate_feed,
    delete_owned_dream,
    from_unix_ms,
    get_dream,
    list_dreams,
    list_dreams_by_owner,
    update_owned_dream,
)
from app.services.users import get_user

router = APIRouter(prefix="/dreams", tags=["dreams"])

PAGE_SIZE = 20
PAGE_MAX = 50


@router.post(
    "",
    response_model=DreamCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a dream",
)
def create(
    payload: DreamCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    dream = create_dream(
        db,
        user_id=user.id,
        title=payload.title,
        content=payload.content,
        dream_date=from_unix_ms(payload.dream_date),
        image_url=payload.image_url,
        image_key=payload.image_key,
    )
    return DreamCreatedResponse(dream_id=dream.id)


@router.get("", response_model=DreamListResponse, summary="Public dream feed")
def feed(
    limit: int = Query(default=PAGE_SIZE, ge=1, le=PAGE_MAX, description="Page size."),
    offset: int = Query(default=0, ge=0, description="Skip N items."),
    viewer: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """All dreams, newest first. `is_liked` / `is_favorited` reflect the caller, if any."""
    dreams = list_dreams(db, limit=limit, offset=offset)
    items = decorate_feed(db, dreams, viewer_id=viewer.id if viewer else None)
    return DreamListResponse(items=[feed_item_out(i) for i in items])


@router.get("/mine", response_model=DreamListResponse, summary="The caller's dreams")
def mine(
    limit: int = Query(default=PAGE_SIZE, ge=1, le=PAGE_MAX),
    offset: int = Query(default=0, ge=0),
    reader_id: int = Depends(get_reader_id),
    db: Session = Depends(get_db),
):
    dreams = list_dreams_by_owner(db, reader_id, limit=limit, offset=offset)
    items = decorate_feed(db, dreams, viewer_id=reader_id)
    return DreamListResponse(items=[feed_item_out(i) for i in items])


@router.get(
    "/{dream_id}",
    response_model=DreamDetailResponse,
    summary="One dream with its author",
    responses={404: {"description": "Dream not found."}},
)
def detail(dream_id: int, db: Session = Depends(get_db)):
    dream = get_dream(db, dream_id)
    if dream is None:
        raise DreamNotFoundError(dream_id)
    return DreamDetailResponse(
        dream=dream_out(dream),
        author=author_out(get_user(db, dream.user_id)),
    )


@router.patch(
    "/{dream_id}",
    response_model=DreamOut,
    summary="Update some fields of a dream",
    responses={403: {"description": "Not the owner."}, 404: {"description": "Dream not found."}},
)
def update(
    dream_id: int,
    payload: DreamUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Only the fields present in the body are modified."""
    fields = payload.model_dump(exclude_unset=True)
    if "dream_date" in fields:
        fields["dream_date"] = from_unix_ms(fields["dream_date"])
    dream = update_owned_dream(db, user.id, dream_id, fields)
    return dream_out(dream)


@router.delete(
    "/{dream_id}",
    response_model=SuccessResponse,
    summary="Delete a dream",
    responses={403: {"description": "Not the owner."}, 404: {"description": "Dream not found."}},
)
def remove(
    dream_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Deletes the dream together with its likes, favorites, comments, ratings and analysis."""
    delete_owned_dream(db, user.id, dream_id)
    return SuccessResponse()
