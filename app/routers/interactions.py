"""
Interactions router.

POST   /dreams/{id}/like         toggle like
GET    /dreams/{id}/like         has the caller liked it?
POST   /dreams/{id}/favorite     toggle favorite
GET    /dreams/{id}/favorite     has the caller favorited it?
GET    /favorites                the caller's favorited dreams
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.principal import get_current_user, get_reader_id
from app.db.base import get_db
from app.models.user import User
from app.routers.serializers import feed_item_out
from app.schemas.dream import DreamListResponse
from app.schemas.interaction import (
    FavoriteStatusResponse,
    FavoriteToggleResponse,
    LikeStatusResponse,
    LikeToggleResponse,
)
from app.services.interactions import (
    is_favorited,
    is_liked,
    list_favorite_dreams,
    toggle_favorite,
    toggle_like,
)

router = APIRouter(tags=["interactions"])


@router.post(
    "/dreams/{dream_id}/like",
    response_model=LikeToggleResponse,
    summary="Like or unlike a dream",
    responses={404: {"description": "Dream not found."}},
)
def like_toggle(
    dream_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Each call flips the state. Returns the new state and the dream's like count."""
    result = toggle_like(db, user.id, dream_id)
    return LikeToggleResponse(liked=result.active, likes_count=result.count)


@router.get("/dreams/{dream_id}/like", response_model=LikeStatusResponse)
def like_check(
    dream_id: int,
    reader_id: int = Depends(get_reader_id),
    db: Session = Depends(get_db),
):
    return LikeStatusResponse(liked=is_liked(db, reader_id, dream_id))


@router.post(
    "/dreams/{dream_id}/favorite",
    response_model=FavoriteToggleResponse,
    summary="Favorite or unfavorite a dream",
    responses={404: {"description": "Dream not found."}},
)
def favorite_toggle(
    dream_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = toggle_favorite(db, user.id, dream_id)
    return FavoriteToggleResponse(favorited=result.active, favorites_count=result.count)


@router.get("/dreams/{dream_id}/favorite", response_model=FavoriteStatusResponse)
def favorite_check(
    dream_id: int,
    reader_id: int = Depends(get_reader_id),
    db: Session = Depends(get_db),
):
    return FavoriteStatusResponse(favorited=is_favorited(db, reader_id, dream_id))


@router.get("/favorites", response_model=DreamListResponse, summary="The caller's favorites")
def my_favorites(
    limit: int = Query(default=20, ge=1, le=50, description="Page size."),
    offset: int = Query(default=0, ge=0, description="Skip N items."),
    reader_id: int = Depends(get_reader_id),
    db: Session = Depends(get_db),
):
    """Favorited dreams, most recently favorited first."""
    items = list_favorite_dreams(db, reader_id, limit=limit, offset=offset)
    return DreamListResponse(items=[feed_item_out(i) for i in items])
