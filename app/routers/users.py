"""
Users router.

POST /users/sync    upsert after an external login (called by the gateway)
GET  /users/me      the resolved principal
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.principal import get_current_user
from app.db.base import get_db
from app.models.user import User
from app.routers.serializers import user_out
from app.schemas.user import UserResponse, UserSyncRequest
from app.services.users import upsert_user

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "/sync",
    response_model=UserResponse,
    summary="Create or refresh a user after login",
)
def sync_user(payload: UserSyncRequest, db: Session = Depends(get_db)):
    """
    Idempotent upsert keyed by `open_id`. Only supplied fields overwrite stored
    values; `last_signed_in` is set to now.
    """
    user = upsert_user(
        db,
        open_id=payload.open_id,
        name=payload.name,
        email=payload.email,
        login_method=payload.login_method,
        role=payload.role,
    )
    return user_out(user)


@router.get("/me", response_model=UserResponse, summary="Current user")
def me(user: User = Depends(get_current_user)):
    return user_out(user)
