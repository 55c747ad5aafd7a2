"""
AI router.

GET  /dreams/{id}/analysis     stored analysis, or null
POST /dreams/{id}/analysis     generate once; later calls return the same row
POST /ai/generate-image        illustration URL (not stored)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.principal import get_current_user
from app.db.base import get_db
from app.models.user import User
from app.routers.serializers import analysis_out
from app.schemas.analysis import AnalysisResponse, ImageRequest, ImageResponse
from app.services.ai import DreamAIClient, get_ai_client
from app.services.analysis import generate_analysis, generate_dream_image, get_analysis

router = APIRouter(tags=["ai"])


@router.get("/dreams/{dream_id}/analysis", response_model=AnalysisResponse)
def read_analysis(dream_id: int, db: Session = Depends(get_db)):
    return AnalysisResponse(analysis=analysis_out(get_analysis(db, dream_id)))


@router.post(
    "/dreams/{dream_id}/analysis",
    response_model=AnalysisResponse,
    summary="Generate the AI interpretation of a dream",
    responses={
        404: {"description": "Dream not found."},
        502: {"description": "AI service failed; nothing was stored."},
        504: {"description": "AI service timed out; safe to retry."},
    },
)
def create_analysis(
    dream_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    ai: DreamAIClient = Depends(get_ai_client),
):
    """At most one analysis per dream: an existing one is returned without calling the AI."""
    analysis = generate_analysis(db, ai, dream_id)
    return AnalysisResponse(analysis=analysis_out(analysis))


@router.post(
    "/ai/generate-image",
    response_model=ImageResponse,
    summary="Generate a dream illustration",
    responses={
        502: {"description": "Image service failed."},
        504: {"description": "Image service timed out; safe to retry."},
    },
)
def generate_image(
    payload: ImageRequest,
    user: User = Depends(get_current_user),
    ai: DreamAIClient = Depends(get_ai_client),
):
    """Returns a URL only. Attach it to a dream with create or update."""
    return ImageResponse(url=generate_dream_image(ai, payload.title, payload.content))
