"""
Dream analysis orchestration.

generate_analysis is at-most-once per dream:
  1. existing row?            -> return it, no AI call
  2. call the AI              -> nothing is written if this fails
  3. insert                   -> unique(dream_id) conflict means another
                                 request won the race: re-read and return it
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import DreamNotFoundError
from app.db.base import degrade_on_outage
from app.models.dream import Dream
from app.models.dream_analysis import DreamAnalysis
from app.services.ai import DreamAIClient

logger = logging.getLogger(__name__)

IMAGE_PROMPT_CONTENT_CHARS = 200


def _find_analysis(db: Session, dream_id: int) -> Optional[DreamAnalysis]:
    return db.query(DreamAnalysis).filter(DreamAnalysis.dream_id == dream_id).first()


@degrade_on_outage(lambda: None)
def get_analysis(db: Session, dream_id: int) -> Optional[DreamAnalysis]:
    return _find_analysis(db, dream_id)


def generate_analysis(db: Session, ai: DreamAIClient, dream_id: int) -> DreamAnalysis:
    dream = db.get(Dream, dream_id)
    if dream is None:
        raise DreamNotFoundError(dream_id)

    existing = _find_analysis(db, dream_id)
    if existing is not None:
        return existing

    text = f"{dream.title}\n\n{dream.content}"
    # No transaction stays open while the AI call runs.
    db.rollback()
    result = ai.analyze(text)

    analysis = DreamAnalysis(
        dream_id=dream_id,
        symbolism=result.symbolism,
        emotional_analysis=result.emotional_analysis,
        psychological_insight=result.psychological_insight,
    )
    db.add(analysis)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Analysis for dream_id=%s was created concurrently, returning it", dream_id)
        winner = _find_analysis(db, dream_id)
        if winner is None:
            raise
        return winner
    db.refresh(analysis)
    logger.info("Generated analysis id=%s for dream_id=%s", analysis.id, dream_id)
    return analysis


def build_image_prompt(title: str, content: str) -> str:
    return (
        f"A dreamlike, surreal scene: {title}. "
        f"{content[:IMAGE_PROMPT_CONTENT_CHARS]}. "
        "Artistic, ethereal, magazine quality photography."
    )


def generate_dream_image(ai: DreamAIClient, title: str, content: str) -> str:
    """Return an illustration URL. Not cached or stored; callers attach it to a dream."""
    return ai.generate_image(build_image_prompt(title, content))
