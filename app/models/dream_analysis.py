"""
DreamAnalysis: AI interpretation of a dream.

At most one row per dream (unique dream_id). Written once after a fully
parsed AI response and never updated afterwards.
"""
from datetime import datetime
from sqlalchemy import Integer, Text, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class DreamAnalysis(Base):
    __tablename__ = "dream_analyses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    dream_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    symbolism: Mapped[str | None] = mapped_column(Text, nullable=True)
    emotional_analysis: Mapped[str | None] = mapped_column(Text, nullable=True)
    psychological_insight: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
