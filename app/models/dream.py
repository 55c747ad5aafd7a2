"""
Dream: a user-authored journal entry.

Counter columns are denormalized totals of the child tables:
  likes_count      == count(likes     where dream_id = id)
  comments_count   == count(comments  where dream_id = id)
  favorites_count  == count(favorites where dream_id = id)
They are only changed inside the transaction that mutates the child row.

average_rating is stored in tenths of a star (4.3 stars -> 43);
it is recomputed from the ratings table on every rating event.
"""
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Dream(Base):
    __tablename__ = "dreams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    dream_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        comment="When the dream happened, not when it was written down",
    )
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_key: Mapped[str | None] = mapped_column(Text, nullable=True)

    likes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    comments_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    favorites_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    average_rating: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0",
        comment="Mean rating x10, rounded half up",
    )
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
