# src/gated_feedback/models/feedback.py
"""Free-form feedback, one row per wallet."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from gated_feedback.db.session import Base
from gated_feedback.db.time import utcnow


class Feedback(Base):
    """Paid feedback entry.

    The wallet is always stored, even for anonymous rows; redaction happens
    when rows are listed.
    """

    __tablename__ = "feedback"
    __table_args__ = (Index("ix_feedback_category_created", "category", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    feedback: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    wallet_address: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    payment_hash: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("payments.payment_hash"),
        nullable=False,
    )
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
