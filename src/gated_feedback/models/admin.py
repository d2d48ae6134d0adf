# src/gated_feedback/models/admin.py
"""Wallets that paid the one-time fee to manage forms."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from gated_feedback.db.session import Base
from gated_feedback.db.time import utcnow

ADMIN_STATUS_CONFIRMED = "confirmed"


class Admin(Base):
    """Admin grant backed by a confirmed admin-fee payment."""

    __tablename__ = "admins"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # One grant per wallet; the unique index backs the registry's pre-check.
    wallet_address: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    payment_hash: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("payments.payment_hash"),
        nullable=False,
    )
    amount: Mapped[str] = mapped_column(String(80), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=ADMIN_STATUS_CONFIRMED)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
