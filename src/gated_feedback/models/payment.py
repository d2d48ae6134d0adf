# src/gated_feedback/models/payment.py
"""Ledger of on-chain payment attempts keyed by transaction hash."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from gated_feedback.db.session import Base
from gated_feedback.db.time import utcnow

PAYMENT_STATUS_PENDING = "pending"
PAYMENT_STATUS_CONFIRMED = "confirmed"
PAYMENT_STATUS_FAILED = "failed"
PAYMENT_STATUSES = (PAYMENT_STATUS_PENDING, PAYMENT_STATUS_CONFIRMED, PAYMENT_STATUS_FAILED)
TERMINAL_PAYMENT_STATUSES = (PAYMENT_STATUS_CONFIRMED, PAYMENT_STATUS_FAILED)

PAYMENT_PURPOSE_FEEDBACK = "feedback"
PAYMENT_PURPOSE_FORM = "form"
PAYMENT_PURPOSE_ADMIN = "admin"
PAYMENT_PURPOSES = (PAYMENT_PURPOSE_FEEDBACK, PAYMENT_PURPOSE_FORM, PAYMENT_PURPOSE_ADMIN)


class Payment(Base):
    """A native-token transfer observed from a wallet.

    Rows are created pending when the wallet returns a transaction hash and
    move exactly once to a terminal status when the receipt is known.
    """

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'failed')",
            name="ck_payments_status",
        ),
        CheckConstraint(
            "purpose IN ('feedback', 'form', 'admin')",
            name="ck_payments_purpose",
        ),
        Index("ix_payments_wallet_status", "wallet_address", "status"),
        Index("ix_payments_wallet_form", "wallet_address", "form_id"),
    )

    payment_hash: Mapped[str] = mapped_column(String(100), primary_key=True)
    wallet_address: Mapped[str] = mapped_column(String(64), nullable=False)
    # Token amount as a decimal string, e.g. "0.01".
    amount: Mapped[str] = mapped_column(String(80), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=PAYMENT_STATUS_PENDING
    )
    purpose: Mapped[str] = mapped_column(
        String(16), nullable=False, default=PAYMENT_PURPOSE_FEEDBACK
    )
    block_number: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    gas_used: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    form_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("forms.id"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_confirmed(self) -> bool:
        return self.status == PAYMENT_STATUS_CONFIRMED

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_PAYMENT_STATUSES
