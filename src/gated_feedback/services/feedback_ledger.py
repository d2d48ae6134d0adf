"""Feedback Ledger: one paid feedback entry per wallet."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gated_feedback.core.settings import settings
from gated_feedback.models.feedback import Feedback
from gated_feedback.models.payment import PAYMENT_PURPOSE_FEEDBACK
from gated_feedback.services import payment_ledger
from gated_feedback.services.errors import (
    ConflictError,
    InvalidInputError,
    NotAuthorizedError,
)
from gated_feedback.utils.normalize import normalize_address

logger = logging.getLogger(__name__)

DUPLICATE_FEEDBACK_MESSAGE = (
    "You have already submitted feedback. Only one feedback submission per wallet is allowed."
)

__all__ = [
    "FeedbackView",
    "FeedbackPage",
    "has_wallet_submitted_feedback",
    "get_feedback_by_wallet",
    "create_feedback",
    "submit_feedback",
    "get_all_feedback",
]


@dataclass(frozen=True)
class FeedbackView:
    """Public projection of a feedback row."""

    id: int
    feedback: str
    category: str
    wallet_address: str | None
    is_anonymous: bool
    created_at: datetime

    @classmethod
    def from_row(cls, row: Feedback) -> FeedbackView:
        return cls(
            id=row.id,
            feedback=row.feedback,
            category=row.category,
            # Anonymous rows keep their wallet in storage but never expose it here.
            wallet_address=None if row.is_anonymous else row.wallet_address,
            is_anonymous=row.is_anonymous,
            created_at=row.created_at,
        )


@dataclass(frozen=True)
class FeedbackPage:
    rows: list[FeedbackView]
    total: int


def get_feedback_by_wallet(db: Session, wallet_address: str) -> Feedback | None:
    return (
        db.query(Feedback)
        .filter(Feedback.wallet_address == normalize_address(wallet_address))
        .first()
    )


def has_wallet_submitted_feedback(db: Session, wallet_address: str) -> bool:
    return get_feedback_by_wallet(db, wallet_address) is not None


def validate_feedback(text: str, category: str) -> str:
    """Return trimmed feedback text or raise ``InvalidInputError``."""
    allowed = settings.feedback_categories
    if category not in allowed:
        raise InvalidInputError(f"Invalid category. Must be one of: {', '.join(allowed)}")
    cleaned = text.strip()
    if not cleaned:
        raise InvalidInputError("Feedback, category, and wallet address are required")
    if len(cleaned) > settings.feedback_max_length:
        raise InvalidInputError(
            f"Feedback must be {settings.feedback_max_length} characters or less"
        )
    return cleaned


def create_feedback(
    db: Session,
    *,
    text: str,
    category: str,
    wallet_address: str,
    payment_hash: str,
    anonymous: bool = True,
) -> Feedback:
    row = Feedback(
        feedback=text,
        category=category,
        wallet_address=normalize_address(wallet_address),
        payment_hash=payment_hash,
        is_anonymous=anonymous,
    )
    db.add(row)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("Duplicate feedback from %s", wallet_address)
        raise ConflictError(DUPLICATE_FEEDBACK_MESSAGE) from exc
    db.refresh(row)
    return row


def submit_feedback(
    db: Session,
    *,
    text: str,
    category: str,
    wallet_address: str,
    anonymous: bool = True,
) -> Feedback:
    """Validate, re-check the gates and store feedback for a wallet."""
    cleaned = validate_feedback(text, category)

    if has_wallet_submitted_feedback(db, wallet_address):
        raise ConflictError(DUPLICATE_FEEDBACK_MESSAGE)

    payment = payment_ledger.latest_confirmed_payment(
        db, wallet_address, PAYMENT_PURPOSE_FEEDBACK
    )
    if payment is None:
        raise NotAuthorizedError(
            "No confirmed payment found for this wallet. Payment required to submit feedback."
        )

    return create_feedback(
        db,
        text=cleaned,
        category=category,
        wallet_address=wallet_address,
        payment_hash=payment.payment_hash,
        anonymous=anonymous,
    )


def get_all_feedback(
    db: Session,
    *,
    category: str | None = None,
    anonymous: bool | None = None,
    limit: int = 50,
    offset: int = 0,
) -> FeedbackPage:
    """Filtered, newest-first page of feedback with wallets redacted."""
    query = db.query(Feedback)
    if category is not None:
        query = query.filter(Feedback.category == category)
    if anonymous is not None:
        query = query.filter(Feedback.is_anonymous.is_(anonymous))

    total = query.count()
    rows = (
        query.order_by(Feedback.created_at.desc(), Feedback.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
    return FeedbackPage(rows=[FeedbackView.from_row(row) for row in rows], total=total)
