"""Payment Ledger: payment attempts keyed by transaction hash.

Each helper is a narrow query or a single committed write. Recording a
payment is idempotent per hash: the first call creates the row and later
calls update it in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gated_feedback.db.time import utcnow
from gated_feedback.models.payment import (
    PAYMENT_PURPOSE_FEEDBACK,
    PAYMENT_PURPOSES,
    PAYMENT_STATUS_CONFIRMED,
    PAYMENT_STATUS_PENDING,
    PAYMENT_STATUSES,
    Payment,
)
from gated_feedback.services.errors import ConflictError, InvalidInputError, NotFoundError
from gated_feedback.utils.normalize import format_amount, normalize_address, parse_amount

logger = logging.getLogger(__name__)

RECORD_ACTION_CREATED = "created"
RECORD_ACTION_UPDATED = "updated"

__all__ = [
    "PaymentStatusSummary",
    "RECORD_ACTION_CREATED",
    "RECORD_ACTION_UPDATED",
    "find_by_hash",
    "create_payment",
    "update_by_hash",
    "record_payment",
    "has_confirmed_payment",
    "has_confirmed_payment_for_form",
    "latest_confirmed_payment",
    "latest_confirmed_form_payment",
    "payment_status",
]


@dataclass(frozen=True)
class PaymentStatusSummary:
    """Confirmed-payment overview for a wallet."""

    has_payment: bool
    payment_count: int
    last_payment: Payment | None


def _check_status(status: str) -> None:
    if status not in PAYMENT_STATUSES:
        raise InvalidInputError(
            f"Invalid payment status. Must be one of: {', '.join(PAYMENT_STATUSES)}"
        )


def find_by_hash(db: Session, payment_hash: str) -> Payment | None:
    """Return the payment recorded for ``payment_hash``, if any."""
    return db.query(Payment).filter(Payment.payment_hash == payment_hash.lower()).first()


def create_payment(
    db: Session,
    *,
    payment_hash: str,
    wallet_address: str,
    amount: Decimal | str,
    status: str = PAYMENT_STATUS_PENDING,
    block_number: int | None = None,
    gas_used: int | None = None,
    form_id: int | None = None,
    purpose: str = PAYMENT_PURPOSE_FEEDBACK,
) -> Payment:
    """Insert a new payment row; ``confirmed_at`` is set iff it starts confirmed."""
    _check_status(status)
    if purpose not in PAYMENT_PURPOSES:
        raise InvalidInputError(f"Invalid payment purpose: {purpose}")

    payment = Payment(
        payment_hash=payment_hash.lower(),
        wallet_address=normalize_address(wallet_address),
        amount=format_amount(parse_amount(amount)),
        status=status,
        purpose=purpose,
        block_number=block_number,
        gas_used=gas_used,
        form_id=form_id,
        confirmed_at=utcnow() if status == PAYMENT_STATUS_CONFIRMED else None,
    )
    db.add(payment)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Payment hash already recorded") from exc
    db.refresh(payment)
    return payment


def update_by_hash(
    db: Session,
    payment_hash: str,
    *,
    status: str | None = None,
    block_number: int | None = None,
    gas_used: int | None = None,
) -> Payment:
    """Apply a partial update to an existing payment.

    Status only moves from pending to a terminal value; repeating the current
    status is accepted so retried requests stay harmless.
    """
    payment = find_by_hash(db, payment_hash)
    if payment is None:
        raise NotFoundError("Payment not found")

    if status is not None:
        _check_status(status)
        if status != payment.status:
            if payment.is_terminal:
                raise ConflictError(
                    f"Payment is already {payment.status} and cannot become {status}"
                )
            payment.status = status
        if status == PAYMENT_STATUS_CONFIRMED and payment.confirmed_at is None:
            payment.confirmed_at = utcnow()

    if block_number is not None:
        payment.block_number = block_number
    if gas_used is not None:
        payment.gas_used = gas_used

    db.commit()
    db.refresh(payment)
    return payment


def record_payment(
    db: Session,
    *,
    payment_hash: str,
    wallet_address: str,
    amount: Decimal | str,
    status: str | None = None,
    block_number: int | None = None,
    gas_used: int | None = None,
    form_id: int | None = None,
    purpose: str = PAYMENT_PURPOSE_FEEDBACK,
) -> tuple[Payment, str]:
    """Create or update the row for ``payment_hash``.

    Returns the stored payment and whether it was ``created`` or ``updated``.
    """
    wallet = normalize_address(wallet_address)
    existing = find_by_hash(db, payment_hash)

    if existing is None:
        try:
            payment = create_payment(
                db,
                payment_hash=payment_hash,
                wallet_address=wallet,
                amount=amount,
                status=status or PAYMENT_STATUS_PENDING,
                block_number=block_number,
                gas_used=gas_used,
                form_id=form_id,
                purpose=purpose,
            )
            return payment, RECORD_ACTION_CREATED
        except ConflictError:
            # Another request inserted the same hash first; fall through to update.
            logger.info("Payment %s recorded concurrently; updating instead", payment_hash)
            existing = find_by_hash(db, payment_hash)
            if existing is None:
                raise

    if existing.wallet_address != wallet:
        raise ConflictError("Payment hash is recorded for a different wallet")
    if existing.purpose != purpose or existing.form_id != form_id:
        raise ConflictError("Payment hash is recorded for a different purpose or form")

    payment = update_by_hash(
        db,
        payment_hash,
        status=status,
        block_number=block_number,
        gas_used=gas_used,
    )
    return payment, RECORD_ACTION_UPDATED


def _confirmed_query(db: Session, wallet_address: str):
    return db.query(Payment).filter(
        Payment.wallet_address == normalize_address(wallet_address),
        Payment.status == PAYMENT_STATUS_CONFIRMED,
    )


def latest_confirmed_payment(
    db: Session,
    wallet_address: str,
    purpose: str | None = PAYMENT_PURPOSE_FEEDBACK,
) -> Payment | None:
    """Most recently confirmed payment of a wallet, optionally by purpose."""
    query = _confirmed_query(db, wallet_address)
    if purpose is not None:
        query = query.filter(Payment.purpose == purpose)
    return query.order_by(Payment.confirmed_at.desc()).first()


def has_confirmed_payment(
    db: Session,
    wallet_address: str,
    purpose: str | None = PAYMENT_PURPOSE_FEEDBACK,
) -> bool:
    return latest_confirmed_payment(db, wallet_address, purpose) is not None


def latest_confirmed_form_payment(
    db: Session, wallet_address: str, form_id: int
) -> Payment | None:
    return (
        _confirmed_query(db, wallet_address)
        .filter(Payment.form_id == form_id)
        .order_by(Payment.confirmed_at.desc())
        .first()
    )


def has_confirmed_payment_for_form(
    db: Session,
    wallet_address: str,
    form_id: int,
    minimum_amount: Decimal | str | None = None,
) -> bool:
    """True when the latest confirmed payment for the form covers ``minimum_amount``."""
    payment = latest_confirmed_form_payment(db, wallet_address, form_id)
    if payment is None:
        return False
    if minimum_amount is None:
        return True
    return parse_amount(payment.amount) >= parse_amount(minimum_amount)


def payment_status(
    db: Session,
    wallet_address: str,
    purpose: str | None = PAYMENT_PURPOSE_FEEDBACK,
) -> PaymentStatusSummary:
    """Summarize confirmed payments for ``check-payment-status``."""
    query = _confirmed_query(db, wallet_address)
    if purpose is not None:
        query = query.filter(Payment.purpose == purpose)
    count = query.count()
    last_payment = latest_confirmed_payment(db, wallet_address, purpose) if count else None
    return PaymentStatusSummary(
        has_payment=count > 0,
        payment_count=int(count),
        last_payment=last_payment,
    )
