"""Admin Registry: wallets allowed to create and manage forms."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gated_feedback.models.admin import ADMIN_STATUS_CONFIRMED, Admin
from gated_feedback.models.payment import PAYMENT_PURPOSE_ADMIN, Payment
from gated_feedback.services import payment_ledger
from gated_feedback.services.errors import ConflictError, NotAuthorizedError
from gated_feedback.utils.normalize import format_amount, normalize_address, parse_amount

__all__ = ["is_admin", "get_admin", "create_admin", "verify_admin_payment"]


def get_admin(db: Session, wallet_address: str) -> Admin | None:
    return (
        db.query(Admin)
        .filter(
            Admin.wallet_address == normalize_address(wallet_address),
            Admin.status == ADMIN_STATUS_CONFIRMED,
        )
        .first()
    )


def is_admin(db: Session, wallet_address: str) -> bool:
    """True iff a confirmed admin row exists for the wallet."""
    return get_admin(db, wallet_address) is not None


def verify_admin_payment(
    db: Session,
    wallet_address: str,
    payment_hash: str,
    minimum_amount: Decimal | str,
) -> Payment:
    """Return the admin-fee payment backing a grant or raise ``NotAuthorizedError``."""
    payment = payment_ledger.find_by_hash(db, payment_hash)
    wallet = normalize_address(wallet_address)
    if (
        payment is None
        or payment.wallet_address != wallet
        or not payment.is_confirmed
        or payment.purpose != PAYMENT_PURPOSE_ADMIN
    ):
        raise NotAuthorizedError("No confirmed admin payment found for this wallet")
    if parse_amount(payment.amount) < parse_amount(minimum_amount):
        raise NotAuthorizedError("Admin payment is below the required amount")
    return payment


def create_admin(
    db: Session,
    *,
    wallet_address: str,
    payment_hash: str,
    amount: Decimal | str,
) -> Admin:
    """Grant admin status. Rejects wallets that already hold it."""
    wallet = normalize_address(wallet_address)
    if is_admin(db, wallet):
        raise ConflictError("Wallet is already an admin")

    admin = Admin(
        wallet_address=wallet,
        payment_hash=payment_hash.lower(),
        amount=format_amount(parse_amount(amount)),
        status=ADMIN_STATUS_CONFIRMED,
    )
    db.add(admin)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Wallet is already an admin") from exc
    db.refresh(admin)
    return admin
