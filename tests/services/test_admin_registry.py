"""Tests for the admin registry."""

from __future__ import annotations

import pytest

from gated_feedback.services import admin_registry
from gated_feedback.services.errors import ConflictError, NotAuthorizedError

WALLET = "0x" + "d" * 40


def test_is_admin_is_case_insensitive(db_session, admin_wallet) -> None:
    assert admin_registry.is_admin(db_session, admin_wallet)
    assert admin_registry.is_admin(db_session, admin_wallet.upper().replace("0X", "0x"))
    assert not admin_registry.is_admin(db_session, WALLET)


def test_second_grant_conflicts(db_session, admin_wallet, make_payment) -> None:
    payment = make_payment(admin_wallet, purpose="admin", amount="0.001")
    with pytest.raises(ConflictError):
        admin_registry.create_admin(
            db_session,
            wallet_address=admin_wallet,
            payment_hash=payment.payment_hash,
            amount="0.001",
        )


def test_verify_admin_payment(db_session, make_payment) -> None:
    payment = make_payment(WALLET, purpose="admin", amount="0.001")
    verified = admin_registry.verify_admin_payment(db_session, WALLET, payment.payment_hash, "0.001")
    assert verified.payment_hash == payment.payment_hash


@pytest.mark.parametrize(
    ("status", "purpose", "amount", "minimum"),
    [
        ("pending", "admin", "0.001", "0.001"),
        ("confirmed", "feedback", "0.001", "0.001"),
        ("confirmed", "admin", "0.0005", "0.001"),
    ],
)
def test_verify_admin_payment_rejects(db_session, make_payment, status, purpose, amount, minimum) -> None:
    payment = make_payment(WALLET, status=status, purpose=purpose, amount=amount)
    with pytest.raises(NotAuthorizedError):
        admin_registry.verify_admin_payment(db_session, WALLET, payment.payment_hash, minimum)


def test_verify_admin_payment_wrong_wallet(db_session, make_payment) -> None:
    payment = make_payment("0x" + "e" * 40, purpose="admin", amount="0.001")
    with pytest.raises(NotAuthorizedError):
        admin_registry.verify_admin_payment(db_session, WALLET, payment.payment_hash, "0.001")
