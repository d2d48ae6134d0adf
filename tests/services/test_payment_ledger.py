"""Tests for the payment ledger."""

from __future__ import annotations

from decimal import Decimal

import pytest

from gated_feedback.models import Payment
from gated_feedback.services import payment_ledger
from gated_feedback.services.errors import ConflictError, InvalidInputError, NotFoundError

WALLET = "0x" + "b" * 40


def test_pending_then_confirmed_keeps_single_row(db_session) -> None:
    payment, action = payment_ledger.record_payment(
        db_session, payment_hash="0x111", wallet_address=WALLET, amount="0.01"
    )
    assert action == payment_ledger.RECORD_ACTION_CREATED
    assert payment.status == "pending"
    assert payment.confirmed_at is None

    payment, action = payment_ledger.record_payment(
        db_session,
        payment_hash="0x111",
        wallet_address=WALLET,
        amount="0.01",
        status="confirmed",
        block_number=5,
        gas_used=21000,
    )
    assert action == payment_ledger.RECORD_ACTION_UPDATED

    stored = payment_ledger.find_by_hash(db_session, "0x111")
    assert stored is not None
    assert stored.status == "confirmed"
    assert stored.block_number == 5
    assert stored.gas_used == 21000
    assert stored.confirmed_at is not None
    assert db_session.query(Payment).count() == 1


def test_hash_and_wallet_are_lowercased(db_session) -> None:
    payment_ledger.create_payment(
        db_session,
        payment_hash="0xABCDEF",
        wallet_address="0x" + "B" * 40,
        amount="1",
    )
    stored = payment_ledger.find_by_hash(db_session, "0xabcdef")
    assert stored is not None
    assert stored.wallet_address == WALLET


def test_create_confirmed_sets_confirmed_at(db_session) -> None:
    payment = payment_ledger.create_payment(
        db_session,
        payment_hash="0x222",
        wallet_address=WALLET,
        amount=Decimal("0.0100"),
        status="confirmed",
    )
    assert payment.confirmed_at is not None
    assert payment.amount == "0.01"


def test_duplicate_create_conflicts(db_session) -> None:
    payment_ledger.create_payment(db_session, payment_hash="0x333", wallet_address=WALLET, amount="1")
    with pytest.raises(ConflictError):
        payment_ledger.create_payment(
            db_session, payment_hash="0x333", wallet_address=WALLET, amount="1"
        )


def test_update_unknown_hash(db_session) -> None:
    with pytest.raises(NotFoundError):
        payment_ledger.update_by_hash(db_session, "0x999", status="confirmed")


def test_terminal_status_is_final(db_session) -> None:
    payment_ledger.create_payment(
        db_session, payment_hash="0x444", wallet_address=WALLET, amount="1", status="failed"
    )
    with pytest.raises(ConflictError):
        payment_ledger.update_by_hash(db_session, "0x444", status="confirmed")

    # Repeating the terminal status is harmless.
    payment = payment_ledger.update_by_hash(db_session, "0x444", status="failed")
    assert payment.status == "failed"


def test_invalid_status_rejected(db_session) -> None:
    with pytest.raises(InvalidInputError):
        payment_ledger.create_payment(
            db_session, payment_hash="0x555", wallet_address=WALLET, amount="1", status="done"
        )


def test_record_for_other_wallet_conflicts(db_session) -> None:
    payment_ledger.record_payment(db_session, payment_hash="0x666", wallet_address=WALLET, amount="1")
    with pytest.raises(ConflictError):
        payment_ledger.record_payment(
            db_session,
            payment_hash="0x666",
            wallet_address="0x" + "c" * 40,
            amount="1",
            status="confirmed",
        )


def test_payment_queries_are_scoped_by_purpose_and_form(make_payment, db_session) -> None:
    make_payment(WALLET, status="pending")
    assert not payment_ledger.has_confirmed_payment(db_session, WALLET)

    make_payment(WALLET, purpose="admin")
    assert not payment_ledger.has_confirmed_payment(db_session, WALLET)
    assert payment_ledger.has_confirmed_payment(db_session, WALLET, "admin")

    make_payment(WALLET)
    assert payment_ledger.has_confirmed_payment(db_session, WALLET.upper().replace("0X", "0x"))

    summary = payment_ledger.payment_status(db_session, WALLET)
    assert summary.has_payment
    assert summary.payment_count == 1
    assert summary.last_payment is not None
    assert summary.last_payment.purpose == "feedback"


def test_form_payment_amount_threshold(make_payment, db_session, admin_wallet) -> None:
    from gated_feedback.services import form_registry

    form = form_registry.create_form(
        db_session,
        name="Survey",
        slug="survey",
        title="Survey",
        payment_amount="0.05",
        admin_wallet_address=admin_wallet,
        questions=form_registry.build_question_drafts([{"question_text": "Why?"}]),
    )
    make_payment(WALLET, purpose="form", form_id=form.id, amount="0.05")

    assert payment_ledger.has_confirmed_payment_for_form(db_session, WALLET, form.id)
    assert payment_ledger.has_confirmed_payment_for_form(db_session, WALLET, form.id, "0.05")
    assert not payment_ledger.has_confirmed_payment_for_form(db_session, WALLET, form.id, "0.06")
    assert not payment_ledger.has_confirmed_payment_for_form(db_session, WALLET, form.id + 1)


def test_empty_status_summary(db_session) -> None:
    summary = payment_ledger.payment_status(db_session, WALLET)
    assert summary == payment_ledger.PaymentStatusSummary(False, 0, None)


def test_record_under_another_purpose_conflicts(db_session) -> None:
    payment_ledger.record_payment(
        db_session, payment_hash="0x777", wallet_address=WALLET, amount="1", purpose="admin"
    )
    with pytest.raises(ConflictError):
        payment_ledger.record_payment(
            db_session,
            payment_hash="0x777",
            wallet_address=WALLET,
            amount="1",
            status="confirmed",
        )
    assert payment_ledger.find_by_hash(db_session, "0x777").status == "pending"
