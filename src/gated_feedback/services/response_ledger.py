"""Response Ledger: one set of answers per wallet per form."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gated_feedback.models.form import Form, FormResponse
from gated_feedback.services import form_registry, payment_ledger
from gated_feedback.services.answers import validate_answers
from gated_feedback.services.errors import ConflictError, NotAuthorizedError, NotFoundError
from gated_feedback.utils.normalize import normalize_address, parse_amount

logger = logging.getLogger(__name__)

__all__ = ["has_submitted", "create_response", "submit_response", "get_responses"]


def has_submitted(db: Session, form_id: int, wallet_address: str) -> bool:
    return (
        db.query(FormResponse.id)
        .filter(
            FormResponse.form_id == form_id,
            FormResponse.wallet_address == normalize_address(wallet_address),
        )
        .first()
        is not None
    )


def create_response(
    db: Session,
    *,
    form_id: int,
    answers: Mapping[str, Any],
    wallet_address: str,
    payment_hash: str,
) -> FormResponse:
    """Insert a response row; the unique index rejects a second one."""
    response = FormResponse(
        form_id=form_id,
        response_data=dict(answers),
        wallet_address=normalize_address(wallet_address),
        payment_hash=payment_hash,
    )
    db.add(response)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("Duplicate response for form %s by %s", form_id, wallet_address)
        raise ConflictError("You have already submitted a response to this form") from exc
    db.refresh(response)
    return response


def submit_response(
    db: Session,
    *,
    form_id: int,
    answers: Mapping[str, Any],
    wallet_address: str,
) -> FormResponse:
    """Re-verify every gate and store the wallet's answers.

    Order of checks: the wallet has not answered yet, it holds a confirmed
    payment for this form, the form is active, the payment covers the
    form's price, and the answers fit the questions.
    """
    if has_submitted(db, form_id, wallet_address):
        raise ConflictError("You have already submitted a response to this form")

    payment = payment_ledger.latest_confirmed_form_payment(db, wallet_address, form_id)
    if payment is None:
        raise NotAuthorizedError("Payment required for this specific form to submit response")

    form: Form | None = form_registry.get_by_id(db, form_id)
    if form is None:
        raise NotFoundError("Form not found")
    if parse_amount(payment.amount) < parse_amount(form.payment_amount):
        raise NotAuthorizedError("Confirmed payment is below the amount this form requires")

    questions = form_registry.get_questions(db, form_id)
    if not questions:
        raise NotFoundError("Form not found or has no questions")

    cleaned = validate_answers(questions, answers)
    return create_response(
        db,
        form_id=form_id,
        answers=cleaned,
        wallet_address=wallet_address,
        payment_hash=payment.payment_hash,
    )


def get_responses(db: Session, form_id: int) -> list[FormResponse]:
    """All responses to a form, newest first."""
    return (
        db.query(FormResponse)
        .filter(FormResponse.form_id == form_id)
        .order_by(FormResponse.submitted_at.desc(), FormResponse.id.desc())
        .all()
    )
