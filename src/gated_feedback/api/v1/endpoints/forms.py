# src/gated_feedback/api/v1/endpoints/forms.py
"""Public form endpoints: fetch, payment, and response submission."""

from fastapi import APIRouter, Response, status

from gated_feedback.api.v1.dependencies import SessionDep
from gated_feedback.models.payment import PAYMENT_PURPOSE_FORM
from gated_feedback.schemas.form import (
    FormPaymentCheck,
    FormPaymentCheckResponse,
    FormRow,
    FormSubmissionCheck,
    FormSubmissionCheckResponse,
    PublicForm,
    QuestionRow,
    ResponseSubmit,
    ResponseSubmitResponse,
)
from gated_feedback.schemas.payment import (
    FormPaymentRecordRequest,
    PaymentRecordResponse,
    PaymentRow,
)
from gated_feedback.services import form_registry, payment_ledger, response_ledger
from gated_feedback.services.errors import NotFoundError

router = APIRouter(prefix="/forms", tags=["forms"])


@router.post("/check-payment", response_model=FormPaymentCheckResponse)
async def check_payment(body: FormPaymentCheck, db: SessionDep) -> FormPaymentCheckResponse:
    """True when the wallet's latest confirmed payment for the form covers the amount."""
    has_payment = payment_ledger.has_confirmed_payment_for_form(
        db,
        body.wallet_address,
        body.form_id,
        minimum_amount=body.payment_amount,
    )
    return FormPaymentCheckResponse(has_payment=has_payment)


@router.post("/check-submission", response_model=FormSubmissionCheckResponse)
async def check_submission(
    body: FormSubmissionCheck,
    db: SessionDep,
) -> FormSubmissionCheckResponse:
    return FormSubmissionCheckResponse(
        has_submitted=response_ledger.has_submitted(db, body.form_id, body.wallet_address)
    )


@router.post(
    "/record-payment",
    response_model=PaymentRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_form_payment(
    body: FormPaymentRecordRequest,
    db: SessionDep,
    response: Response,
) -> PaymentRecordResponse:
    if form_registry.get_by_id(db, body.form_id, active_only=False) is None:
        raise NotFoundError("Form not found")

    payment, action = payment_ledger.record_payment(
        db,
        payment_hash=body.payment_hash,
        wallet_address=body.wallet_address,
        amount=body.amount,
        status=body.status,
        block_number=body.block_number,
        gas_used=body.gas_used,
        form_id=body.form_id,
        purpose=PAYMENT_PURPOSE_FORM,
    )
    if action == payment_ledger.RECORD_ACTION_UPDATED:
        response.status_code = status.HTTP_200_OK
    return PaymentRecordResponse(payment=PaymentRow.model_validate(payment), action=action)


@router.post(
    "/submit-response",
    response_model=ResponseSubmitResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_response(body: ResponseSubmit, db: SessionDep) -> ResponseSubmitResponse:
    """Store the wallet's answers after re-checking payment and duplicates."""
    stored = response_ledger.submit_response(
        db,
        form_id=body.form_id,
        answers=body.responses,
        wallet_address=body.wallet_address,
    )
    return ResponseSubmitResponse(response_id=stored.id, submitted_at=stored.submitted_at)


@router.get("/by-slug/{slug}", response_model=PublicForm)
async def get_form(slug: str, db: SessionDep) -> PublicForm:
    """Fetch an active form and its questions by slug."""
    form = form_registry.get_by_slug(db, slug)
    if form is None:
        raise NotFoundError("Form not found")
    questions = form_registry.get_questions(db, form.id)
    return PublicForm(
        form=FormRow.model_validate(form),
        questions=[QuestionRow.model_validate(question) for question in questions],
    )
