# src/gated_feedback/api/v1/endpoints/admin.py
"""Admin registry and form management endpoints."""

import logging

from fastapi import APIRouter, status
from sqlalchemy.orm import Session

from gated_feedback.api.v1.dependencies import SessionDep
from gated_feedback.core.settings import settings
from gated_feedback.schemas.admin import (
    AdminCreate,
    AdminCreateResponse,
    AdminFormsResponse,
    AdminStatusResponse,
    AdminSummary,
    AdminWallet,
    FormResponsesRequest,
    FormResponsesResponse,
)
from gated_feedback.schemas.form import (
    FormCreate,
    FormCreateResponse,
    FormRow,
    FormSummary,
    QuestionRow,
    ResponseRow,
)
from gated_feedback.services import admin_registry, form_registry, response_ledger
from gated_feedback.services.errors import ConflictError, NotAuthorizedError, NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _require_admin(db: Session, wallet_address: str, message: str) -> None:
    if not admin_registry.is_admin(db, wallet_address):
        raise NotAuthorizedError(message)


@router.post("/check-status", response_model=AdminStatusResponse)
async def check_status(body: AdminWallet, db: SessionDep) -> AdminStatusResponse:
    return AdminStatusResponse(is_admin=admin_registry.is_admin(db, body.wallet_address))


@router.post("/create", response_model=AdminCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_admin(body: AdminCreate, db: SessionDep) -> AdminCreateResponse:
    """Grant admin status to a wallet whose admin fee has confirmed."""
    if admin_registry.is_admin(db, body.wallet_address):
        raise ConflictError("Wallet is already an admin")

    payment = admin_registry.verify_admin_payment(
        db,
        body.wallet_address,
        body.payment_hash,
        settings.admin_payment_amount,
    )
    admin = admin_registry.create_admin(
        db,
        wallet_address=body.wallet_address,
        payment_hash=payment.payment_hash,
        amount=body.amount,
    )
    logger.info("Granted admin to %s", admin.wallet_address)
    return AdminCreateResponse(
        admin=AdminSummary(
            id=admin.id,
            wallet_address=admin.wallet_address,
            created_at=admin.created_at,
        )
    )


@router.post("/forms", response_model=AdminFormsResponse)
async def list_forms(body: AdminWallet, db: SessionDep) -> AdminFormsResponse:
    _require_admin(db, body.wallet_address, "Access denied. Admin privileges required.")
    forms = form_registry.get_by_admin(db, body.wallet_address)
    return AdminFormsResponse(forms=[FormRow.model_validate(form) for form in forms])


@router.post(
    "/create-form",
    response_model=FormCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_form(body: FormCreate, db: SessionDep) -> FormCreateResponse:
    """Create a form with its questions for the calling admin."""
    _require_admin(
        db,
        body.admin_wallet_address,
        "Access denied. Admin privileges required to create forms.",
    )

    slug = form_registry.validate_slug(body.slug)
    if form_registry.slug_taken(db, slug):
        raise ConflictError("Form slug already exists. Please choose a different one.")

    drafts = form_registry.build_question_drafts(
        [question.model_dump() for question in body.questions]
    )
    form = form_registry.create_form(
        db,
        name=body.name,
        slug=slug,
        title=body.title,
        description=body.description,
        payment_amount=body.payment_amount,
        admin_wallet_address=body.admin_wallet_address,
        questions=drafts,
    )
    logger.info(
        "Admin %s created form %s with %d questions",
        form.admin_wallet_address,
        slug,
        len(drafts),
    )
    return FormCreateResponse(
        form=FormSummary(
            id=form.id,
            name=form.name,
            slug=form.slug,
            title=form.title,
            description=form.description,
            payment_amount=form.payment_amount,
            created_at=form.created_at,
        )
    )


@router.post("/form-responses", response_model=FormResponsesResponse)
async def form_responses(body: FormResponsesRequest, db: SessionDep) -> FormResponsesResponse:
    """Return a form's questions and responses to the admin who owns it."""
    _require_admin(db, body.wallet_address, "Access denied. Admin privileges required.")

    owned = {form.id: form for form in form_registry.get_by_admin(db, body.wallet_address)}
    form = owned.get(body.form_id)
    if form is None:
        raise NotFoundError("Form not found or access denied")

    questions = form_registry.get_questions(db, form.id)
    responses = response_ledger.get_responses(db, form.id)
    return FormResponsesResponse(
        form=FormRow.model_validate(form),
        questions=[QuestionRow.model_validate(question) for question in questions],
        responses=[ResponseRow.model_validate(response) for response in responses],
        total=len(responses),
    )
