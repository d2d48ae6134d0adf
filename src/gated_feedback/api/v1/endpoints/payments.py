# src/gated_feedback/api/v1/endpoints/payments.py
"""Payment ledger endpoints for feedback and admin fees."""

from fastapi import APIRouter, Response, status

from gated_feedback.api.v1.dependencies import SessionDep
from gated_feedback.schemas.payment import (
    PaymentRecordRequest,
    PaymentRecordResponse,
    PaymentRow,
    PaymentStatusRequest,
    PaymentStatusResponse,
)
from gated_feedback.services import payment_ledger

router = APIRouter(tags=["payments"])


@router.post("/check-payment-status", response_model=PaymentStatusResponse)
async def check_payment_status(body: PaymentStatusRequest, db: SessionDep) -> PaymentStatusResponse:
    """Summarize the wallet's confirmed feedback payments."""
    summary = payment_ledger.payment_status(db, body.wallet_address)
    return PaymentStatusResponse(
        has_payment=summary.has_payment,
        payment_count=summary.payment_count,
        last_payment=(
            PaymentRow.model_validate(summary.last_payment) if summary.last_payment else None
        ),
    )


@router.post(
    "/record-payment",
    response_model=PaymentRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_payment(
    body: PaymentRecordRequest,
    db: SessionDep,
    response: Response,
) -> PaymentRecordResponse:
    """Create the payment row for a hash, or update it if already recorded."""
    payment, action = payment_ledger.record_payment(
        db,
        payment_hash=body.payment_hash,
        wallet_address=body.wallet_address,
        amount=body.amount,
        status=body.status,
        block_number=body.block_number,
        gas_used=body.gas_used,
        purpose=body.purpose,
    )
    if action == payment_ledger.RECORD_ACTION_UPDATED:
        response.status_code = status.HTTP_200_OK
    return PaymentRecordResponse(payment=PaymentRow.model_validate(payment), action=action)
