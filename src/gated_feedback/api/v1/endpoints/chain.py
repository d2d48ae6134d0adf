# src/gated_feedback/api/v1/endpoints/chain.py
"""Read-only blockchain lookups proxied through the node client."""

import logging

from fastapi import APIRouter

from gated_feedback.api.v1.dependencies import RpcClientDep
from gated_feedback.schemas.chain import (
    BalanceRequest,
    BalanceResponse,
    TransactionCheckRequest,
    TransactionCheckResponse,
)
from gated_feedback.services.errors import UpstreamError
from gated_feedback.services.rpc import RpcError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chain"])


@router.post("/balance", response_model=BalanceResponse)
async def get_balance(body: BalanceRequest, rpc: RpcClientDep) -> BalanceResponse:
    """Return the native balance of an address in wei."""
    try:
        reading = await rpc.get_balance(body.address)
    except RpcError as exc:
        raise UpstreamError("Failed to fetch balance", details=str(exc)) from exc
    return BalanceResponse(
        balance=str(reading.wei),
        address=reading.address,
        balance_hex=reading.hex_value,
    )


@router.post(
    "/check-transaction",
    response_model=TransactionCheckResponse,
    response_model_exclude_none=True,
)
async def check_transaction(
    body: TransactionCheckRequest,
    rpc: RpcClientDep,
) -> TransactionCheckResponse:
    """Report whether a transaction is mined and whether it succeeded.

    A missing receipt is not an error; it means the transaction is still
    pending.
    """
    try:
        check = await rpc.check_transaction(body.tx_hash)
    except RpcError as exc:
        raise UpstreamError("Failed to check transaction", details=str(exc)) from exc

    if not check.confirmed:
        return TransactionCheckResponse(confirmed=False, tx_hash=check.tx_hash)
    return TransactionCheckResponse(
        confirmed=True,
        tx_hash=check.tx_hash,
        success=check.success,
        block_number=check.block_number,
        gas_used=check.gas_used,
        status=check.status,
        receipt=check.receipt,
    )
