"""Wallet providers used by the submission workflow.

A wallet only needs to report its connected account and send a native
transfer. Browser wallets satisfy the same interface from the front end;
:class:`JsonRpcWallet` talks to a node holding unlocked dev accounts.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Protocol

from gated_feedback.core.settings import settings
from gated_feedback.services.rpc import ChainRpcClient, RpcError, token_to_wei
from gated_feedback.utils.normalize import normalize_address, normalize_tx_hash

logger = logging.getLogger(__name__)

# Gas limit of a plain value transfer.
TRANSFER_GAS_LIMIT = 21000


class WalletError(RuntimeError):
    """Raised when the wallet refuses or fails to send a transaction."""


class WalletProvider(Protocol):
    """Interface the workflow expects from a connected wallet."""

    async def get_address(self) -> str | None:
        """Return the connected account, or ``None`` when disconnected."""
        ...

    async def send_payment(self, to_address: str, amount: Decimal) -> str:
        """Send ``amount`` native tokens and return the transaction hash."""
        ...


class JsonRpcWallet:
    """Wallet backed by ``eth_sendTransaction`` on a node."""

    def __init__(
        self,
        rpc: ChainRpcClient,
        account: str | None,
        *,
        chain_id: int | None = None,
    ) -> None:
        self.rpc = rpc
        self.account = normalize_address(account) if account else None
        self.chain_id = chain_id if chain_id is not None else settings.chain_id
        self._chain_checked = False

    async def get_address(self) -> str | None:
        return self.account

    async def _check_chain(self) -> None:
        if self._chain_checked:
            return
        remote = await self.rpc.get_chain_id()
        if remote != self.chain_id:
            logger.warning("Node reports chain %s, expected %s", remote, self.chain_id)
        self._chain_checked = True

    async def send_payment(self, to_address: str, amount: Decimal) -> str:
        if self.account is None:
            raise WalletError("Wallet not connected")

        try:
            value = token_to_wei(amount)
        except ValueError as exc:
            raise WalletError(str(exc)) from exc

        try:
            await self._check_chain()
            transaction = {
                "from": self.account,
                "to": normalize_address(to_address),
                "value": value,
                "gas": TRANSFER_GAS_LIMIT,
                "gasPrice": await self.rpc.get_gas_price(),
            }
            result = await self.rpc.send_transaction(transaction)
        except RpcError as exc:
            raise WalletError(f"Transaction failed: {exc}") from exc

        try:
            tx_hash = normalize_tx_hash(result)
        except ValueError as exc:
            raise WalletError(str(exc)) from exc
        logger.info(
            "Sent %s %s from %s in %s", amount, settings.token_symbol, self.account, tx_hash
        )
        return tx_hash
