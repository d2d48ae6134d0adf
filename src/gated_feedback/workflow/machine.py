"""Submission workflow: pay, confirm, then submit exactly once.

One :class:`SubmissionWorkflow` drives one slot (the wallet's feedback, one
form, or the admin grant) through an explicit state machine::

    IDLE -> PAYMENT_PENDING -> PAYMENT_CONFIRMING
         -> PAYMENT_CONFIRMED | PAYMENT_FAILED | PAYMENT_TIMEOUT
    PAYMENT_CONFIRMED -> SUBMISSION_ALLOWED -> SUBMITTED

The server re-checks every gate on submission; local state only decides
which action the user is offered. Every action returns a :class:`Notice`
and :func:`render_status` turns a snapshot into the one-line status text.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol

import httpx

from gated_feedback.core.settings import settings
from gated_feedback.services.confirmation import (
    DEFAULT_TRANSIENT_ERRORS,
    ConfirmationPoller,
    PollOutcome,
    RetryPolicy,
    SleepFn,
)
from gated_feedback.services.rpc import DISPLAY_QUANTUM, wei_to_token

from .client import API_ERRORS, GateApiClient, GateApiError
from .wallet import WalletError, WalletProvider

logger = logging.getLogger(__name__)

ZERO_BALANCE = Decimal("0").quantize(DISPLAY_QUANTUM)


class WorkflowState(Enum):
    IDLE = "idle"
    PAYMENT_PENDING = "payment_pending"
    PAYMENT_CONFIRMING = "payment_confirming"
    PAYMENT_CONFIRMED = "payment_confirmed"
    PAYMENT_FAILED = "payment_failed"
    PAYMENT_TIMEOUT = "payment_timeout"
    SUBMISSION_ALLOWED = "submission_allowed"
    SUBMITTED = "submitted"


TRANSITIONS: dict[WorkflowState, frozenset[WorkflowState]] = {
    WorkflowState.IDLE: frozenset(
        {
            WorkflowState.PAYMENT_PENDING,
            WorkflowState.SUBMISSION_ALLOWED,
            WorkflowState.SUBMITTED,
        }
    ),
    WorkflowState.PAYMENT_PENDING: frozenset(
        {WorkflowState.PAYMENT_CONFIRMING, WorkflowState.IDLE}
    ),
    WorkflowState.PAYMENT_CONFIRMING: frozenset(
        {
            WorkflowState.PAYMENT_CONFIRMED,
            WorkflowState.PAYMENT_FAILED,
            WorkflowState.PAYMENT_TIMEOUT,
        }
    ),
    WorkflowState.PAYMENT_CONFIRMED: frozenset({WorkflowState.SUBMISSION_ALLOWED}),
    WorkflowState.PAYMENT_FAILED: frozenset({WorkflowState.PAYMENT_PENDING, WorkflowState.IDLE}),
    WorkflowState.PAYMENT_TIMEOUT: frozenset(
        {WorkflowState.PAYMENT_CONFIRMING, WorkflowState.IDLE}
    ),
    WorkflowState.SUBMISSION_ALLOWED: frozenset({WorkflowState.SUBMITTED}),
    WorkflowState.SUBMITTED: frozenset(),
}


class InvalidTransitionError(RuntimeError):
    """Raised when an action is not available in the current state."""

    def __init__(self, current: WorkflowState, target: WorkflowState | str) -> None:
        label = target.value if isinstance(target, WorkflowState) else target
        super().__init__(f"Cannot go from {current.value} to {label}")
        self.current = current
        self.target = target


class Severity(Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Notice:
    """User-facing summary of an action's outcome."""

    title: str
    message: str
    severity: Severity


@dataclass(frozen=True)
class SlotStatus:
    paid: bool
    submitted: bool


class Slot(Protocol):
    """What is being paid for and how it is recorded and submitted."""

    label: str
    amount: Decimal
    payment_purpose: str
    auto_submit: bool

    async def status(self, api: GateApiClient, wallet_address: str) -> SlotStatus: ...

    async def record(
        self,
        api: GateApiClient,
        *,
        wallet_address: str,
        payment_hash: str,
        status: str,
        block_number: int | None = None,
        gas_used: int | None = None,
    ) -> dict[str, Any]: ...

    async def submit(
        self,
        api: GateApiClient,
        *,
        wallet_address: str,
        payment_hash: str | None,
        payload: dict[str, Any],
    ) -> dict[str, Any]: ...


@dataclass
class FeedbackSlot:
    """The wallet's single feedback entry."""

    amount: Decimal = field(default_factory=lambda: settings.feedback_payment_amount)
    label: str = "feedback"
    payment_purpose: str = "feedback"
    auto_submit: bool = False

    async def status(self, api: GateApiClient, wallet_address: str) -> SlotStatus:
        submitted = await api.check_feedback_status(wallet_address)
        paid = await api.check_payment_status(wallet_address)
        return SlotStatus(
            paid=bool(paid.get("hasPayment")),
            submitted=bool(submitted.get("hasSubmittedFeedback")),
        )

    async def record(
        self,
        api: GateApiClient,
        *,
        wallet_address: str,
        payment_hash: str,
        status: str,
        block_number: int | None = None,
        gas_used: int | None = None,
    ) -> dict[str, Any]:
        return await api.record_payment(
            payment_hash=payment_hash,
            wallet_address=wallet_address,
            amount=self.amount,
            status=status,
            block_number=block_number,
            gas_used=gas_used,
            purpose=self.payment_purpose,
        )

    async def submit(
        self,
        api: GateApiClient,
        *,
        wallet_address: str,
        payment_hash: str | None,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        if not payload.get("feedback") or not payload.get("category"):
            raise GateApiError(400, "Feedback text and category are required")
        return await api.submit_feedback(
            wallet_address=wallet_address,
            feedback=payload["feedback"],
            category=payload["category"],
            is_anonymous=payload.get("isAnonymous", True),
        )


@dataclass
class FormSlot:
    """One response to one form."""

    form_id: int
    amount: Decimal
    label: str = "form response"
    payment_purpose: str = "form"
    auto_submit: bool = False

    async def status(self, api: GateApiClient, wallet_address: str) -> SlotStatus:
        submitted = await api.form_check_submission(
            wallet_address=wallet_address, form_id=self.form_id
        )
        paid = await api.form_check_payment(
            wallet_address=wallet_address,
            form_id=self.form_id,
            payment_amount=self.amount,
        )
        return SlotStatus(
            paid=bool(paid.get("hasPayment")),
            submitted=bool(submitted.get("hasSubmitted")),
        )

    async def record(
        self,
        api: GateApiClient,
        *,
        wallet_address: str,
        payment_hash: str,
        status: str,
        block_number: int | None = None,
        gas_used: int | None = None,
    ) -> dict[str, Any]:
        return await api.form_record_payment(
            form_id=self.form_id,
            payment_hash=payment_hash,
            wallet_address=wallet_address,
            amount=self.amount,
            status=status,
            block_number=block_number,
            gas_used=gas_used,
        )

    async def submit(
        self,
        api: GateApiClient,
        *,
        wallet_address: str,
        payment_hash: str | None,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        return await api.form_submit_response(
            form_id=self.form_id,
            wallet_address=wallet_address,
            responses=payload,
        )


@dataclass
class AdminSlot:
    """The admin grant; submitted automatically once the fee confirms."""

    amount: Decimal = field(default_factory=lambda: settings.admin_payment_amount)
    label: str = "admin access"
    payment_purpose: str = "admin"
    auto_submit: bool = True

    async def status(self, api: GateApiClient, wallet_address: str) -> SlotStatus:
        body = await api.admin_check_status(wallet_address)
        # The grant consumes the payment, so a paid-but-ungranted state is not tracked.
        return SlotStatus(paid=False, submitted=bool(body.get("isAdmin")))

    async def record(
        self,
        api: GateApiClient,
        *,
        wallet_address: str,
        payment_hash: str,
        status: str,
        block_number: int | None = None,
        gas_used: int | None = None,
    ) -> dict[str, Any]:
        return await api.record_payment(
            payment_hash=payment_hash,
            wallet_address=wallet_address,
            amount=self.amount,
            status=status,
            block_number=block_number,
            gas_used=gas_used,
            purpose=self.payment_purpose,
        )

    async def submit(
        self,
        api: GateApiClient,
        *,
        wallet_address: str,
        payment_hash: str | None,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        if payment_hash is None:
            raise GateApiError(400, "Admin grant needs the confirmed payment hash")
        return await api.admin_create(
            wallet_address=wallet_address,
            payment_hash=payment_hash,
            amount=self.amount,
        )


@dataclass(frozen=True)
class WorkflowSnapshot:
    """Everything the presentation layer needs to render the workflow."""

    state: WorkflowState
    label: str
    amount: Decimal
    token_symbol: str
    tx_hash: str | None = None
    attempt: int = 0
    max_attempts: int = 0
    balance: Decimal | None = None
    notice: Notice | None = None


def render_status(snapshot: WorkflowSnapshot) -> str:
    """One-line status text for a snapshot."""
    state = snapshot.state
    if state is WorkflowState.IDLE:
        return f"Pay {snapshot.amount} {snapshot.token_symbol} to unlock {snapshot.label}"
    if state is WorkflowState.PAYMENT_PENDING:
        return "Waiting for wallet..."
    if state is WorkflowState.PAYMENT_CONFIRMING:
        return f"Confirming... ({snapshot.attempt}/{snapshot.max_attempts})"
    if state is WorkflowState.PAYMENT_CONFIRMED:
        return "Payment confirmed"
    if state is WorkflowState.PAYMENT_FAILED:
        return "Payment failed"
    if state is WorkflowState.PAYMENT_TIMEOUT:
        return "Confirmation timed out; check the transaction manually"
    if state is WorkflowState.SUBMISSION_ALLOWED:
        return f"Ready to submit {snapshot.label}"
    return f"{snapshot.label.capitalize()} submitted"


class SubmissionWorkflow:
    """State machine for one wallet and one slot."""

    def __init__(
        self,
        api: GateApiClient,
        wallet: WalletProvider,
        slot: Slot,
        *,
        policy: RetryPolicy | None = None,
        sleep: SleepFn = asyncio.sleep,
        recipient: str | None = None,
    ) -> None:
        self.api = api
        self.wallet = wallet
        self.slot = slot
        self.policy = policy or RetryPolicy.from_settings()
        self.recipient = recipient or settings.payment_recipient
        self._sleep = sleep

        self.state = WorkflowState.IDLE
        self.tx_hash: str | None = None
        self.attempt = 0
        self.balance: Decimal | None = None
        self.notice: Notice | None = None
        self.history: list[tuple[WorkflowState, WorkflowState]] = []

    def snapshot(self) -> WorkflowSnapshot:
        return WorkflowSnapshot(
            state=self.state,
            label=self.slot.label,
            amount=self.slot.amount,
            token_symbol=settings.token_symbol,
            tx_hash=self.tx_hash,
            attempt=self.attempt,
            max_attempts=self.policy.max_attempts,
            balance=self.balance,
            notice=self.notice,
        )

    def _move(self, target: WorkflowState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise InvalidTransitionError(self.state, target)
        logger.debug("%s workflow: %s -> %s", self.slot.label, self.state.value, target.value)
        self.history.append((self.state, target))
        self.state = target

    def _notify(self, title: str, message: str, severity: Severity) -> Notice:
        self.notice = Notice(title, message, severity)
        return self.notice

    def _wallet_required(self) -> Notice:
        return self._notify("Wallet required", "Please connect your wallet first.", Severity.ERROR)

    async def _wallet_address(self) -> str | None:
        address = await self.wallet.get_address()
        return address.lower() if address else None

    async def fetch_balance(self) -> Decimal:
        """Read the wallet balance for display; zero when it cannot be read."""
        address = await self._wallet_address()
        if address is None:
            self.balance = ZERO_BALANCE
            return self.balance
        try:
            body = await self.api.get_balance(address)
            self.balance = wei_to_token(int(body["balance"]))
        except (*API_ERRORS, KeyError, ValueError) as exc:
            logger.warning("Balance lookup for %s failed: %s", address, exc)
            self.balance = ZERO_BALANCE
        return self.balance

    async def refresh(self) -> WorkflowState:
        """Sync local state with what the server already knows."""
        if self.state in (WorkflowState.PAYMENT_PENDING, WorkflowState.PAYMENT_CONFIRMING):
            raise InvalidTransitionError(self.state, "refresh")

        address = await self._wallet_address()
        if address is None:
            return self.state

        status = await self.slot.status(self.api, address)
        if self.state in (WorkflowState.PAYMENT_FAILED, WorkflowState.PAYMENT_TIMEOUT):
            if not (status.submitted or status.paid):
                return self.state
            self._move(WorkflowState.IDLE)

        if status.submitted:
            target = WorkflowState.SUBMITTED
        elif status.paid:
            target = WorkflowState.SUBMISSION_ALLOWED
        else:
            target = WorkflowState.IDLE
        if target is not self.state:
            self._move(target)
        return self.state

    async def _record(self, address: str, status: str, **extra: Any) -> None:
        """Write the payment to the ledger; failures are logged, never raised."""
        try:
            await self.slot.record(
                self.api,
                wallet_address=address,
                payment_hash=self.tx_hash,
                status=status,
                **extra,
            )
        except API_ERRORS as exc:
            logger.warning(
                "Could not record %s payment %s as %s: %s",
                self.slot.label,
                self.tx_hash,
                status,
                exc,
            )

    async def pay(self) -> Notice:
        """Send the fee, record it pending and wait for confirmation."""
        if self.state not in (WorkflowState.IDLE, WorkflowState.PAYMENT_FAILED):
            raise InvalidTransitionError(self.state, WorkflowState.PAYMENT_PENDING)

        address = await self._wallet_address()
        if address is None:
            return self._wallet_required()

        try:
            status = await self.slot.status(self.api, address)
        except API_ERRORS as exc:
            logger.warning("Status check for %s failed: %s", self.slot.label, exc)
            return self._notify("Status unavailable", str(exc), Severity.ERROR)
        if status.submitted or status.paid:
            if self.state is WorkflowState.PAYMENT_FAILED:
                self._move(WorkflowState.IDLE)
            if status.submitted:
                self._move(WorkflowState.SUBMITTED)
                return self._notify(
                    "Already submitted",
                    f"This wallet has already completed its {self.slot.label}.",
                    Severity.WARNING,
                )
            self._move(WorkflowState.SUBMISSION_ALLOWED)
            return self._notify(
                "Payment found",
                "A confirmed payment already exists for this wallet.",
                Severity.INFO,
            )

        balance = await self.fetch_balance()
        if balance < self.slot.amount:
            return self._notify(
                "Insufficient balance",
                f"You need at least {self.slot.amount} {settings.token_symbol}; "
                f"your balance is {balance}.",
                Severity.ERROR,
            )

        self._move(WorkflowState.PAYMENT_PENDING)
        try:
            self.tx_hash = await self.wallet.send_payment(self.recipient, self.slot.amount)
        except WalletError as exc:
            logger.warning("Payment for %s not sent: %s", self.slot.label, exc)
            self._move(WorkflowState.IDLE)
            return self._notify("Payment failed", str(exc), Severity.ERROR)
        except Exception:
            self._move(WorkflowState.IDLE)
            raise

        self._move(WorkflowState.PAYMENT_CONFIRMING)
        await self._record(address, "pending")
        return await self._confirm(address)

    async def reconcile(self) -> Notice:
        """Poll again for a transaction that timed out."""
        if self.state is not WorkflowState.PAYMENT_TIMEOUT:
            raise InvalidTransitionError(self.state, WorkflowState.PAYMENT_CONFIRMING)
        address = await self._wallet_address()
        if address is None:
            return self._wallet_required()
        self._move(WorkflowState.PAYMENT_CONFIRMING)
        return await self._confirm(address)

    def _on_attempt(self, attempt: int, max_attempts: int) -> None:
        self.attempt = attempt

    async def _confirm(self, address: str) -> Notice:
        self.attempt = 0
        poller = ConfirmationPoller(
            self.api.check_transaction,
            self.policy,
            sleep=self._sleep,
            transient_errors=(*API_ERRORS, *DEFAULT_TRANSIENT_ERRORS),
            on_attempt=self._on_attempt,
        )
        result = await poller.poll(self.tx_hash)

        if result.outcome is PollOutcome.TIMEOUT:
            self._move(WorkflowState.PAYMENT_TIMEOUT)
            return self._notify(
                "Confirmation pending",
                f"Transaction {self.tx_hash} is not confirmed yet. "
                "Check it in the explorer and try again later.",
                Severity.WARNING,
            )

        check = result.check
        if result.outcome is PollOutcome.CONFIRMED_FAILURE:
            await self._record(
                address,
                "failed",
                block_number=check.block_number,
                gas_used=check.gas_used,
            )
            self._move(WorkflowState.PAYMENT_FAILED)
            return self._notify(
                "Payment failed",
                "The transaction was mined but reverted. Please try again.",
                Severity.ERROR,
            )

        await self._record(
            address,
            "confirmed",
            block_number=check.block_number,
            gas_used=check.gas_used,
        )
        self._move(WorkflowState.PAYMENT_CONFIRMED)
        self._move(WorkflowState.SUBMISSION_ALLOWED)
        if self.slot.auto_submit:
            return await self.submit()
        return self._notify(
            "Payment confirmed",
            f"You can now submit your {self.slot.label}.",
            Severity.SUCCESS,
        )

    async def submit(self, payload: dict[str, Any] | None = None) -> Notice:
        """Send the one-time submission; the server has the final say."""
        if self.state is not WorkflowState.SUBMISSION_ALLOWED:
            raise InvalidTransitionError(self.state, WorkflowState.SUBMITTED)

        address = await self._wallet_address()
        if address is None:
            return self._wallet_required()

        try:
            await self.slot.submit(
                self.api,
                wallet_address=address,
                payment_hash=self.tx_hash,
                payload=payload or {},
            )
        except GateApiError as exc:
            if exc.is_conflict:
                self._move(WorkflowState.SUBMITTED)
                return self._notify("Already submitted", exc.message, Severity.WARNING)
            return self._notify("Submission failed", exc.message, Severity.ERROR)
        except httpx.HTTPError as exc:
            logger.warning("Submitting %s failed: %s", self.slot.label, exc)
            return self._notify("Submission failed", str(exc), Severity.ERROR)

        self._move(WorkflowState.SUBMITTED)
        return self._notify(
            "Submitted",
            f"Your {self.slot.label} was submitted successfully.",
            Severity.SUCCESS,
        )
