"""Bounded confirmation polling.

A poll is a fixed-interval retry loop around a single receipt check. It ends
in exactly one of three outcomes: the transaction was mined and succeeded,
it was mined and reverted, or the attempt budget ran out. Running out is not
a failure; the transaction may still land later.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

import httpx

from gated_feedback.core.settings import settings
from gated_feedback.services.rpc import ConfirmationCheck, RpcError

logger = logging.getLogger(__name__)

CheckFn = Callable[[str], Awaitable[ConfirmationCheck]]
SleepFn = Callable[[float], Awaitable[None]]
AttemptHook = Callable[[int, int], None]

DEFAULT_TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    RpcError,
    httpx.HTTPError,
    OSError,
    TimeoutError,
)


class PollOutcome(Enum):
    """Terminal outcome of a confirmation poll."""

    CONFIRMED_SUCCESS = "confirmed_success"
    CONFIRMED_FAILURE = "confirmed_failure"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-interval retry budget."""

    max_attempts: int = 30
    interval_seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.interval_seconds < 0:
            raise ValueError("interval_seconds must not be negative")

    @classmethod
    def from_settings(cls) -> RetryPolicy:
        return cls(
            max_attempts=settings.confirmation_max_attempts,
            interval_seconds=settings.confirmation_poll_interval_seconds,
        )


@dataclass(frozen=True)
class PollResult:
    """What a poll observed before it stopped."""

    tx_hash: str
    outcome: PollOutcome
    attempts: int
    check: ConfirmationCheck | None = None

    @property
    def confirmed(self) -> bool:
        return self.outcome is not PollOutcome.TIMEOUT

    @property
    def succeeded(self) -> bool:
        return self.outcome is PollOutcome.CONFIRMED_SUCCESS


class ConfirmationPoller:
    """Drives a receipt check until it reports a mined transaction.

    Errors listed in ``transient_errors`` are logged and count as a spent
    attempt; anything else propagates.
    """

    def __init__(
        self,
        check: CheckFn,
        policy: RetryPolicy | None = None,
        *,
        sleep: SleepFn = asyncio.sleep,
        transient_errors: tuple[type[BaseException], ...] = DEFAULT_TRANSIENT_ERRORS,
        on_attempt: AttemptHook | None = None,
    ) -> None:
        self._check = check
        self.policy = policy or RetryPolicy.from_settings()
        self._sleep = sleep
        self._transient_errors = transient_errors
        self._on_attempt = on_attempt

    async def poll(self, tx_hash: str) -> PollResult:
        max_attempts = self.policy.max_attempts

        for attempt in range(1, max_attempts + 1):
            if self._on_attempt is not None:
                self._on_attempt(attempt, max_attempts)

            try:
                check = await self._check(tx_hash)
            except self._transient_errors as exc:
                logger.info(
                    "Confirmation check %s/%s for %s failed: %s",
                    attempt,
                    max_attempts,
                    tx_hash,
                    exc,
                )
            else:
                if check.confirmed:
                    outcome = (
                        PollOutcome.CONFIRMED_SUCCESS
                        if check.success
                        else PollOutcome.CONFIRMED_FAILURE
                    )
                    return PollResult(tx_hash, outcome, attempt, check)

            if attempt < max_attempts:
                await self._sleep(self.policy.interval_seconds)

        logger.warning("Transaction %s unconfirmed after %s attempts", tx_hash, max_attempts)
        return PollResult(tx_hash, PollOutcome.TIMEOUT, max_attempts)
