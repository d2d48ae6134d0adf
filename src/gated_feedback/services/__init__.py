"""Business logic services for the gated feedback service."""

from .confirmation import ConfirmationPoller, PollOutcome, PollResult, RetryPolicy
from .errors import (
    ConflictError,
    GateError,
    InvalidInputError,
    NotAuthorizedError,
    NotFoundError,
    UpstreamError,
)
from .rpc import ChainRpcClient, ConfirmationCheck, RpcError

__all__ = [
    "ChainRpcClient",
    "ConfirmationCheck",
    "ConfirmationPoller",
    "ConflictError",
    "GateError",
    "InvalidInputError",
    "NotAuthorizedError",
    "NotFoundError",
    "PollOutcome",
    "PollResult",
    "RetryPolicy",
    "RpcError",
    "UpstreamError",
]
