"""Client-side payment and submission workflow."""

from .client import GateApiClient, GateApiError
from .machine import (
    AdminSlot,
    FeedbackSlot,
    FormSlot,
    InvalidTransitionError,
    Notice,
    Severity,
    SubmissionWorkflow,
    WorkflowSnapshot,
    WorkflowState,
    render_status,
)
from .wallet import JsonRpcWallet, WalletError, WalletProvider

__all__ = [
    "AdminSlot",
    "FeedbackSlot",
    "FormSlot",
    "GateApiClient",
    "GateApiError",
    "InvalidTransitionError",
    "JsonRpcWallet",
    "Notice",
    "Severity",
    "SubmissionWorkflow",
    "WalletError",
    "WalletProvider",
    "WorkflowSnapshot",
    "WorkflowState",
    "render_status",
]
