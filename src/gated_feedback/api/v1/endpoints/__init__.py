# src/gated_feedback/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .chain import router as chain_router
from .feedback import router as feedback_router
from .forms import router as forms_router
from .payments import router as payments_router

__all__ = [
    "admin_router",
    "chain_router",
    "feedback_router",
    "forms_router",
    "payments_router",
]
