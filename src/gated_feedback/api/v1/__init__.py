# src/gated_feedback/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    admin_router,
    chain_router,
    feedback_router,
    forms_router,
    payments_router,
)

__all__ = [
    "admin_router",
    "chain_router",
    "feedback_router",
    "forms_router",
    "payments_router",
]
