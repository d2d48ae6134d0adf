# src/gated_feedback/models/__init__.py
"""SQLAlchemy models for the gated feedback service."""

from .admin import Admin
from .feedback import Feedback
from .form import Form, FormQuestion, FormResponse
from .payment import Payment

__all__ = [
    "Admin",
    "Feedback",
    "Form", "FormQuestion", "FormResponse",
    "Payment",
]
