"""
Pydantic schemas for API request/response models.

Request bodies and response envelopes use camelCase field names; stored rows
are rendered with their column names.
"""

from .admin import AdminCreate, AdminCreateResponse, AdminStatusResponse, AdminWallet
from .chain import (
    BalanceRequest,
    BalanceResponse,
    TransactionCheckRequest,
    TransactionCheckResponse,
)
from .feedback import FeedbackListResponse, FeedbackRow, FeedbackSubmit
from .form import FormCreate, FormRow, QuestionRow, ResponseRow, ResponseSubmit
from .payment import PaymentRecordRequest, PaymentRow, PaymentStatusResponse
