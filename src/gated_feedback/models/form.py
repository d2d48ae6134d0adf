# src/gated_feedback/models/form.py
"""Admin-authored forms and their ordered questions."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gated_feedback.db.session import Base
from gated_feedback.db.time import utcnow

QUESTION_TYPE_TEXT = "text"
QUESTION_TYPE_TEXTAREA = "textarea"
QUESTION_TYPE_SELECT = "select"
QUESTION_TYPE_RADIO = "radio"
QUESTION_TYPE_CHECKBOX = "checkbox"
QUESTION_TYPES = (
    QUESTION_TYPE_TEXT,
    QUESTION_TYPE_TEXTAREA,
    QUESTION_TYPE_SELECT,
    QUESTION_TYPE_RADIO,
    QUESTION_TYPE_CHECKBOX,
)
CHOICE_QUESTION_TYPES = (QUESTION_TYPE_SELECT, QUESTION_TYPE_RADIO, QUESTION_TYPE_CHECKBOX)


class Form(Base):
    """A paid questionnaire reachable by its public slug."""

    __tablename__ = "forms"
    __table_args__ = (Index("ix_forms_admin_wallet", "admin_wallet_address"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    payment_amount: Mapped[str] = mapped_column(String(80), nullable=False)
    admin_wallet_address: Mapped[str] = mapped_column(String(64), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    questions: Mapped[list[FormQuestion]] = relationship(
        "FormQuestion",
        back_populates="form",
        order_by="FormQuestion.order_index",
        cascade="all, delete-orphan",
    )


class FormQuestion(Base):
    """Single question definition; immutable once the form exists."""

    __tablename__ = "form_questions"
    __table_args__ = (
        CheckConstraint(
            "question_type IN ('text', 'textarea', 'select', 'radio', 'checkbox')",
            name="ck_form_questions_type",
        ),
        Index("ix_form_questions_form_order", "form_id", "order_index"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    form_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=False,
    )
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    question_type: Mapped[str] = mapped_column(
        String(16), nullable=False, default=QUESTION_TYPE_TEXT
    )
    question_options: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    form: Mapped[Form] = relationship("Form", back_populates="questions")

    @property
    def is_choice(self) -> bool:
        return self.question_type in CHOICE_QUESTION_TYPES

    @property
    def options(self) -> list[str]:
        return list(self.question_options or [])


class FormResponse(Base):
    """Answers submitted by one wallet to one form."""

    __tablename__ = "form_responses"
    __table_args__ = (
        # One response per wallet per form; the pre-check in the ledger is only a fast path.
        Index("uq_form_responses_form_wallet", "form_id", "wallet_address", unique=True),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    form_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Keyed by question id (as a string); values typed per question.
    response_data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    wallet_address: Mapped[str] = mapped_column(String(64), nullable=False)
    payment_hash: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("payments.payment_hash"),
        nullable=False,
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
