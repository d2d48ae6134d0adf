"""Form Registry: admin-created forms and their ordered questions."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gated_feedback.core.settings import settings
from gated_feedback.models.form import (
    CHOICE_QUESTION_TYPES,
    QUESTION_TYPE_RADIO,
    QUESTION_TYPE_TEXT,
    QUESTION_TYPES,
    Form,
    FormQuestion,
)
from gated_feedback.services.errors import ConflictError, InvalidInputError
from gated_feedback.utils.normalize import format_amount, normalize_address, parse_amount

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

__all__ = [
    "QuestionDraft",
    "validate_slug",
    "build_question_drafts",
    "get_by_slug",
    "get_by_id",
    "slug_taken",
    "get_by_admin",
    "create_form",
    "create_question",
    "get_questions",
]


@dataclass(frozen=True)
class QuestionDraft:
    """Validated question definition awaiting persistence."""

    text: str
    question_type: str = QUESTION_TYPE_TEXT
    options: tuple[str, ...] = field(default_factory=tuple)
    required: bool = False
    order_index: int = 0


def validate_slug(slug: str) -> str:
    slug = slug.strip()
    if not SLUG_PATTERN.match(slug):
        raise InvalidInputError(
            "Slug may only contain lowercase letters, digits and single hyphens"
        )
    return slug


def _clean_options(question_type: str, options: Sequence[str] | None, text: str) -> tuple[str, ...]:
    if question_type not in CHOICE_QUESTION_TYPES:
        return ()
    cleaned = tuple(option.strip() for option in options or () if option and option.strip())
    if not cleaned:
        raise InvalidInputError(f"Question '{text}' needs at least one option")
    if len(set(cleaned)) != len(cleaned):
        raise InvalidInputError(f"Question '{text}' has duplicate options")
    if question_type == QUESTION_TYPE_RADIO and len(cleaned) > settings.radio_max_options:
        raise InvalidInputError(
            f"Question '{text}' allows at most {settings.radio_max_options} options"
        )
    return cleaned


def build_question_drafts(
    raw_questions: Sequence[dict],
) -> list[QuestionDraft]:
    """Turn submitted question payloads into drafts.

    Questions with blank text are dropped. ``order_index`` defaults to the
    question's position in the submitted list.
    """
    drafts: list[QuestionDraft] = []
    for position, raw in enumerate(raw_questions):
        text = (raw.get("question_text") or "").strip()
        if not text:
            continue

        question_type = raw.get("question_type") or QUESTION_TYPE_TEXT
        if question_type not in QUESTION_TYPES:
            raise InvalidInputError(f"Unsupported question type: {question_type}")

        order_index = raw.get("order_index")
        drafts.append(
            QuestionDraft(
                text=text,
                question_type=question_type,
                options=_clean_options(question_type, raw.get("question_options"), text),
                required=bool(raw.get("is_required", False)),
                order_index=position if order_index is None else int(order_index),
            )
        )

    if not drafts:
        raise InvalidInputError("At least one question is required")
    return drafts


def get_by_slug(db: Session, slug: str) -> Form | None:
    """Return the active form published under ``slug``."""
    return db.query(Form).filter(Form.slug == slug, Form.is_active.is_(True)).first()


def get_by_id(db: Session, form_id: int, *, active_only: bool = True) -> Form | None:
    query = db.query(Form).filter(Form.id == form_id)
    if active_only:
        query = query.filter(Form.is_active.is_(True))
    return query.first()


def slug_taken(db: Session, slug: str) -> bool:
    return db.query(Form.id).filter(Form.slug == slug).first() is not None


def get_by_admin(db: Session, wallet_address: str) -> list[Form]:
    """Forms owned by an admin, newest first."""
    return (
        db.query(Form)
        .filter(Form.admin_wallet_address == normalize_address(wallet_address))
        .order_by(Form.created_at.desc(), Form.id.desc())
        .all()
    )


def _question_row(form_id: int, draft: QuestionDraft) -> FormQuestion:
    return FormQuestion(
        form_id=form_id,
        question_text=draft.text,
        question_type=draft.question_type,
        question_options=list(draft.options) or None,
        is_required=draft.required,
        order_index=draft.order_index,
    )


def create_form(
    db: Session,
    *,
    name: str,
    slug: str,
    title: str,
    payment_amount: Decimal | str,
    admin_wallet_address: str,
    description: str | None = None,
    questions: Sequence[QuestionDraft] = (),
) -> Form:
    """Persist a form and its questions in one transaction.

    Admin status and slug availability are checked by the caller; a slug
    collision that slips through still fails on the unique index.
    """
    form = Form(
        name=name.strip(),
        slug=validate_slug(slug),
        title=title.strip(),
        description=(description or "").strip() or None,
        payment_amount=format_amount(parse_amount(payment_amount)),
        admin_wallet_address=normalize_address(admin_wallet_address),
        is_active=True,
    )
    db.add(form)
    try:
        db.flush()
        for draft in questions:
            db.add(_question_row(form.id, draft))
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Form slug already exists. Please choose a different one.") from exc
    db.refresh(form)
    return form


def create_question(db: Session, form_id: int, draft: QuestionDraft) -> FormQuestion:
    question = _question_row(form_id, draft)
    db.add(question)
    db.commit()
    db.refresh(question)
    return question


def get_questions(db: Session, form_id: int) -> list[FormQuestion]:
    """Questions of a form in display order."""
    return (
        db.query(FormQuestion)
        .filter(FormQuestion.form_id == form_id)
        .order_by(FormQuestion.order_index, FormQuestion.id)
        .all()
    )
