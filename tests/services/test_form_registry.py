"""Tests for form creation and question validation."""

from __future__ import annotations

import pytest

from gated_feedback.models import Form
from gated_feedback.services import form_registry
from gated_feedback.services.errors import ConflictError, InvalidInputError


def _create(db_session, admin_wallet, slug="my-form", questions=None):
    drafts = form_registry.build_question_drafts(
        questions if questions is not None else [{"question_text": "Why?"}]
    )
    return form_registry.create_form(
        db_session,
        name="Form",
        slug=slug,
        title="Title",
        payment_amount="0.05",
        admin_wallet_address=admin_wallet,
        questions=drafts,
    )


def test_questions_round_trip_in_order(db_session, admin_wallet) -> None:
    raw = [
        {"question_text": "Third", "order_index": 2},
        {"question_text": "First", "order_index": 0},
        {"question_text": "Second", "order_index": 1},
    ]
    form = _create(db_session, admin_wallet, questions=raw)
    questions = form_registry.get_questions(db_session, form.id)
    assert [q.question_text for q in questions] == ["First", "Second", "Third"]
    assert [q.order_index for q in questions] == [0, 1, 2]


def test_drafts_skip_blank_and_default_fields() -> None:
    drafts = form_registry.build_question_drafts(
        [
            {"question_text": "  "},
            {"question_text": "Name?", "question_type": None},
            {"question_text": "Pick", "question_type": "select", "question_options": ["a", " ", "b"]},
        ]
    )
    assert [d.text for d in drafts] == ["Name?", "Pick"]
    assert drafts[0].question_type == "text"
    assert drafts[0].required is False
    assert drafts[0].order_index == 1
    assert drafts[1].options == ("a", "b")


@pytest.mark.parametrize(
    "raw",
    [
        [],
        [{"question_text": ""}],
        [{"question_text": "Pick", "question_type": "radio", "question_options": []}],
        [{"question_text": "Pick", "question_type": "radio", "question_options": list("abcde")}],
        [{"question_text": "Pick", "question_type": "select", "question_options": ["a", "a"]}],
        [{"question_text": "Scale", "question_type": "slider"}],
    ],
)
def test_invalid_question_sets(raw) -> None:
    with pytest.raises(InvalidInputError):
        form_registry.build_question_drafts(raw)


def test_radio_allows_four_options() -> None:
    drafts = form_registry.build_question_drafts(
        [{"question_text": "Pick", "question_type": "radio", "question_options": list("abcd")}]
    )
    assert len(drafts[0].options) == 4


@pytest.mark.parametrize("slug", ["My-Form", "my--form", "-form", "form-", "my form", ""])
def test_invalid_slugs(slug) -> None:
    with pytest.raises(InvalidInputError):
        form_registry.validate_slug(slug)


def test_duplicate_slug_leaves_one_form(db_session, admin_wallet) -> None:
    _create(db_session, admin_wallet)
    with pytest.raises(ConflictError):
        _create(db_session, admin_wallet)
    assert db_session.query(Form).filter(Form.slug == "my-form").count() == 1


def test_lookups(db_session, admin_wallet) -> None:
    first = _create(db_session, admin_wallet, slug="first")
    second = _create(db_session, admin_wallet, slug="second")

    assert form_registry.get_by_slug(db_session, "first").id == first.id
    assert form_registry.get_by_slug(db_session, "missing") is None
    assert form_registry.slug_taken(db_session, "second")
    assert [f.id for f in form_registry.get_by_admin(db_session, admin_wallet)] == [
        second.id,
        first.id,
    ]

    second.is_active = False
    db_session.commit()
    assert form_registry.get_by_slug(db_session, "second") is None
    assert form_registry.get_by_id(db_session, second.id) is None
    assert form_registry.get_by_id(db_session, second.id, active_only=False) is not None


def test_added_question_sorts_by_order_index(db_session, admin_wallet) -> None:
    form = _create(db_session, admin_wallet)
    draft = form_registry.QuestionDraft(
        text="Pick one",
        question_type="radio",
        options=("Yes", "No"),
        required=True,
        order_index=-1,
    )
    question = form_registry.create_question(db_session, form.id, draft)
    assert question.question_options == ["Yes", "No"]

    questions = form_registry.get_questions(db_session, form.id)
    assert [q.question_text for q in questions] == ["Pick one", "Why?"]
