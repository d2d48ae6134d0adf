"""Typed answers for form questions.

Submitted answers arrive as a JSON object keyed by question id. Each value is
parsed into the variant its question type declares before anything is
stored:

* ``text`` / ``textarea`` -> :class:`TextAnswer`
* ``select`` / ``radio`` -> :class:`SingleChoiceAnswer` (free text allowed
  for the "Other" choice)
* ``checkbox`` -> :class:`MultiChoiceAnswer`, given either as the chosen
  option labels or as one boolean per option
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from gated_feedback.models.form import (
    QUESTION_TYPE_CHECKBOX,
    QUESTION_TYPE_RADIO,
    QUESTION_TYPE_SELECT,
    FormQuestion,
)
from gated_feedback.services.errors import InvalidInputError

# Placeholder the form UI sends when "Other" is picked but nothing was typed.
OTHER_PLACEHOLDER = "custom_other"


@dataclass(frozen=True)
class TextAnswer:
    value: str

    def to_json(self) -> str:
        return self.value


@dataclass(frozen=True)
class SingleChoiceAnswer:
    value: str
    is_listed: bool

    def to_json(self) -> str:
        return self.value


@dataclass(frozen=True)
class MultiChoiceAnswer:
    values: tuple[str, ...]

    def to_json(self) -> list[str]:
        return list(self.values)


Answer = TextAnswer | SingleChoiceAnswer | MultiChoiceAnswer


def _invalid(question: FormQuestion, reason: str) -> InvalidInputError:
    return InvalidInputError(f"Invalid response for question: {question.question_text} ({reason})")


def _parse_text(question: FormQuestion, raw: Any) -> TextAnswer | None:
    if not isinstance(raw, str):
        raise _invalid(question, "expected text")
    value = raw.strip()
    return TextAnswer(value) if value else None


def _parse_single(question: FormQuestion, raw: Any) -> SingleChoiceAnswer | None:
    if not isinstance(raw, str):
        raise _invalid(question, "expected a single choice")
    value = raw.strip()
    if not value or value == OTHER_PLACEHOLDER:
        return None
    return SingleChoiceAnswer(value, value in question.options)


def _parse_multi(question: FormQuestion, raw: Any) -> MultiChoiceAnswer | None:
    if not isinstance(raw, Sequence) or isinstance(raw, str):
        raise _invalid(question, "expected a list of choices")

    options = question.options
    if raw and all(isinstance(item, bool) for item in raw):
        if len(raw) != len(options):
            raise _invalid(question, "expected one flag per option")
        chosen = [option for option, flag in zip(options, raw) if flag]
    else:
        chosen = []
        for item in raw:
            if not isinstance(item, str) or item not in options:
                raise _invalid(question, f"unknown option {item!r}")
            if item not in chosen:
                chosen.append(item)

    return MultiChoiceAnswer(tuple(chosen)) if chosen else None


def parse_answer(question: FormQuestion, raw: Any) -> Answer | None:
    """Parse one raw value; ``None`` means the question was left blank."""
    if raw is None:
        return None
    if question.question_type == QUESTION_TYPE_CHECKBOX:
        return _parse_multi(question, raw)
    if question.question_type in (QUESTION_TYPE_SELECT, QUESTION_TYPE_RADIO):
        return _parse_single(question, raw)
    return _parse_text(question, raw)


def validate_answers(
    questions: Sequence[FormQuestion],
    raw_answers: Mapping[str, Any],
) -> dict[str, Any]:
    """Check answers against the form's questions and return the map to store.

    Unknown question ids and type mismatches are rejected, and every required
    question must have a non-blank answer.
    """
    by_id = {str(question.id): question for question in questions}
    unknown = sorted(set(map(str, raw_answers)) - set(by_id))
    if unknown:
        raise InvalidInputError(f"Unknown question ids: {', '.join(unknown)}")

    normalized = {str(key): value for key, value in raw_answers.items()}
    cleaned: dict[str, Any] = {}
    for question_id, question in by_id.items():
        answer = parse_answer(question, normalized.get(question_id))
        if answer is None:
            if question.is_required:
                raise InvalidInputError(
                    f"Missing required response for question: {question.question_text}"
                )
            continue
        cleaned[question_id] = answer.to_json()
    return cleaned
