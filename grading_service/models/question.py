"""Quiz question definitions as stored in lesson content.

Lesson content is authored in a CMS and arrives as loosely-typed JSON, so
a Question keeps the raw ``max_marks`` and ``correct_answer`` values and
derives the effective numbers on demand.  The derivation rules are the
scoring contract and must not drift:

    effective_max_marks   finite number → max(0, value); anything else → 1
    correct_answer_index  finite number → value; numeric string → leading
                          integer; anything else → None
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

MULTIPLE_CHOICE = "multiple_choice"
FREE_TEXT = "free_text"

DEFAULT_MAX_MARKS = 1

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def is_finite_number(value: Any) -> bool:
    """True for int/float values that are finite.  bool is not a number here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


@dataclass(frozen=True, slots=True)
class Question:
    question_type: str = MULTIPLE_CHOICE
    prompt: str = ""
    options: tuple[str, ...] = ()
    max_marks: Any = None
    correct_answer: Any = None
    explanation: str | None = None

    @property
    def is_multiple_choice(self) -> bool:
        return self.question_type == MULTIPLE_CHOICE

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> Question:
        options = raw.get("options")
        return Question(
            question_type=raw.get("question_type") or MULTIPLE_CHOICE,
            prompt=str(raw.get("question") or ""),
            options=tuple(str(o) for o in options) if isinstance(options, list) else (),
            max_marks=raw.get("max_marks"),
            correct_answer=raw.get("correct_answer"),
            explanation=raw.get("explanation"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_type": self.question_type,
            "question": self.prompt,
            "options": list(self.options),
            "max_marks": self.max_marks,
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
        }


def effective_max_marks(question: Question | None) -> float:
    if question is None:
        return DEFAULT_MAX_MARKS
    raw = question.max_marks
    if is_finite_number(raw):
        return max(0, raw)
    return DEFAULT_MAX_MARKS


def correct_answer_index(question: Question) -> int | float | None:
    raw = question.correct_answer
    if is_finite_number(raw):
        return raw
    if isinstance(raw, str):
        match = _LEADING_INT.match(raw)
        if match:
            return int(match.group(1))
    return None


def question_at(questions: list[Question], index: int) -> Question | None:
    """Positional lookup that never wraps around on negative indexes."""
    if isinstance(index, int) and 0 <= index < len(questions):
        return questions[index]
    return None


def parse_quiz_questions(raw: Any) -> list[Question]:
    """Parse a lesson's raw question list, keeping every position.

    Entries that are not objects still occupy their slot (as a default
    one-mark multiple-choice question with no answer key) so that stored
    ``question_index`` values keep pointing at the right question.
    """
    if not isinstance(raw, (list, tuple)):
        return []
    return [
        Question.from_dict(q) if isinstance(q, Mapping) else Question() for q in raw
    ]
