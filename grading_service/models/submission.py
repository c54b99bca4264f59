from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal
from uuid import uuid4

from grading_service.models.question import (
    FREE_TEXT,
    MULTIPLE_CHOICE,
    is_finite_number,
)

SubmissionStatus = Literal["pending_review", "graded"]

PENDING_REVIEW = "pending_review"
GRADED = "graded"


def _int_or_none(value: Any) -> int | None:
    """Whole numbers only; ``1.0`` from a JSON round trip counts as ``1``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


@dataclass(frozen=True, slots=True)
class SubmissionAnswer:
    """One student answer, keyed by its position in the quiz at submission time.

    Answers read back from storage keep the stored value in ``raw``.
    ``to_stored`` writes that value back untouched except for the review
    fields of a free-text answer, so a malformed entry survives a grading
    pass instead of being dropped or rewritten.
    """

    question_index: int | None
    question_type: str = MULTIPLE_CHOICE
    selected_option: int | None = None
    answer_text: str | None = None
    # review fields, written only by the grading engine for free-text answers
    awarded_marks: float | None = None
    reviewed_at: int | None = None
    reviewer_id: str | None = None
    raw: Any = field(default=None, compare=False, repr=False)

    @property
    def is_free_text(self) -> bool:
        return self.question_type == FREE_TEXT

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> SubmissionAnswer:
        question_type = raw.get("question_type")
        if not isinstance(question_type, str) or not question_type:
            question_type = MULTIPLE_CHOICE
        awarded = raw.get("awarded_marks")
        if question_type != FREE_TEXT or not is_finite_number(awarded):
            awarded = None
        text = raw.get("answer_text")
        reviewed_at = raw.get("reviewed_at")
        reviewer_id = raw.get("reviewer_id")
        return SubmissionAnswer(
            question_index=_int_or_none(raw.get("question_index")),
            question_type=question_type,
            selected_option=_int_or_none(raw.get("selected_option")),
            answer_text=text if isinstance(text, str) else None,
            awarded_marks=awarded,
            reviewed_at=_int_or_none(reviewed_at),
            reviewer_id=reviewer_id if isinstance(reviewer_id, str) else None,
            raw=dict(raw),
        )

    @staticmethod
    def from_stored(value: Any) -> SubmissionAnswer:
        """Read one element of a stored answers array, whatever its shape."""
        if isinstance(value, Mapping):
            return SubmissionAnswer.from_dict(value)
        return SubmissionAnswer(question_index=None, question_type="", raw=value)

    def to_stored(self) -> Any:
        if self.raw is not None and not isinstance(self.raw, Mapping):
            return self.raw

        if self.raw is not None:
            data = dict(self.raw)
        else:
            data = {
                "question_index": self.question_index,
                "question_type": self.question_type,
                "selected_option": self.selected_option,
                "answer_text": self.answer_text,
            }
        if self.is_free_text:
            data["awarded_marks"] = self.awarded_marks
            data["reviewed_at"] = self.reviewed_at
            data["reviewer_id"] = self.reviewer_id
        return data


@dataclass(frozen=True, slots=True)
class Submission:
    id: str
    user_id: str
    course_id: str
    lesson_id: str
    answers: tuple[SubmissionAnswer, ...] = ()
    status: SubmissionStatus = PENDING_REVIEW
    score: float | None = None
    total: float | None = None
    is_passed: bool | None = None
    reviewer_id: str | None = None
    reviewed_at: int | None = None
    attachment_urls: tuple[str, ...] = field(default=())
    created_at: int = 0
    updated_at: int = 0
    # bumped on every write; finalize compares it to detect concurrent graders
    version: int = 1

    @property
    def has_free_text(self) -> bool:
        return any(a.is_free_text for a in self.answers)

    @staticmethod
    def new(
        *,
        user_id: str,
        course_id: str,
        lesson_id: str,
        answers: tuple[SubmissionAnswer, ...],
        now: int,
        attachment_urls: tuple[str, ...] = (),
    ) -> Submission:
        return Submission(
            id=str(uuid4()),
            user_id=user_id,
            course_id=course_id,
            lesson_id=lesson_id,
            answers=answers,
            attachment_urls=attachment_urls,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True, slots=True)
class SubmissionPatch:
    """The single write finalize commits to storage."""

    status: SubmissionStatus
    score: float
    total: float
    answers: tuple[SubmissionAnswer, ...]
    is_passed: bool | None
    reviewer_id: str
    reviewed_at: int
    updated_at: int
