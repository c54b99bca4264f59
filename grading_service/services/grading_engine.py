"""Quiz scoring: merges a reviewer's free-text marks into a submission.

Everything in this module is pure.  Given the same submission, question
list, corrections and clock value it always produces the same answers,
score and total, and running it again with no corrections reproduces the
previous result.

The question list is the lesson's *current* quiz, looked up fresh by the
caller.  Answers are matched to it by their stored ``question_index``, so
a quiz edited after submission is graded against the edited questions.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from grading_service.models.question import (
    Question,
    correct_answer_index,
    effective_max_marks,
    is_finite_number,
    question_at,
)
from grading_service.models.submission import Submission, SubmissionAnswer
from grading_service.services.errors import CorrectionsValidationError

# question_index → awarded marks (floored, >= 0, not yet capped at max)
CorrectionMap = dict[int | float, int]


@dataclass(frozen=True, slots=True)
class GradeResult:
    answers: tuple[SubmissionAnswer, ...]
    score: float
    total: float


def parse_corrections(raw: Any) -> CorrectionMap:
    """Turn the reviewer's raw correction list into a lookup map.

    A non-list is an input error.  Entries inside the list are filtered
    leniently: anything without a finite numeric ``question_index`` and
    ``awarded_marks`` is dropped without complaint.  When an index appears
    twice the later entry wins.
    """
    if not isinstance(raw, (list, tuple)):
        raise CorrectionsValidationError("corrections must be an array")

    corrections: CorrectionMap = {}
    for entry in raw:
        if not isinstance(entry, Mapping):
            continue
        index = entry.get("question_index")
        marks = entry.get("awarded_marks")
        if not is_finite_number(index) or not is_finite_number(marks):
            continue
        corrections[index] = max(0, math.floor(marks))
    return corrections


def _merge_answer(
    answer: SubmissionAnswer,
    questions: list[Question],
    corrections: CorrectionMap,
    *,
    reviewer_id: str,
    reviewed_at: int,
) -> SubmissionAnswer:
    if not answer.is_free_text or answer.question_index is None:
        return answer
    if answer.question_index not in corrections:
        return answer

    max_marks = effective_max_marks(question_at(questions, answer.question_index))
    return replace(
        answer,
        awarded_marks=min(max_marks, corrections[answer.question_index]),
        reviewed_at=reviewed_at,
        reviewer_id=reviewer_id,
    )


def _earned(question: Question, answer: SubmissionAnswer | None) -> float:
    max_marks = effective_max_marks(question)

    if question.is_multiple_choice:
        correct = correct_answer_index(question)
        selected = answer.selected_option if answer is not None else None
        if correct is not None and selected is not None and selected == correct:
            return max_marks
        return 0

    awarded = answer.awarded_marks if answer is not None else None
    return min(max_marks, max(0, awarded or 0))


def compute_grade(
    submission: Submission,
    questions: list[Question],
    corrections: CorrectionMap,
    *,
    reviewer_id: str,
    reviewed_at: int,
) -> GradeResult:
    answers = tuple(
        _merge_answer(
            a,
            questions,
            corrections,
            reviewer_id=reviewer_id,
            reviewed_at=reviewed_at,
        )
        for a in submission.answers
    )

    # First answer per index wins, mirroring a linear search over answers.
    by_index: dict[int, SubmissionAnswer] = {}
    for a in answers:
        if a.question_index is not None:
            by_index.setdefault(a.question_index, a)

    total_possible: float = 0
    total_earned: float = 0
    for idx, question in enumerate(questions):
        total_possible += effective_max_marks(question)
        total_earned += _earned(question, by_index.get(idx))

    return GradeResult(answers=answers, score=total_earned, total=total_possible)
