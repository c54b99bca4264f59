"""Scoring rules of the pure grading engine.

These run without the app or any repository: a Submission, a question
list and a correction list go in, answers, score and total come out.
"""

from __future__ import annotations

import math

import pytest

from grading_service.models.question import (
    Question,
    correct_answer_index,
    effective_max_marks,
    parse_quiz_questions,
)
from grading_service.models.submission import Submission, SubmissionAnswer
from grading_service.services.errors import CorrectionsValidationError
from grading_service.services.grading_engine import compute_grade, parse_corrections
from tests.conftest import SAMPLE_QUESTIONS, sample_answers

NOW = 1_700_000_500


def _submission(answers: tuple[SubmissionAnswer, ...]) -> Submission:
    return Submission.new(
        user_id="u1", course_id="c1", lesson_id="l1", answers=answers, now=0
    )


def _grade(answers, questions, raw_corrections, *, reviewer: str = "rev-1"):
    return compute_grade(
        _submission(tuple(answers)),
        parse_quiz_questions(list(questions)),
        parse_corrections(raw_corrections),
        reviewer_id=reviewer,
        reviewed_at=NOW,
    )


# ---- effective_max_marks / correct_answer_index ----


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (2.5, 2.5),
        (-3, 0),
        ("bad", 1),
        (None, 1),
        (True, 1),
        (math.nan, 1),
        (math.inf, 1),
        (0, 0),
    ],
)
def test_effective_max_marks(raw, expected) -> None:
    assert effective_max_marks(Question(max_marks=raw)) == expected


def test_effective_max_marks_for_missing_question() -> None:
    assert effective_max_marks(None) == 1


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(1, 1), ("2", 2), (" 3x", 3), ("1.9", 1), ("abc", None), (None, None)],
)
def test_correct_answer_index(raw, expected) -> None:
    assert correct_answer_index(Question(correct_answer=raw)) == expected


# ---- parse_corrections ----


def test_parse_corrections_rejects_non_list() -> None:
    with pytest.raises(CorrectionsValidationError, match="must be an array"):
        parse_corrections({"question_index": 1, "awarded_marks": 2})


def test_parse_corrections_rejects_missing() -> None:
    with pytest.raises(CorrectionsValidationError):
        parse_corrections(None)


def test_parse_corrections_drops_malformed_entries() -> None:
    corrections = parse_corrections(
        [
            "not-an-object",
            {"question_index": "1", "awarded_marks": 2},
            {"question_index": 1},
            {"question_index": 1, "awarded_marks": math.nan},
            {"question_index": True, "awarded_marks": 1},
            {"question_index": 4, "awarded_marks": 2.9},
        ]
    )
    assert corrections == {4: 2}


def test_parse_corrections_floors_and_clamps() -> None:
    corrections = parse_corrections(
        [
            {"question_index": 0, "awarded_marks": -2},
            {"question_index": 1, "awarded_marks": 1.99},
        ]
    )
    assert corrections == {0: 0, 1: 1}


def test_parse_corrections_later_entry_wins() -> None:
    corrections = parse_corrections(
        [
            {"question_index": 1, "awarded_marks": 1},
            {"question_index": 1, "awarded_marks": 3},
        ]
    )
    assert corrections == {1: 3}


# ---- compute_grade ----


def test_mixed_quiz_scenario() -> None:
    result = _grade(
        sample_answers(), SAMPLE_QUESTIONS, [{"question_index": 1, "awarded_marks": 2}]
    )
    assert result.total == 6
    assert result.score == 4

    free_text = result.answers[1]
    assert free_text.awarded_marks == 2
    assert free_text.reviewed_at == NOW
    assert free_text.reviewer_id == "rev-1"


def test_regrade_caps_awarded_marks_at_max() -> None:
    first = _grade(
        sample_answers(), SAMPLE_QUESTIONS, [{"question_index": 1, "awarded_marks": 2}]
    )
    second = _grade(
        first.answers, SAMPLE_QUESTIONS, [{"question_index": 1, "awarded_marks": 10}]
    )
    assert second.answers[1].awarded_marks == 3
    assert second.score == 5
    assert second.total == 6


def test_empty_corrections_keep_previous_result() -> None:
    first = _grade(
        sample_answers(), SAMPLE_QUESTIONS, [{"question_index": 1, "awarded_marks": 2}]
    )
    again = compute_grade(
        _submission(first.answers),
        parse_quiz_questions(list(SAMPLE_QUESTIONS)),
        parse_corrections([]),
        reviewer_id="someone-else",
        reviewed_at=NOW + 100,
    )
    assert (again.score, again.total) == (first.score, first.total)
    # untouched answers are not re-stamped
    assert again.answers == first.answers


def test_correction_for_multiple_choice_index_has_no_effect() -> None:
    base = _grade(sample_answers(), SAMPLE_QUESTIONS, [])
    corrected = _grade(
        sample_answers(), SAMPLE_QUESTIONS, [{"question_index": 2, "awarded_marks": 1}]
    )
    assert corrected.score == base.score
    assert corrected.answers[2] == sample_answers()[2]
    assert corrected.answers[2].awarded_marks is None


def test_correction_without_matching_answer_has_no_effect() -> None:
    result = _grade(
        sample_answers(), SAMPLE_QUESTIONS, [{"question_index": 9, "awarded_marks": 5}]
    )
    assert result.score == 2
    assert result.answers == sample_answers()


def test_negative_max_marks_contributes_nothing() -> None:
    questions = [
        {"question_type": "multiple_choice", "max_marks": -1, "correct_answer": 0},
        {"question_type": "free_text", "max_marks": 2},
    ]
    answers = [
        SubmissionAnswer(question_index=0, selected_option=0),
        SubmissionAnswer(question_index=1, question_type="free_text", answer_text="x"),
    ]
    result = _grade(answers, questions, [{"question_index": 1, "awarded_marks": 2}])
    assert result.total == 2
    assert result.score == 2


def test_fractional_max_keeps_capped_award() -> None:
    questions = [{"question_type": "free_text", "max_marks": 2.5}]
    answers = [SubmissionAnswer(question_index=0, question_type="free_text")]
    result = _grade(answers, questions, [{"question_index": 0, "awarded_marks": 7}])
    assert result.answers[0].awarded_marks == 2.5
    assert result.score == 2.5
    assert result.total == 2.5


def test_ungraded_free_text_scores_zero() -> None:
    result = _grade(sample_answers(), SAMPLE_QUESTIONS, [])
    assert result.answers[1].awarded_marks is None
    assert result.score == 2
    assert result.total == 6


def test_multiple_choice_without_answer_key_scores_zero() -> None:
    questions = [{"question_type": "multiple_choice", "correct_answer": "n/a"}]
    answers = [SubmissionAnswer(question_index=0, selected_option=0)]
    assert _grade(answers, questions, []).score == 0


def test_unanswered_question_still_counts_toward_total() -> None:
    questions = [{"max_marks": 2, "correct_answer": 0}, {"max_marks": 3}]
    answers = [SubmissionAnswer(question_index=0, selected_option=0)]
    result = _grade(answers, questions, [])
    assert result.total == 5
    assert result.score == 2


def test_first_answer_for_an_index_is_scored() -> None:
    questions = [{"max_marks": 1, "correct_answer": 0}]
    answers = [
        SubmissionAnswer(question_index=0, selected_option=1),
        SubmissionAnswer(question_index=0, selected_option=0),
    ]
    assert _grade(answers, questions, []).score == 0


def test_grading_against_edited_quiz_uses_current_questions() -> None:
    # The quiz lost its last question after the student submitted.
    result = _grade(
        sample_answers(),
        SAMPLE_QUESTIONS[:2],
        [{"question_index": 1, "awarded_marks": 3}],
    )
    assert result.total == 5
    assert result.score == 5


def test_free_text_answer_beyond_quiz_uses_default_max() -> None:
    answers = [SubmissionAnswer(question_index=5, question_type="free_text")]
    result = _grade(answers, [], [{"question_index": 5, "awarded_marks": 4}])
    assert result.answers[0].awarded_marks == 1
    assert result.total == 0
    assert result.score == 0


def test_contributions_stay_within_bounds() -> None:
    result = _grade(
        sample_answers(),
        SAMPLE_QUESTIONS,
        [{"question_index": 1, "awarded_marks": 99}],
    )
    assert 0 <= result.score <= result.total


def test_stored_whole_float_option_scores_full_marks() -> None:
    answer = SubmissionAnswer.from_stored({"question_index": 0, "selected_option": 1.0})
    result = _grade(
        [answer], [{"question": "Pick one", "correct_answer": 1, "max_marks": 2}], []
    )
    assert result.score == 2
    assert result.answers[0].selected_option == 1
