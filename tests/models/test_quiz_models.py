from __future__ import annotations

from grading_service.models.question import Question, parse_quiz_questions
from grading_service.models.submission import SubmissionAnswer


def test_parse_quiz_questions_keeps_positions() -> None:
    questions = parse_quiz_questions(
        [{"question": "Q1", "max_marks": 2}, "garbage", {"question_type": "free_text"}]
    )
    assert len(questions) == 3
    assert questions[0].prompt == "Q1"
    assert questions[1] == Question()
    assert questions[2].question_type == "free_text"


def test_parse_quiz_questions_without_list() -> None:
    assert parse_quiz_questions(None) == []
    assert parse_quiz_questions({"questions": []}) == []


def test_empty_question_type_defaults_to_multiple_choice() -> None:
    assert Question.from_dict({"question_type": ""}).is_multiple_choice


def test_answer_from_dict_reads_review_fields_for_free_text() -> None:
    answer = SubmissionAnswer.from_dict(
        {
            "question_index": 1,
            "question_type": "free_text",
            "answer_text": "lazily",
            "awarded_marks": 2,
            "reviewed_at": 1_700_000_000,
            "reviewer_id": "rev",
        }
    )
    assert answer.awarded_marks == 2
    assert answer.reviewer_id == "rev"
    assert answer.to_stored()["awarded_marks"] == 2


def test_answer_from_dict_ignores_marks_on_multiple_choice() -> None:
    answer = SubmissionAnswer.from_dict(
        {"question_index": 0, "selected_option": "1", "awarded_marks": 5}
    )
    assert answer.question_type == "multiple_choice"
    assert answer.selected_option is None
    assert answer.awarded_marks is None
    assert answer.to_stored() == {
        "question_index": 0,
        "selected_option": "1",
        "awarded_marks": 5,
    }


def test_answer_from_dict_rejects_non_numeric_marks() -> None:
    answer = SubmissionAnswer.from_dict(
        {"question_index": 1, "question_type": "free_text", "awarded_marks": "3"}
    )
    assert answer.awarded_marks is None


def test_answer_from_dict_accepts_whole_float_option() -> None:
    answer = SubmissionAnswer.from_dict({"question_index": 0, "selected_option": 1.0})
    assert answer.selected_option == 1
    assert answer.to_stored()["selected_option"] == 1.0


def test_answer_from_dict_rejects_fractional_option() -> None:
    answer = SubmissionAnswer.from_dict({"question_index": 0, "selected_option": 1.5})
    assert answer.selected_option is None


def test_answer_without_index_is_kept_as_stored() -> None:
    stored = {"question_type": "", "selected_option": "b", "note": "legacy"}
    answer = SubmissionAnswer.from_stored(stored)

    assert answer.question_index is None
    assert answer.question_type == "multiple_choice"
    assert answer.to_stored() == stored


def test_non_object_answer_is_kept_as_stored() -> None:
    answer = SubmissionAnswer.from_stored("legacy answer")
    assert answer.question_index is None
    assert answer.is_free_text is False
    assert answer.to_stored() == "legacy answer"
