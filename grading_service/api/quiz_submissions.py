"""Student quiz submission endpoints.

POST /v1/quiz-submissions            submit (or resubmit) answers for a lesson
GET  /v1/quiz-submissions?lesson_id  the caller's own submission, or null

All-multiple-choice quizzes are scored on submit.  Anything with a
free-text answer waits in ``pending_review`` for an admin to grade it
through the review endpoints in quiz_reviews.py.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from grading_service.api.dependencies import get_grading_service, require_user
from grading_service.models.principal import Principal
from grading_service.models.submission import Submission, SubmissionAnswer
from grading_service.services.errors import (
    LessonNotFoundError,
    SubmissionValidationError,
)
from grading_service.services.grading_service import GradingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/quiz-submissions", tags=["quiz-submissions"])


class AnswerOut(BaseModel):
    question_index: int | None
    question_type: str
    selected_option: int | None = None
    answer_text: str | None = None
    awarded_marks: float | None = None
    reviewed_at: int | None = None
    reviewer_id: str | None = None


class SubmissionOut(BaseModel):
    id: str
    user_id: str
    course_id: str
    lesson_id: str
    status: str
    score: float | None
    total: float | None
    is_passed: bool | None
    reviewer_id: str | None
    reviewed_at: int | None
    answers: list[AnswerOut]
    attachment_urls: list[str]
    created_at: int
    updated_at: int


def answer_out(answer: SubmissionAnswer) -> AnswerOut:
    out = AnswerOut(
        question_index=answer.question_index,
        question_type=answer.question_type,
        selected_option=answer.selected_option,
        answer_text=answer.answer_text,
    )
    if answer.is_free_text:
        out.awarded_marks = answer.awarded_marks
        out.reviewed_at = answer.reviewed_at
        out.reviewer_id = answer.reviewer_id
    return out


def submission_out(submission: Submission) -> SubmissionOut:
    return SubmissionOut(
        id=submission.id,
        user_id=submission.user_id,
        course_id=submission.course_id,
        lesson_id=submission.lesson_id,
        status=submission.status,
        score=submission.score,
        total=submission.total,
        is_passed=submission.is_passed,
        reviewer_id=submission.reviewer_id,
        reviewed_at=submission.reviewed_at,
        answers=[answer_out(a) for a in submission.answers],
        attachment_urls=list(submission.attachment_urls),
        created_at=submission.created_at,
        updated_at=submission.updated_at,
    )


class SubmissionIn(BaseModel):
    course_id: Any = None
    lesson_id: Any = None
    answers: Any = None
    attachment_urls: Any = None


@router.post("", response_model=SubmissionOut, status_code=status.HTTP_201_CREATED)
async def submit_quiz(
    body: SubmissionIn,
    principal: Annotated[Principal, Depends(require_user)],
    service: Annotated[GradingService, Depends(get_grading_service)],
) -> SubmissionOut:
    try:
        submission = await service.submit(
            user_id=principal.user_id,
            course_id=body.course_id,
            lesson_id=body.lesson_id,
            raw_answers=body.answers,
            attachment_urls=body.attachment_urls,
        )
    except SubmissionValidationError as e:
        logger.warning("Submission rejected for user=%s: %s", principal.user_id, e)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)
        ) from None
    except LessonNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Lesson not found"
        ) from None
    return submission_out(submission)


@router.get("", response_model=SubmissionOut | None)
async def get_own_submission(
    lesson_id: Annotated[str, Query(min_length=1)],
    principal: Annotated[Principal, Depends(require_user)],
    service: Annotated[GradingService, Depends(get_grading_service)],
) -> SubmissionOut | None:
    submission = await service.get_own_submission(principal.user_id, lesson_id)
    if submission is None:
        return None
    return submission_out(submission)
