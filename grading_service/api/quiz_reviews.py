"""Admin review endpoints for quiz submissions.

GET   /v1/admin/quiz-submissions?status=   review queue (all|pending_review|graded)
GET   /v1/admin/quiz-submissions/{id}      one submission with its current quiz
PATCH /v1/admin/quiz-submissions/{id}      finalize: apply free-text marks, grade

The authenticated admin is recorded as the reviewer.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import AliasChoices, BaseModel, Field

from grading_service.api.dependencies import get_grading_service, require_role
from grading_service.api.quiz_submissions import SubmissionOut, submission_out
from grading_service.models.principal import Principal
from grading_service.services.errors import (
    CorrectionsValidationError,
    LessonNotFoundError,
    SubmissionConflictError,
    SubmissionNotFoundError,
    SubmissionValidationError,
)
from grading_service.services.grading_service import GradingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin/quiz-submissions", tags=["quiz-reviews"])

_require_admin = require_role("admin")


class GradeIn(BaseModel):
    # Left loosely typed: shape errors are reported by the grading engine.
    corrections: Any = Field(
        default=None,
        validation_alias=AliasChoices("corrections", "free_text_grades"),
    )


class GradeOut(BaseModel):
    id: str
    status: str
    score: float
    total: float


class ReviewDetailOut(BaseModel):
    submission: SubmissionOut
    lesson_title: str | None
    student_email: str | None
    questions: list[dict[str, Any]]


@router.get("", response_model=list[SubmissionOut])
async def list_submissions(
    principal: Annotated[Principal, Depends(_require_admin)],
    service: Annotated[GradingService, Depends(get_grading_service)],
    status_filter: Annotated[str, Query(alias="status")] = "all",
) -> list[SubmissionOut]:
    try:
        submissions = await service.list_for_review(status_filter)
    except SubmissionValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)
        ) from None
    return [submission_out(s) for s in submissions]


@router.get("/{submission_id}", response_model=ReviewDetailOut)
async def get_submission(
    submission_id: str,
    principal: Annotated[Principal, Depends(_require_admin)],
    service: Annotated[GradingService, Depends(get_grading_service)],
) -> ReviewDetailOut:
    try:
        detail = await service.get_for_review(submission_id)
    except SubmissionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Submission not found"
        ) from None
    return ReviewDetailOut(
        submission=submission_out(detail.submission),
        lesson_title=detail.lesson_title,
        student_email=detail.student_email,
        questions=[q.to_dict() for q in detail.questions],
    )


@router.patch("/{submission_id}", response_model=GradeOut)
async def grade_submission(
    submission_id: str,
    body: GradeIn,
    principal: Annotated[Principal, Depends(_require_admin)],
    service: Annotated[GradingService, Depends(get_grading_service)],
) -> GradeOut:
    try:
        graded = await service.finalize(
            submission_id, body.corrections, reviewer_id=principal.user_id
        )
    except CorrectionsValidationError as e:
        logger.warning(
            "Grading rejected: submission=%s reviewer=%s: %s",
            submission_id,
            principal.user_id,
            e,
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)
        ) from None
    except SubmissionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Submission not found"
        ) from None
    except LessonNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Lesson not found"
        ) from None
    except SubmissionConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Submission was graded by someone else; reload and retry",
        ) from None

    return GradeOut(
        id=graded.id,
        status=graded.status,
        score=graded.score or 0,
        total=graded.total or 0,
    )
