"""Grading orchestration: the submission lifecycle around the pure engine.

finalize() is the reviewer's "save grades" action.  Its side effects run
in a fixed order, each only after the previous one succeeded:

    1. corrections validated        (nothing read yet)
    2. submission + questions read
    3. graded submission written    (version-checked, committed)
    4. lesson completion upserted   (idempotent)
    5. student notified             (best effort, never raises)

A failure in 1-4 propagates to the caller.  A failure in 5 is logged and
counted, and the grade stands.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from grading_service.core.metrics import (
    GRADING_CONFLICTS,
    GRADING_FINALIZED,
    REVIEW_NOTIFICATIONS,
)
from grading_service.models.course import Lesson
from grading_service.models.progress import LessonCompletion
from grading_service.models.question import FREE_TEXT, MULTIPLE_CHOICE, Question
from grading_service.models.submission import (
    GRADED,
    PENDING_REVIEW,
    Submission,
    SubmissionAnswer,
    SubmissionPatch,
)
from grading_service.repos.completion_repo import CompletionRepo
from grading_service.repos.directory_repo import DirectoryRepo
from grading_service.repos.lesson_repo import LessonRepo
from grading_service.repos.submission_repo import SubmissionRepo
from grading_service.services.errors import (
    SubmissionConflictError,
    SubmissionNotFoundError,
    SubmissionValidationError,
)
from grading_service.services.grading_engine import compute_grade, parse_corrections
from grading_service.services.notification_gate import NotificationGate
from grading_service.services.notifier import Notifier, compose_review_summary

logger = logging.getLogger(__name__)

# Auto-graded (all multiple-choice) submissions pass at 70%.  Manually
# reviewed submissions never get a pass/fail verdict from this service.
AUTO_GRADED_PASS_RATIO = 0.7

MAX_ATTACHMENT_URLS = 10

REVIEW_STATUS_FILTERS = ("all", PENDING_REVIEW, GRADED)


def _utc_now() -> int:
    return int(datetime.datetime.now(datetime.UTC).timestamp())


@dataclass(frozen=True, slots=True)
class ReviewDetail:
    """Everything a reviewer's grading screen needs for one submission."""

    submission: Submission
    lesson_title: str | None
    student_email: str | None
    questions: list[Question]


def normalize_answers(raw_answers: Any) -> tuple[SubmissionAnswer, ...]:
    """Validate a student's raw answer list.  Review fields are never accepted."""
    if not isinstance(raw_answers, (list, tuple)):
        raise SubmissionValidationError("answers must be an array")

    answers: list[SubmissionAnswer] = []
    for position, raw in enumerate(raw_answers):
        if not isinstance(raw, Mapping):
            raise SubmissionValidationError(f"answers[{position}] must be an object")
        index = raw.get("question_index")
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            raise SubmissionValidationError(
                f"answers[{position}].question_index must be a non-negative integer"
            )
        question_type = raw.get("question_type") or MULTIPLE_CHOICE
        if question_type == FREE_TEXT:
            text = raw.get("answer_text")
            answers.append(
                SubmissionAnswer(
                    question_index=index,
                    question_type=FREE_TEXT,
                    answer_text=text if isinstance(text, str) else "",
                )
            )
        else:
            answers.append(
                SubmissionAnswer.from_dict(
                    {
                        "question_index": index,
                        "question_type": question_type,
                        "selected_option": raw.get("selected_option"),
                    }
                )
            )
    return tuple(answers)


def normalize_attachment_urls(raw_urls: Any) -> tuple[str, ...]:
    if not isinstance(raw_urls, (list, tuple)):
        return ()
    urls = [u.strip() for u in raw_urls if isinstance(u, str) and u.strip()]
    return tuple(urls[:MAX_ATTACHMENT_URLS])


class GradingService:
    def __init__(
        self,
        *,
        submissions: SubmissionRepo,
        lessons: LessonRepo,
        completions: CompletionRepo,
        directory: DirectoryRepo,
        gate: NotificationGate,
        notifier: Notifier,
        site_url: str = "",
        clock: Callable[[], int] = _utc_now,
    ) -> None:
        self._submissions = submissions
        self._lessons = lessons
        self._completions = completions
        self._directory = directory
        self._gate = gate
        self._notifier = notifier
        self._site_url = site_url
        self._clock = clock

    # ------------------------------------------------------------------
    # Reviewer side
    # ------------------------------------------------------------------

    async def finalize(
        self, submission_id: str, raw_corrections: Any, *, reviewer_id: str
    ) -> Submission:
        corrections = parse_corrections(raw_corrections)

        submission = await self._submissions.get(submission_id)
        if submission is None:
            raise SubmissionNotFoundError(submission_id)
        questions = await self._lessons.get_questions_for_lesson(submission.lesson_id)

        now = self._clock()
        result = compute_grade(
            submission,
            questions,
            corrections,
            reviewer_id=reviewer_id,
            reviewed_at=now,
        )
        patch = SubmissionPatch(
            status=GRADED,
            score=result.score,
            total=result.total,
            answers=result.answers,
            is_passed=None,
            reviewer_id=reviewer_id,
            reviewed_at=now,
            updated_at=now,
        )
        try:
            graded = await self._submissions.update(
                submission.id, patch, expected_version=submission.version
            )
        except SubmissionConflictError:
            GRADING_CONFLICTS.inc()
            logger.warning(
                "Concurrent grading rejected: submission=%s version=%s",
                submission.id,
                submission.version,
                extra={"submission_id": submission.id, "reviewer_id": reviewer_id},
            )
            raise

        transition = "regraded" if submission.status == GRADED else "graded"
        GRADING_FINALIZED.labels(transition=transition).inc()
        logger.info(
            "Submission %s %s by %s: %s / %s",
            graded.id,
            transition,
            reviewer_id,
            graded.score,
            graded.total,
            extra={"submission_id": graded.id, "reviewer_id": reviewer_id},
        )

        await self._completions.upsert(
            LessonCompletion(
                user_id=graded.user_id,
                lesson_id=graded.lesson_id,
                course_id=graded.course_id,
                completed_at=now,
            )
        )

        await self._notify_reviewed(graded)
        return graded

    async def _notify_reviewed(self, submission: Submission) -> None:
        try:
            if not await self._gate.should_notify():
                REVIEW_NOTIFICATIONS.labels(result="disabled").inc()
                return

            email = await self._directory.get_student_email(submission.user_id)
            if not email:
                REVIEW_NOTIFICATIONS.labels(result="no_email").inc()
                logger.info(
                    "No email on file for user=%s; review notification skipped",
                    submission.user_id,
                )
                return

            course = await self._directory.get_course(submission.course_id)
            lesson = await self._lessons.get(submission.lesson_id)
            summary = compose_review_summary(
                course_title=course.title if course else None,
                course_slug=course.slug if course else None,
                lesson_title=lesson.title if lesson else None,
                score=submission.score or 0,
                total=submission.total or 0,
                site_url=self._site_url,
            )
            await self._notifier.send(email, summary)
            REVIEW_NOTIFICATIONS.labels(result="queued").inc()
        except Exception:
            REVIEW_NOTIFICATIONS.labels(result="failed").inc()
            logger.exception(
                "Review notification failed for submission=%s",
                submission.id,
                extra={"submission_id": submission.id},
            )

    async def list_for_review(self, status: str = "all") -> list[Submission]:
        if status not in REVIEW_STATUS_FILTERS:
            raise SubmissionValidationError(
                f"status must be one of {', '.join(REVIEW_STATUS_FILTERS)}"
            )
        return await self._submissions.list_by_status(
            None if status == "all" else status
        )

    async def get_for_review(self, submission_id: str) -> ReviewDetail:
        submission = await self._submissions.get(submission_id)
        if submission is None:
            raise SubmissionNotFoundError(submission_id)

        lesson: Lesson | None = await self._lessons.get(submission.lesson_id)
        questions: list[Question] = []
        if lesson is not None:
            questions = await self._lessons.get_questions_for_lesson(lesson.id)
        email = await self._directory.get_student_email(submission.user_id)
        return ReviewDetail(
            submission=submission,
            lesson_title=lesson.title if lesson else None,
            student_email=email,
            questions=questions,
        )

    # ------------------------------------------------------------------
    # Student side
    # ------------------------------------------------------------------

    async def submit(
        self,
        *,
        user_id: str,
        course_id: Any,
        lesson_id: Any,
        raw_answers: Any,
        attachment_urls: Any = None,
    ) -> Submission:
        if not isinstance(course_id, str) or not course_id:
            raise SubmissionValidationError("course_id is required")
        if not isinstance(lesson_id, str) or not lesson_id:
            raise SubmissionValidationError("lesson_id is required")
        answers = normalize_answers(raw_answers)

        questions = await self._lessons.get_questions_for_lesson(lesson_id)
        now = self._clock()
        draft = Submission.new(
            user_id=user_id,
            course_id=course_id,
            lesson_id=lesson_id,
            answers=answers,
            now=now,
            attachment_urls=normalize_attachment_urls(attachment_urls),
        )

        if draft.has_free_text:
            saved = await self._submissions.save(draft)
            logger.info(
                "Submission %s awaiting review (user=%s lesson=%s)",
                saved.id,
                user_id,
                lesson_id,
                extra={"submission_id": saved.id},
            )
            return saved

        # All multiple choice: score now, no reviewer involved.
        result = compute_grade(draft, questions, {}, reviewer_id="", reviewed_at=now)
        is_passed = (
            result.score / result.total >= AUTO_GRADED_PASS_RATIO
            if result.total > 0
            else None
        )
        saved = await self._submissions.save(
            Submission(
                id=draft.id,
                user_id=user_id,
                course_id=course_id,
                lesson_id=lesson_id,
                answers=result.answers,
                status=GRADED,
                score=result.score,
                total=result.total,
                is_passed=is_passed,
                attachment_urls=draft.attachment_urls,
                created_at=now,
                updated_at=now,
            )
        )
        await self._completions.upsert(
            LessonCompletion(
                user_id=user_id,
                lesson_id=lesson_id,
                course_id=course_id,
                completed_at=now,
            )
        )
        logger.info(
            "Submission %s auto-graded (user=%s lesson=%s): %s / %s",
            saved.id,
            user_id,
            lesson_id,
            saved.score,
            saved.total,
            extra={"submission_id": saved.id},
        )
        return saved

    async def get_own_submission(
        self, user_id: str, lesson_id: str
    ) -> Submission | None:
        return await self._submissions.find_for_user_lesson(user_id, lesson_id)
