"""Grading failures the HTTP layer translates into status codes.

    CorrectionsValidationError, SubmissionValidationError  → 400
    SubmissionNotFoundError, LessonNotFoundError           → 404
    SubmissionConflictError                                → 409

Storage driver errors are not wrapped; they propagate as-is and surface
as 500s after the session rolls back.
"""

from __future__ import annotations


class GradingError(Exception):
    pass


class CorrectionsValidationError(GradingError, ValueError):
    pass


class SubmissionValidationError(GradingError, ValueError):
    pass


class SubmissionNotFoundError(GradingError):
    def __init__(self, submission_id: str) -> None:
        super().__init__(f"submission {submission_id} not found")
        self.submission_id = submission_id


class LessonNotFoundError(GradingError):
    def __init__(self, lesson_id: str) -> None:
        super().__init__(f"lesson {lesson_id} not found")
        self.lesson_id = lesson_id


class SubmissionConflictError(GradingError):
    """Another writer updated the submission after it was read."""

    def __init__(self, submission_id: str, expected_version: int) -> None:
        super().__init__(
            f"submission {submission_id} changed since version {expected_version}"
        )
        self.submission_id = submission_id
        self.expected_version = expected_version
