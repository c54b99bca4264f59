from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from grading_service.models.submission import Submission, SubmissionPatch
from grading_service.services.errors import (
    SubmissionConflictError,
    SubmissionNotFoundError,
)


class SubmissionRepo(Protocol):
    async def get(self, submission_id: str) -> Submission | None: ...
    async def find_for_user_lesson(
        self, user_id: str, lesson_id: str
    ) -> Submission | None: ...
    async def list_by_status(self, status: str | None = None) -> list[Submission]: ...
    async def save(self, submission: Submission) -> Submission: ...
    async def update(
        self, submission_id: str, patch: SubmissionPatch, *, expected_version: int
    ) -> Submission: ...


class InMemorySubmissionRepo:
    def __init__(self) -> None:
        self._by_id: dict[str, Submission] = {}

    async def get(self, submission_id: str) -> Submission | None:
        return self._by_id.get(submission_id)

    async def find_for_user_lesson(
        self, user_id: str, lesson_id: str
    ) -> Submission | None:
        for s in self._by_id.values():
            if s.user_id == user_id and s.lesson_id == lesson_id:
                return s
        return None

    async def list_by_status(self, status: str | None = None) -> list[Submission]:
        rows = [
            s for s in self._by_id.values() if status is None or s.status == status
        ]
        return sorted(rows, key=lambda s: s.created_at, reverse=True)

    async def save(self, submission: Submission) -> Submission:
        """Insert, or replace the user's existing attempt at the same lesson."""
        existing = await self.find_for_user_lesson(
            submission.user_id, submission.lesson_id
        )
        if existing is not None:
            submission = replace(
                submission,
                id=existing.id,
                created_at=existing.created_at,
                version=existing.version + 1,
            )
        self._by_id[submission.id] = submission
        return submission

    async def update(
        self, submission_id: str, patch: SubmissionPatch, *, expected_version: int
    ) -> Submission:
        current = self._by_id.get(submission_id)
        if current is None:
            raise SubmissionNotFoundError(submission_id)
        if current.version != expected_version:
            raise SubmissionConflictError(submission_id, expected_version)

        updated = replace(
            current,
            status=patch.status,
            score=patch.score,
            total=patch.total,
            answers=patch.answers,
            is_passed=patch.is_passed,
            reviewer_id=patch.reviewer_id,
            reviewed_at=patch.reviewed_at,
            updated_at=patch.updated_at,
            version=current.version + 1,
        )
        self._by_id[submission_id] = updated
        return updated
