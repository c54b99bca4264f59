"""PostgreSQL implementation of SubmissionRepo."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from grading_service.db.ids import parse_uuid
from grading_service.db.tables import QuizSubmissionRow
from grading_service.models.submission import (
    Submission,
    SubmissionAnswer,
    SubmissionPatch,
)
from grading_service.services.errors import (
    SubmissionConflictError,
    SubmissionNotFoundError,
    SubmissionValidationError,
)


class PgSubmissionRepo:
    """Satisfies the SubmissionRepo Protocol using PostgreSQL via SQLAlchemy.

    Writes commit immediately: finalize relies on the grade being durable
    before it upserts the completion and queues the notification.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, submission_id: str) -> Submission | None:
        sid = parse_uuid(submission_id)
        if sid is None:
            return None
        stmt = select(QuizSubmissionRow).where(QuizSubmissionRow.id == sid)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_submission(row)

    async def find_for_user_lesson(
        self, user_id: str, lesson_id: str
    ) -> Submission | None:
        uid, lid = parse_uuid(user_id), parse_uuid(lesson_id)
        if uid is None or lid is None:
            return None
        stmt = select(QuizSubmissionRow).where(
            QuizSubmissionRow.user_id == uid, QuizSubmissionRow.lesson_id == lid
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_submission(row)

    async def list_by_status(self, status: str | None = None) -> list[Submission]:
        stmt = select(QuizSubmissionRow).order_by(QuizSubmissionRow.created_at.desc())
        if status is not None:
            stmt = stmt.where(QuizSubmissionRow.status == status)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_submission(r) for r in rows]

    async def save(self, submission: Submission) -> Submission:
        ids = {
            "id": parse_uuid(submission.id),
            "user_id": parse_uuid(submission.user_id),
            "course_id": parse_uuid(submission.course_id),
            "lesson_id": parse_uuid(submission.lesson_id),
        }
        bad = sorted(k for k, v in ids.items() if v is None)
        if bad:
            raise SubmissionValidationError(f"{', '.join(bad)} must be UUIDs")

        stmt = insert(QuizSubmissionRow).values(
            **ids,
            answers=[a.to_stored() for a in submission.answers],
            attachment_urls=list(submission.attachment_urls),
            status=submission.status,
            score=submission.score,
            total=submission.total,
            is_passed=submission.is_passed,
            reviewer_id=None,
            reviewed_at=None,
            created_at=submission.created_at,
            updated_at=submission.updated_at,
            version=1,
        )
        # A resubmission replaces the attempt in place: id and created_at stay.
        stmt = stmt.on_conflict_do_update(
            constraint="uq_quiz_submission_user_lesson",
            set_={
                "course_id": stmt.excluded.course_id,
                "answers": stmt.excluded.answers,
                "attachment_urls": stmt.excluded.attachment_urls,
                "status": stmt.excluded.status,
                "score": stmt.excluded.score,
                "total": stmt.excluded.total,
                "is_passed": stmt.excluded.is_passed,
                "reviewer_id": None,
                "reviewed_at": None,
                "updated_at": stmt.excluded.updated_at,
                "version": QuizSubmissionRow.version + 1,
            },
        )
        stmt = stmt.returning(QuizSubmissionRow).execution_options(
            populate_existing=True
        )
        row = (await self._session.execute(stmt)).scalar_one()
        await self._session.commit()
        return _row_to_submission(row)

    async def update(
        self, submission_id: str, patch: SubmissionPatch, *, expected_version: int
    ) -> Submission:
        sid = parse_uuid(submission_id)
        if sid is None:
            raise SubmissionNotFoundError(submission_id)

        stmt = (
            update(QuizSubmissionRow)
            .where(
                QuizSubmissionRow.id == sid,
                QuizSubmissionRow.version == expected_version,
            )
            .values(
                status=patch.status,
                score=patch.score,
                total=patch.total,
                answers=[a.to_stored() for a in patch.answers],
                is_passed=patch.is_passed,
                reviewer_id=patch.reviewer_id,
                reviewed_at=patch.reviewed_at,
                updated_at=patch.updated_at,
                version=QuizSubmissionRow.version + 1,
            )
            .returning(QuizSubmissionRow)
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            exists = await self._session.scalar(
                select(QuizSubmissionRow.id).where(QuizSubmissionRow.id == sid)
            )
            if exists is None:
                raise SubmissionNotFoundError(submission_id)
            raise SubmissionConflictError(submission_id, expected_version)

        await self._session.commit()
        return _row_to_submission(row)


def _row_to_submission(row: QuizSubmissionRow) -> Submission:
    answers = row.answers if isinstance(row.answers, list) else []
    return Submission(
        id=str(row.id),
        user_id=str(row.user_id),
        course_id=str(row.course_id),
        lesson_id=str(row.lesson_id),
        answers=tuple(SubmissionAnswer.from_stored(a) for a in answers),
        status=row.status,
        score=row.score,
        total=row.total,
        is_passed=row.is_passed,
        reviewer_id=row.reviewer_id,
        reviewed_at=row.reviewed_at,
        attachment_urls=tuple(row.attachment_urls or ()),
        created_at=row.created_at,
        updated_at=row.updated_at,
        version=row.version,
    )
