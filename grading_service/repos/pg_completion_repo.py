"""PostgreSQL implementation of CompletionRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from grading_service.db.ids import parse_uuid
from grading_service.db.tables import LessonCompletionRow
from grading_service.models.progress import LessonCompletion


class PgCompletionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(self, completion: LessonCompletion) -> None:
        stmt = insert(LessonCompletionRow).values(
            user_id=parse_uuid(completion.user_id),
            lesson_id=parse_uuid(completion.lesson_id),
            course_id=parse_uuid(completion.course_id),
            completed_at=completion.completed_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[LessonCompletionRow.user_id, LessonCompletionRow.lesson_id],
            set_={
                "course_id": stmt.excluded.course_id,
                "completed_at": stmt.excluded.completed_at,
            },
        )
        await self._session.execute(stmt)
        await self._session.commit()

    async def get(self, user_id: str, lesson_id: str) -> LessonCompletion | None:
        uid, lid = parse_uuid(user_id), parse_uuid(lesson_id)
        if uid is None or lid is None:
            return None
        stmt = select(LessonCompletionRow).where(
            LessonCompletionRow.user_id == uid, LessonCompletionRow.lesson_id == lid
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return LessonCompletion(
            user_id=str(row.user_id),
            lesson_id=str(row.lesson_id),
            course_id=str(row.course_id),
            completed_at=row.completed_at,
        )
