"""PostgreSQL implementation of LessonRepo (the question bank reader)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from grading_service.db.ids import parse_uuid
from grading_service.db.tables import LessonRow
from grading_service.models.course import Lesson
from grading_service.models.question import Question, parse_quiz_questions
from grading_service.services.errors import LessonNotFoundError


class PgLessonRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _get_row(self, lesson_id: str) -> LessonRow | None:
        lid = parse_uuid(lesson_id)
        if lid is None:
            return None
        stmt = select(LessonRow).where(LessonRow.id == lid)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get(self, lesson_id: str) -> Lesson | None:
        row = await self._get_row(lesson_id)
        if row is None:
            return None
        raw = _raw_questions(row.content)
        return Lesson(
            id=str(row.id),
            course_id=str(row.course_id),
            title=row.title,
            quiz_questions=tuple(raw) if isinstance(raw, list) else (),
        )

    async def get_questions_for_lesson(self, lesson_id: str) -> list[Question]:
        row = await self._get_row(lesson_id)
        if row is None:
            raise LessonNotFoundError(lesson_id)
        return parse_quiz_questions(_raw_questions(row.content))


def _raw_questions(content: object) -> object:
    # content.quiz_data.questions; any missing level means "no quiz"
    if not isinstance(content, dict):
        return None
    quiz_data = content.get("quiz_data")
    if not isinstance(quiz_data, dict):
        return None
    return quiz_data.get("questions")
