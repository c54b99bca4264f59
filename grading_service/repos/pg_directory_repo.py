"""PostgreSQL implementation of DirectoryRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from grading_service.db.ids import parse_uuid
from grading_service.db.tables import CourseRow, UserProfileRow
from grading_service.models.course import CourseRef


class PgDirectoryRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_student_email(self, user_id: str) -> str | None:
        uid = parse_uuid(user_id)
        if uid is None:
            return None
        stmt = select(UserProfileRow.email).where(UserProfileRow.id == uid)
        return await self._session.scalar(stmt)

    async def get_course(self, course_id: str) -> CourseRef | None:
        cid = parse_uuid(course_id)
        if cid is None:
            return None
        stmt = select(CourseRow).where(CourseRow.id == cid)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return CourseRef(id=str(row.id), slug=row.slug, title=row.title)
