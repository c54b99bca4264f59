"""PostgreSQL implementation of SystemSettingsRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from grading_service.db.tables import SystemSettingsRow
from grading_service.models.settings import SystemSettings


class PgSystemSettingsRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self) -> SystemSettings | None:
        stmt = select(SystemSettingsRow).where(SystemSettingsRow.id == 1)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        # NULL columns mean "never configured", which is "on"
        return SystemSettings(
            newsletter_enabled=_on(row.newsletter_enabled),
            course_notifications_enabled=_on(row.course_notifications_enabled),
            course_update_notifications_enabled=_on(
                row.course_update_notifications_enabled
            ),
        )


def _on(value: bool | None) -> bool:
    return True if value is None else value
