from __future__ import annotations

from typing import Protocol

from grading_service.models.settings import SystemSettings


class SystemSettingsRepo(Protocol):
    async def get(self) -> SystemSettings | None: ...


class InMemorySystemSettingsRepo:
    def __init__(self) -> None:
        self._settings: SystemSettings | None = None

    def set(self, settings: SystemSettings | None) -> None:
        self._settings = settings

    async def get(self) -> SystemSettings | None:
        return self._settings
