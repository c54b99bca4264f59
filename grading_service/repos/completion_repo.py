from __future__ import annotations

from typing import Protocol

from grading_service.models.progress import LessonCompletion


class CompletionRepo(Protocol):
    async def upsert(self, completion: LessonCompletion) -> None: ...
    async def get(self, user_id: str, lesson_id: str) -> LessonCompletion | None: ...


class InMemoryCompletionRepo:
    def __init__(self) -> None:
        self._store: dict[tuple[str, str], LessonCompletion] = {}

    async def upsert(self, completion: LessonCompletion) -> None:
        # Keyed on (user, lesson): a repeat overwrites, never duplicates.
        self._store[(completion.user_id, completion.lesson_id)] = completion

    async def get(self, user_id: str, lesson_id: str) -> LessonCompletion | None:
        return self._store.get((user_id, lesson_id))
