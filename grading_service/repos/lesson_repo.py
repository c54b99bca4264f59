from __future__ import annotations

from typing import Protocol

from grading_service.models.course import Lesson
from grading_service.models.question import Question, parse_quiz_questions
from grading_service.services.errors import LessonNotFoundError


class LessonRepo(Protocol):
    async def get(self, lesson_id: str) -> Lesson | None: ...
    async def get_questions_for_lesson(self, lesson_id: str) -> list[Question]: ...


class InMemoryLessonRepo:
    def __init__(self) -> None:
        self._by_id: dict[str, Lesson] = {}

    def add(self, lesson: Lesson) -> None:
        self._by_id[lesson.id] = lesson

    async def get(self, lesson_id: str) -> Lesson | None:
        return self._by_id.get(lesson_id)

    async def get_questions_for_lesson(self, lesson_id: str) -> list[Question]:
        lesson = self._by_id.get(lesson_id)
        if lesson is None:
            raise LessonNotFoundError(lesson_id)
        return parse_quiz_questions(list(lesson.quiz_questions))
