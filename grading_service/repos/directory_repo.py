"""Read-only lookups of student and course display data."""

from __future__ import annotations

from typing import Protocol

from grading_service.models.course import CourseRef


class DirectoryRepo(Protocol):
    async def get_student_email(self, user_id: str) -> str | None: ...
    async def get_course(self, course_id: str) -> CourseRef | None: ...


class InMemoryDirectoryRepo:
    def __init__(self) -> None:
        self._emails: dict[str, str] = {}
        self._courses: dict[str, CourseRef] = {}

    def add_student(self, user_id: str, email: str) -> None:
        self._emails[user_id] = email

    def add_course(self, course: CourseRef) -> None:
        self._courses[course.id] = course

    async def get_student_email(self, user_id: str) -> str | None:
        return self._emails.get(user_id)

    async def get_course(self, course_id: str) -> CourseRef | None:
        return self._courses.get(course_id)
