from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LessonCompletion:
    """Set-semantics completion record: at most one per (user_id, lesson_id)."""

    user_id: str
    lesson_id: str
    course_id: str
    completed_at: int
