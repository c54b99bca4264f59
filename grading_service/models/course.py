from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CourseRef:
    """Display data for a course, used in review screens and student emails."""

    id: str
    slug: str | None
    title: str


@dataclass(frozen=True, slots=True)
class Lesson:
    """A lesson as the grading engine sees it.

    ``quiz_questions`` is the raw question list from the lesson's quiz
    content, exactly as authored.  It is parsed into Question objects by
    the lesson repo on every read, never cached with the submission.
    """

    id: str
    course_id: str
    title: str
    quiz_questions: tuple[dict, ...] = ()
