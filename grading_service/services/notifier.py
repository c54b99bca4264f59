"""Review-complete notifications.

compose_review_summary() builds the email a student gets once a reviewer
finalizes their quiz.  QueuedNotifier hands it to the task queue so the
grading request returns without waiting on SMTP; the worker's
``review_notification`` handler does the delivery.
"""

from __future__ import annotations

import html
import logging
from dataclasses import asdict, dataclass
from typing import Protocol

from grading_service.services.task_queue import REVIEW_NOTIFICATION_QUEUE, TaskQueue

logger = logging.getLogger(__name__)

SUBJECT = "Quiz review completed - CodeCraft Academy"


@dataclass(frozen=True, slots=True)
class ReviewSummary:
    subject: str
    text: str
    html: str


class Notifier(Protocol):
    async def send(self, to_email: str, summary: ReviewSummary) -> None: ...


def _format_marks(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def compose_review_summary(
    *,
    course_title: str | None,
    course_slug: str | None,
    lesson_title: str | None,
    score: float,
    total: float,
    site_url: str = "",
) -> ReviewSummary:
    course_title = course_title or "Course"
    lesson_title = lesson_title or "Quiz"
    score_line = f"Score: {_format_marks(score)} / {_format_marks(total)}"

    site_url = site_url.rstrip("/")
    if site_url and course_slug:
        continue_url, link_label = f"{site_url}/courses/{course_slug}/learn", course_title
    else:
        continue_url, link_label = site_url, site_url

    text = (
        "Your quiz review is complete\n\n"
        f"Course: {course_title}\n"
        f"Lesson: {lesson_title}\n"
        f"{score_line}"
    )
    if continue_url:
        text += f"\n\nContinue learning: {continue_url}"

    continue_html = ""
    if continue_url:
        continue_html = (
            '<p style="margin: 16px 0 0 0;">Continue learning: '
            f'<a href="{html.escape(continue_url, quote=True)}" '
            'style="color: #4f46e5; text-decoration: underline;">'
            f"{html.escape(link_label)}</a></p>"
        )
    body_html = (
        '<div style="font-family: Arial, sans-serif; max-width: 640px; '
        'margin: 0 auto; padding: 20px;">'
        '<h2 style="margin: 0 0 12px 0; color: #111827;">'
        "Your quiz review is complete</h2>"
        '<p style="margin: 0 0 8px 0; color: #4b5563;"><strong>Course:</strong> '
        f"{html.escape(course_title)}</p>"
        '<p style="margin: 0 0 8px 0; color: #4b5563;"><strong>Lesson:</strong> '
        f"{html.escape(lesson_title)}</p>"
        '<p style="margin: 0 0 16px 0; color: #111827; font-size: 18px; '
        f'font-weight: 600;">{score_line}</p>'
        f"{continue_html}"
        "</div>"
    )
    return ReviewSummary(subject=SUBJECT, text=text, html=body_html)


class QueuedNotifier:
    """Notifier that defers delivery to the background worker."""

    def __init__(self, queue: TaskQueue) -> None:
        self._queue = queue

    async def send(self, to_email: str, summary: ReviewSummary) -> None:
        task = await self._queue.enqueue(
            REVIEW_NOTIFICATION_QUEUE, {"to": to_email, **asdict(summary)}
        )
        logger.info(
            "Queued review notification task=%s",
            task.id,
            extra={"task_id": task.id, "queue": REVIEW_NOTIFICATION_QUEUE},
        )
