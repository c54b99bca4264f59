"""SQLAlchemy table definitions.

These map to the frozen dataclass domain models in grading_service/models/.
Repos convert between rows and dataclasses; nothing outside repos/ sees a
row object.

Lesson content and submission answers are JSONB documents because their
shape is owned by the CMS and the quiz player, not by this service.
"""

from __future__ import annotations

import uuid

from sqlalchemy import (
    Boolean,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from grading_service.db.engine import Base


class UserProfileRow(Base):
    __tablename__ = "user_profiles"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)


class CourseRow(Base):
    __tablename__ = "courses"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    slug: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)


class LessonRow(Base):
    __tablename__ = "lessons"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    course_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("courses.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    # {"quiz_data": {"questions": [...]}, ...}
    content: Mapped[dict | None] = mapped_column(JSONB, nullable=True)


class QuizSubmissionRow(Base):
    __tablename__ = "lesson_quiz_submissions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("user_profiles.id"), nullable=False
    )
    course_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("courses.id"), nullable=False
    )
    lesson_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("lessons.id"), nullable=False
    )
    answers: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    attachment_urls: Mapped[list[str]] = mapped_column(
        ARRAY(String), nullable=False, default=list
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="pending_review"
    )  # pending_review|graded
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    total: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_passed: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    reviewer_id: Mapped[str | None] = mapped_column(String(320), nullable=True)
    reviewed_at: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[int] = mapped_column(Integer, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        UniqueConstraint("user_id", "lesson_id", name="uq_quiz_submission_user_lesson"),
        Index("ix_lesson_quiz_submissions_status_created_at", "status", "created_at"),
    )


class LessonCompletionRow(Base):
    __tablename__ = "user_lesson_completion"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("user_profiles.id"), primary_key=True
    )
    lesson_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("lessons.id"), primary_key=True
    )
    course_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("courses.id"), nullable=False
    )
    completed_at: Mapped[int] = mapped_column(Integer, nullable=False)


class SystemSettingsRow(Base):
    """Single-row table (id=1) holding site-wide toggles."""

    __tablename__ = "system_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    site_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    newsletter_enabled: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    course_notifications_enabled: Mapped[bool | None] = mapped_column(
        Boolean, nullable=True
    )
    course_update_notifications_enabled: Mapped[bool | None] = mapped_column(
        Boolean, nullable=True
    )
    updated_at: Mapped[int | None] = mapped_column(Integer, nullable=True)
