from __future__ import annotations

import asyncio
import sys
import uuid
from datetime import UTC, datetime, timedelta
from pathlib import Path

import jwt
import pytest
from fastapi.testclient import TestClient

from grading_service.api.dependencies import (
    completion_repo,
    directory_repo,
    lesson_repo,
    settings_repo,
    submission_repo,
)
from grading_service.main import app
from grading_service.models.course import CourseRef, Lesson
from grading_service.models.submission import Submission, SubmissionAnswer
from grading_service.services import token_service
from grading_service.services.cache import cache_service
from grading_service.services.task_queue import task_queue

# Ensure repo root is on sys.path so `import grading_service` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

COURSE_ID = "course-1"
LESSON_ID = "lesson-1"
STUDENT_ID = "student-1"
STUDENT_EMAIL = "student@example.com"

# Three questions, six marks: mc(2, key 1), free text(3), mc(1, key 0).
SAMPLE_QUESTIONS = (
    {
        "question_type": "multiple_choice",
        "question": "Which keyword defines a function?",
        "options": ["class", "def", "lambda"],
        "max_marks": 2,
        "correct_answer": 1,
    },
    {
        "question_type": "free_text",
        "question": "Explain what a generator is.",
        "max_marks": 3,
    },
    {
        "question_type": "multiple_choice",
        "question": "Is None falsy?",
        "options": ["yes", "no"],
        "max_marks": 1,
        "correct_answer": "0",
    },
)


@pytest.fixture(autouse=True)
def reset_grading_state() -> None:
    """Clear the in-memory repositories between tests."""
    submission_repo._by_id.clear()
    lesson_repo._by_id.clear()
    completion_repo._store.clear()
    directory_repo._emails.clear()
    directory_repo._courses.clear()
    settings_repo.set(None)


@pytest.fixture(autouse=True)
def reset_cache() -> None:
    """Clear cache between tests."""
    if hasattr(cache_service, "_store"):
        cache_service._store.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_task_queue() -> None:
    """Clear task queues between tests."""
    if hasattr(task_queue, "_queues"):
        task_queue._queues.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def create_access_token(
    *,
    sub: str,
    roles: list[str] | None = None,
    ttl_minutes: int = 15,
) -> str:
    """Sign a token with the key decode_access_token verifies against."""
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": token_service.ISSUER,
        "aud": token_service.AUDIENCE,
        "exp": now + timedelta(minutes=ttl_minutes),
        "iat": now,
        "jti": str(uuid.uuid4()),
        "roles": roles or ["user"],
    }
    return jwt.encode(
        payload, token_service._private_key, algorithm=token_service.ALGORITHM
    )


def mint_token(
    username: str = "test-user",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return create_access_token(sub=username, roles=roles)


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token() -> str:
    """Token for the seeded student."""
    return mint_token(username=STUDENT_ID)


@pytest.fixture
def admin_token() -> str:
    """Token with admin role."""
    return mint_token(username="test-admin", roles=["admin"])


# ---------------------------------------------------------------------------
# Seed helpers
# ---------------------------------------------------------------------------


def seed_lesson(
    questions=SAMPLE_QUESTIONS,
    *,
    lesson_id: str = LESSON_ID,
    course_id: str = COURSE_ID,
) -> Lesson:
    """Store a course, a lesson with the given quiz and the student's email."""
    lesson = Lesson(
        id=lesson_id,
        course_id=course_id,
        title="Generators",
        quiz_questions=tuple(questions),
    )
    lesson_repo.add(lesson)
    directory_repo.add_course(
        CourseRef(id=course_id, slug="python-basics", title="Python Basics")
    )
    directory_repo.add_student(STUDENT_ID, STUDENT_EMAIL)
    return lesson


def sample_answers(text: str = "It yields values lazily.") -> tuple[SubmissionAnswer, ...]:
    """Student picks the right first option, writes text, misses the third."""
    return (
        SubmissionAnswer(question_index=0, selected_option=1),
        SubmissionAnswer(question_index=1, question_type="free_text", answer_text=text),
        SubmissionAnswer(question_index=2, selected_option=1),
    )


def seed_submission(
    answers: tuple[SubmissionAnswer, ...] | None = None,
    *,
    user_id: str = STUDENT_ID,
    lesson_id: str = LESSON_ID,
    course_id: str = COURSE_ID,
    created_at: int = 1_700_000_000,
) -> Submission:
    """Store a pending-review submission directly in the in-memory repo."""
    submission = Submission.new(
        user_id=user_id,
        course_id=course_id,
        lesson_id=lesson_id,
        answers=answers if answers is not None else sample_answers(),
        now=created_at,
    )
    return asyncio.run(submission_repo.save(submission))
