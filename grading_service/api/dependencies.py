from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from grading_service.core.config import SETTINGS
from grading_service.db.engine import async_session_factory, session_scope
from grading_service.models.principal import Principal
from grading_service.repos.completion_repo import InMemoryCompletionRepo
from grading_service.repos.directory_repo import InMemoryDirectoryRepo
from grading_service.repos.lesson_repo import InMemoryLessonRepo
from grading_service.repos.pg_completion_repo import PgCompletionRepo
from grading_service.repos.pg_directory_repo import PgDirectoryRepo
from grading_service.repos.pg_lesson_repo import PgLessonRepo
from grading_service.repos.pg_settings_repo import PgSystemSettingsRepo
from grading_service.repos.pg_submission_repo import PgSubmissionRepo
from grading_service.repos.settings_repo import InMemorySystemSettingsRepo
from grading_service.repos.submission_repo import InMemorySubmissionRepo
from grading_service.services import token_service
from grading_service.services.cache import cache_service
from grading_service.services.grading_service import GradingService
from grading_service.services.notification_gate import SettingsNotificationGate
from grading_service.services.notifier import QueuedNotifier
from grading_service.services.task_queue import task_queue

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token")

# In-memory stores, used when DATABASE_URL is unset.  The test suite
# seeds and resets these directly.
submission_repo = InMemorySubmissionRepo()
lesson_repo = InMemoryLessonRepo()
completion_repo = InMemoryCompletionRepo()
directory_repo = InMemoryDirectoryRepo()
settings_repo = InMemorySystemSettingsRepo()


def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Extract and validate the JWT bearer token. Returns a Principal.

    Used as a FastAPI dependency on any protected endpoint.
    """
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    principal = Principal(
        user_id=claims["sub"],
        roles=frozenset(claims.get("roles", [])),
    )
    logger.debug(
        "Token validated for user=%s roles=%s",
        principal.user_id,
        principal.roles,
    )
    return principal


def require_role(role: str):
    """Dependency factory: demand a specific role.

    Usage: Depends(require_role("admin"))
    Returns the Principal if the role is present, else 403.
    """

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_role(role):
            logger.warning(
                "Access denied: user=%s missing role=%s",
                principal.user_id,
                role,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard


def _build_grading_service(
    *, submissions, lessons, completions, directory, settings
) -> GradingService:
    return GradingService(
        submissions=submissions,
        lessons=lessons,
        completions=completions,
        directory=directory,
        gate=SettingsNotificationGate(
            settings, cache_service, ttl_seconds=SETTINGS.settings_cache_ttl
        ),
        notifier=QueuedNotifier(task_queue),
        site_url=SETTINGS.site_url,
    )


async def get_grading_service() -> AsyncGenerator[GradingService, None]:
    """Per-request GradingService over PostgreSQL, or the in-memory stores."""
    if async_session_factory is None:
        yield _build_grading_service(
            submissions=submission_repo,
            lessons=lesson_repo,
            completions=completion_repo,
            directory=directory_repo,
            settings=settings_repo,
        )
        return

    async with session_scope() as session:
        yield _build_grading_service(
            submissions=PgSubmissionRepo(session),
            lessons=PgLessonRepo(session),
            completions=PgCompletionRepo(session),
            directory=PgDirectoryRepo(session),
            settings=PgSystemSettingsRepo(session),
        )
