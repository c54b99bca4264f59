from __future__ import annotations

import json
import logging
from typing import Protocol

from grading_service.core.metrics import CACHE_OPERATIONS
from grading_service.models.settings import SystemSettings
from grading_service.repos.settings_repo import SystemSettingsRepo
from grading_service.services.cache import CacheService

logger = logging.getLogger(__name__)

_CACHE_KEY = "system_settings:notifications"


class NotificationGate(Protocol):
    async def should_notify(self) -> bool: ...


class SettingsNotificationGate:
    """Answers "send review emails?" from the site settings row.

    The row is read through the cache.  A missing row or an unreadable
    settings store means the defaults apply, and every default is "on":
    a student should rather get an email than silently miss one because
    the settings table was never initialised.
    """

    def __init__(
        self,
        settings_repo: SystemSettingsRepo,
        cache: CacheService,
        *,
        ttl_seconds: int,
    ) -> None:
        self._repo = settings_repo
        self._cache = cache
        self._ttl = ttl_seconds

    async def should_notify(self) -> bool:
        settings = await self._load()
        return settings.review_notifications_enabled

    async def _load(self) -> SystemSettings:
        cached = await self._cache.get(_CACHE_KEY)
        if cached is not None:
            CACHE_OPERATIONS.labels(operation="hit").inc()
            return SystemSettings(**json.loads(cached))

        CACHE_OPERATIONS.labels(operation="miss").inc()
        try:
            settings = await self._repo.get()
        except Exception:
            logger.warning(
                "System settings unreadable; using default notification toggles",
                exc_info=True,
            )
            return SystemSettings()

        if settings is None:
            return SystemSettings()

        if self._ttl > 0:
            await self._cache.set(_CACHE_KEY, json.dumps(settings.to_dict()), self._ttl)
        return settings
