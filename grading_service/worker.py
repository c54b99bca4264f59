"""Background worker process.

RUN:  python -m grading_service.worker

The API never talks to SMTP.  finalize() enqueues the composed review
email on the ``review_notification`` queue and returns; this process
pops it and delivers it.  Same image as the API, different command:

  api:    uvicorn grading_service.main:app --host 0.0.0.0 --port 8000
  worker: python -m grading_service.worker

The loop polls every registered queue round-robin, one task at a time.
A failed task is logged and dropped; review emails are best effort.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

from grading_service.core.config import SETTINGS
from grading_service.core.logging import setup_logging
from grading_service.core.metrics import QUEUE_DEPTH
from grading_service.services.mailer import Mailer, build_mailer
from grading_service.services.task_queue import (
    REVIEW_NOTIFICATION_QUEUE,
    TaskQueue,
    task_queue,
)

TaskHandler = Callable[[dict], Coroutine[Any, Any, None]]

logger = logging.getLogger("worker")

HANDLERS: dict[str, TaskHandler] = {}

mailer: Mailer = build_mailer(SETTINGS)


def register_handler(queue: str):
    """Decorator: register a coroutine as the handler for a queue."""

    def decorator(func):
        HANDLERS[queue] = func
        return func

    return decorator


@register_handler(REVIEW_NOTIFICATION_QUEUE)
async def handle_review_notification(payload: dict) -> None:
    """Deliver a review-complete email composed by the API."""
    to = payload.get("to")
    if not to:
        logger.warning("Review notification without recipient dropped")
        return
    await mailer.send(
        to=to,
        subject=payload.get("subject", ""),
        text=payload.get("text", ""),
        html=payload.get("html", ""),
    )


async def process_one(queue: TaskQueue, queue_name: str, *, timeout: int = 1) -> bool:
    """Run at most one task from ``queue_name``.  False when the queue was empty."""
    task = await queue.dequeue(queue_name, timeout=timeout)
    if task is None:
        return False

    handler = HANDLERS[queue_name]
    try:
        await handler(task.payload)
        logger.info(
            "Task %s on [%s] completed",
            task.id,
            queue_name,
            extra={"task_id": task.id, "queue": queue_name},
        )
    except Exception:
        logger.exception(
            "Task %s on [%s] failed",
            task.id,
            queue_name,
            extra={"task_id": task.id, "queue": queue_name},
        )
    finally:
        QUEUE_DEPTH.labels(queue_name=queue_name).set(
            await queue.queue_length(queue_name)
        )
    return True


async def run_worker() -> None:
    """Poll all registered queues and dispatch tasks to handlers."""
    queues = list(HANDLERS.keys())
    logger.info("Worker started, listening on queues: %s", queues)

    while True:
        busy = False
        for queue_name in queues:
            busy = await process_one(task_queue, queue_name) or busy
        if not busy:
            # The in-memory queue returns immediately instead of blocking.
            await asyncio.sleep(0.5)


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    asyncio.run(run_worker())
