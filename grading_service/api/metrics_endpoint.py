"""Prometheus metrics endpoint.

Scraped by Prometheus in text exposition format.  Besides the HTTP
request metrics it exposes the grading counters, for example:

  grading_finalized_total{transition="regraded"} 3.0
  review_notifications_total{result="failed"} 1.0

Restrict access to /metrics at the ingress in production.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Expose all Prometheus metrics in text exposition format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
