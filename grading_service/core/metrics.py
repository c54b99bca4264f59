"""Prometheus metric inventory for grading-service.

Every metric the service exports is declared here; the modules that own
the behaviour import the one they need and increment it in place.

HTTP metrics are filled in by MetricsMiddleware.  The grading metrics
answer the questions reviewers and operators actually ask:

  grading_finalized_total{transition}
      How many reviews were finalized, split into first-time grades
      (pending_review→graded) and re-grades (graded→graded).

  review_notifications_total{result}
      What happened to the best-effort student email: queued, skipped
      because notifications are off, skipped for lack of an address, or
      failed.  A rising "failed" rate never shows up as a grading error,
      so this counter is the only place it is visible.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Grading metrics
# ---------------------------------------------------------------------------

GRADING_FINALIZED = Counter(
    "grading_finalized_total",
    "Quiz submissions finalized by a reviewer",
    ["transition"],  # "graded" (first review) or "regraded"
)

GRADING_CONFLICTS = Counter(
    "grading_conflicts_total",
    "Finalize attempts rejected because another reviewer wrote first",
)

REVIEW_NOTIFICATIONS = Counter(
    "review_notifications_total",
    "Review-complete notifications by outcome",
    ["result"],  # queued|disabled|no_email|failed
)

# ---------------------------------------------------------------------------
# Infrastructure metrics
# ---------------------------------------------------------------------------

CACHE_OPERATIONS = Counter(
    "cache_operations_total",
    "Cache get operations by result",
    ["operation"],  # "hit" or "miss"
)

QUEUE_DEPTH = Gauge(
    "task_queue_depth",
    "Number of tasks waiting in a queue",
    ["queue_name"],
)
