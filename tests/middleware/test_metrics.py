"""Tests for the Prometheus metrics middleware.

prometheus-client keeps one global registry and counters never reset,
so every assertion here is on the delta around the request.
"""

from __future__ import annotations

from fastapi.routing import APIRoute
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY
from starlette.requests import Request

from grading_service.middleware.metrics import UNMATCHED_ENDPOINT, route_template
from tests.conftest import auth, seed_lesson, seed_submission


def _get_sample(name: str, labels: dict | None = None) -> float:
    value = REGISTRY.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


def test_request_counter_increments(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/health")
    assert _get_sample("http_requests_total", labels) - before >= 1


def test_request_duration_histogram_observes(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health"}
    before = _get_sample("http_request_duration_seconds_count", labels)
    client.get("/health")
    assert _get_sample("http_request_duration_seconds_count", labels) - before >= 1


def test_endpoint_label_is_route_template(
    client: TestClient, admin_token: str
) -> None:
    seed_lesson()
    submission = seed_submission()
    labels = {
        "method": "PATCH",
        "endpoint": "/v1/admin/quiz-submissions/{submission_id}",
        "status_code": "200",
    }
    before = _get_sample("http_requests_total", labels)

    client.patch(
        f"/v1/admin/quiz-submissions/{submission.id}",
        json={"corrections": []},
        headers=auth(admin_token),
    )

    assert _get_sample("http_requests_total", labels) - before == 1
    raw_path = dict(labels, endpoint=f"/v1/admin/quiz-submissions/{submission.id}")
    assert _get_sample("http_requests_total", raw_path) == 0


def test_unknown_path_uses_unmatched_label(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "<unmatched>", "status_code": "404"}
    before = _get_sample("http_requests_total", labels)
    client.get("/no/such/route")
    assert _get_sample("http_requests_total", labels) - before == 1


def test_finalize_counts_transitions(client: TestClient, admin_token: str) -> None:
    seed_lesson()
    submission = seed_submission()
    url = f"/v1/admin/quiz-submissions/{submission.id}"
    graded_before = _get_sample("grading_finalized_total", {"transition": "graded"})
    regraded_before = _get_sample("grading_finalized_total", {"transition": "regraded"})

    client.patch(url, json={"corrections": []}, headers=auth(admin_token))
    client.patch(url, json={"corrections": []}, headers=auth(admin_token))

    graded_after = _get_sample("grading_finalized_total", {"transition": "graded"})
    regraded_after = _get_sample("grading_finalized_total", {"transition": "regraded"})
    assert graded_after - graded_before == 1
    assert regraded_after - regraded_before == 1


def test_metrics_endpoint_returns_prometheus_format(client: TestClient) -> None:
    client.get("/health")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
    assert "grading_finalized_total" in resp.text


def test_metrics_endpoint_not_self_instrumented(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/metrics", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/metrics")
    client.get("/metrics")
    assert _get_sample("http_requests_total", labels) == before


def _endpoint() -> None:
    return None


def test_route_template_reads_matched_route_from_scope() -> None:
    route = APIRoute("/v1/quiz-submissions/{submission_id}", _endpoint)
    request = Request({"type": "http", "route": route})
    assert route_template(request) == "/v1/quiz-submissions/{submission_id}"


def test_route_template_without_matched_route() -> None:
    assert route_template(Request({"type": "http"})) == UNMATCHED_ENDPOINT
