"""HTTP tests for the health endpoint and generic error responses."""

from __future__ import annotations

from authsvc import __version__
from tests.api.conftest import API


def test_health(client):
    resp = client.get(f"{API}/health")

    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "db": "ok", "version": __version__}


def test_unknown_route_is_problem_json(client):
    resp = client.get(f"{API}/nowhere")

    assert resp.status_code == 404
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["code"] == "not_found"
    assert body["request_id"]

