"""Helpers for exercising the HTTP API through the Flask test client."""

from __future__ import annotations

import pytest

API = "/api/v1"
PASSWORD = "correct-horse-battery"


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def register(client):
    """Register a user through the API and return its JSON representation."""

    def _register(email: str = "api@example.com", password: str = PASSWORD, **extra):
        resp = client.post(
            f"{API}/auth/register", json={"email": email, "password": password, **extra}
        )
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]

    return _register


@pytest.fixture()
def login(client):
    """Log in through the API and return the token pair payload."""

    def _login(email: str = "api@example.com", password: str = PASSWORD, **extra):
        resp = client.post(
            f"{API}/auth/login", json={"email": email, "password": password, **extra}
        )
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()["data"]

    return _login


@pytest.fixture()
def tokens(register, login):
    """A registered user's first token pair."""
    register()
    return login()
