# authsvc/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for account registration.

    :param email: User email (normalized by the model).
    :param password: Raw password (hashed by the model).
    """

    email: str
    password: str
    first_name: str | None = None
    last_name: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :param password: Raw password (to be verified).
    :param device_id: Optional device identifier embedded in both tokens.
    :param client_id: Optional client identifier embedded in both tokens.
    """

    email: str
    password: str
    device_id: str | None = None
    client_id: str | None = None


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param token: Encoded token (access or refresh).
    :param all_sessions: If True, revoke every token of the token's owner.
    """

    token: str
    all_sessions: bool = False


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserOut:
    """Public-safe view of a user."""

    id: int
    email: str
    role: str
    is_active: bool
    first_name: str | None = None
    last_name: str | None = None
