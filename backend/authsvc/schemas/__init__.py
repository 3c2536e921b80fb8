"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AccessTokenSchema,
    ClaimsSchema,
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterSchema,
    SessionsQuerySchema,
    TokenInSchema,
    TokenMetadataSchema,
    TokenPairSchema,
    UserSchema,
)

__all__ = [
    "AccessTokenSchema",
    "ClaimsSchema",
    "LoginSchema",
    "LogoutSchema",
    "RefreshSchema",
    "RegisterSchema",
    "SessionsQuerySchema",
    "TokenInSchema",
    "TokenMetadataSchema",
    "TokenPairSchema",
    "UserSchema",
]
