# authsvc/infra/jwt/pyjwt_claim_codec.py
from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any, Final

import jwt

from authsvc.services._shared.errors import InvalidTokenError, TokenExpiredError
from authsvc.services._shared.ports import ClaimCodec
from authsvc.services.tokens.dto import TokenClaims, TokenKind

# Symmetric family accepted on decode; anything else in the header is rejected
HMAC_ALGORITHMS: Final[tuple[str, ...]] = ("HS256", "HS384", "HS512")

REQUIRED_CLAIMS: Final[list[str]] = ["jti", "sub", "iss", "iat", "nbf", "exp", "token_type"]

_OPTIONAL_STR_CLAIMS: Final[tuple[str, ...]] = ("role", "device_id", "client_id")


class PyJWTClaimCodec(ClaimCodec):
    """
    HMAC-signed JWT codec built on PyJWT.

    :param secret: Shared signing secret (never empty).
    :param algorithm: Signing algorithm, one of :data:`HMAC_ALGORITHMS`.
    :param issuer: Expected ``iss``; tokens from another issuer are rejected.
        ``None`` disables the check.
    :param leeway: Clock-skew tolerance for ``exp``/``nbf``/``iat``.
    """

    __slots__ = ("_secret", "algorithm", "issuer", "leeway")

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        issuer: str | None = None,
        leeway: timedelta = timedelta(0),
    ) -> None:
        if not secret:
            raise ValueError("Signing secret must be a non-empty string.")
        if algorithm not in HMAC_ALGORITHMS:
            raise ValueError(
                f"Unsupported signing algorithm {algorithm!r}; expected one of {HMAC_ALGORITHMS}."
            )
        self._secret = secret
        self.algorithm = algorithm
        self.issuer = issuer
        self.leeway = leeway

    def __repr__(self) -> str:
        # Keep the secret out of logs and tracebacks
        return f"PyJWTClaimCodec(algorithm={self.algorithm!r}, issuer={self.issuer!r})"

    # -------------------------- encode -------------------------

    def encode(self, claims: TokenClaims) -> str:
        payload: dict[str, Any] = {
            "jti": claims.token_id,
            "sub": claims.subject,
            "email": claims.email,
            "token_type": claims.kind.value,
            "iss": claims.issuer,
            "iat": int(claims.issued_at.timestamp()),
            "nbf": int(claims.not_before.timestamp()),
            "exp": int(claims.expires_at.timestamp()),
        }
        for key in _OPTIONAL_STR_CLAIMS:
            value = getattr(claims, key)
            if value is not None:
                payload[key] = value
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    # -------------------------- decode -------------------------

    def decode(self, token: str) -> TokenClaims:
        return self._decode(token, check_lifetime=True)

    def decode_lifetime_unchecked(self, token: str) -> TokenClaims:
        return self._decode(token, check_lifetime=False)

    def _decode(self, token: str, *, check_lifetime: bool) -> TokenClaims:
        if not isinstance(token, str) or not token.strip():
            raise InvalidTokenError("Token is empty")
        options: dict[str, Any] = {"require": REQUIRED_CLAIMS}
        if not check_lifetime:
            options.update(verify_exp=False, verify_nbf=False, verify_iat=False)
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=list(HMAC_ALGORITHMS),
                issuer=self.issuer,
                leeway=self.leeway,
                options=options,
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(f"Invalid token: {exc}") from exc
        return self._claims_from_payload(payload)

    @staticmethod
    def _claims_from_payload(payload: Mapping[str, Any]) -> TokenClaims:
        """Map a verified payload onto :class:`TokenClaims`, rejecting odd shapes."""
        try:
            token_id = payload["jti"]
            subject = payload["sub"]
            email = payload.get("email")
            if not isinstance(token_id, str) or not token_id:
                raise ValueError("jti must be a non-empty string")
            if not isinstance(subject, str) or not subject.isdigit():
                raise ValueError("sub must be a numeric string")
            if not isinstance(email, str):
                raise ValueError("email must be a string")
            optional = {}
            for key in _OPTIONAL_STR_CLAIMS:
                value = payload.get(key)
                if value is not None and not isinstance(value, str):
                    raise ValueError(f"{key} must be a string")
                optional[key] = value
            return TokenClaims(
                token_id=token_id,
                user_id=int(subject),
                email=email,
                kind=TokenKind(payload["token_type"]),
                issuer=str(payload["iss"]),
                issued_at=_from_numeric_date(payload["iat"]),
                not_before=_from_numeric_date(payload["nbf"]),
                expires_at=_from_numeric_date(payload["exp"]),
                **optional,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidTokenError(f"Invalid token claims: {exc}") from exc


def _from_numeric_date(value: Any) -> datetime:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise TypeError("NumericDate claims must be numbers")
    return datetime.fromtimestamp(int(value), tz=UTC)
