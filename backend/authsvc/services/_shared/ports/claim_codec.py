from __future__ import annotations

from typing import Protocol

from authsvc.services.tokens.dto import TokenClaims


class ClaimCodec(Protocol):
    """
    Port for turning claims into signed token strings and back.

    Implementations own signature verification and temporal validity
    (``exp``/``nbf``/``iat``); they never consult revocation state.
    """

    def encode(self, claims: TokenClaims) -> str:
        """Sign ``claims`` and return the opaque token string."""
        ...

    def decode(self, token: str) -> TokenClaims:
        """
        Verify and parse ``token``.

        :raises InvalidTokenError: On malformed input, bad signature or algorithm.
        :raises TokenExpiredError: When the signed expiry has passed.
        """
        ...

    def decode_lifetime_unchecked(self, token: str) -> TokenClaims:
        """
        Verify the signature of ``token`` but accept it regardless of ``exp``/``nbf``.

        :raises InvalidTokenError: On malformed input, bad signature or algorithm.
        """
        ...
