# authsvc/services/tokens/refresh.py
from __future__ import annotations

import logging

from authsvc.services._shared.errors import InvalidTokenTypeError, UserNotFoundError
from authsvc.services._shared.ports import UserDirectory
from authsvc.services.tokens.dto import IssuedToken, TokenKind
from authsvc.services.tokens.issuer import TokenIssuer
from authsvc.services.tokens.validator import TokenValidator

logger = logging.getLogger(__name__)


class RefreshCoordinator:
    """
    Exchange a refresh token for a new access token.

    The refresh token is **not** rotated: it stays valid until it expires or is
    revoked, and every exchange mints an independent access token carrying the
    user's current email and role.
    """

    def __init__(
        self,
        validator: TokenValidator,
        issuer: TokenIssuer,
        users: UserDirectory,
    ) -> None:
        self.validator = validator
        self.issuer = issuer
        self.users = users

    def refresh(
        self,
        refresh_token: str,
        *,
        device_id: str | None = None,
        client_id: str | None = None,
    ) -> IssuedToken:
        """
        :param refresh_token: Encoded refresh token.
        :param device_id: Device for the new token; defaults to the refresh token's.
        :param client_id: Client for the new token; defaults to the refresh token's.
        :returns: The new access token.
        :raises TokenError: If the refresh token is invalid, expired, revoked,
            unknown or not a refresh token.
        :raises UserNotFoundError: If the subject no longer resolves to a user.
        """
        claims = self.validator.validate(refresh_token)
        if claims.kind is not TokenKind.REFRESH:
            logger.warning(
                "Refresh attempted with a non-refresh token",
                extra={"token_id": claims.token_id, "token_type": claims.kind.value},
            )
            raise InvalidTokenTypeError(
                "Refresh token required", token_id=claims.token_id
            )

        user = self.users.get_by_id(claims.user_id)
        if user is None:
            logger.warning(
                "Refresh token subject not found",
                extra={"user_id": claims.user_id, "token_id": claims.token_id},
            )
            raise UserNotFoundError(claims.user_id)

        return self.issuer.issue_access(
            user,
            device_id=device_id if device_id is not None else claims.device_id,
            client_id=client_id if client_id is not None else claims.client_id,
        )
