# authsvc/services/auth/service.py
from __future__ import annotations

import logging

from authsvc.models.user import User
from authsvc.repositories.user import UserRepository
from authsvc.services._shared.base import BaseService
from authsvc.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
)
from authsvc.services.auth.dto import LoginIn, LogoutIn, RegisterIn, UserOut
from authsvc.services.tokens.dto import TokenPair, UserIdentity
from authsvc.services.tokens.service import TokenService

logger = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Account-facing use cases (register / login / logout) on top of the token
    lifecycle.

    Credential checks go through :class:`UserRepository`; everything about
    tokens is delegated to :class:`TokenService`.
    """

    def __init__(self, tokens: TokenService) -> None:
        """
        :param tokens: Token lifecycle facade.
        """
        super().__init__()
        self.tokens = tokens

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> UserOut:
        """
        Create a new active user with the ``user`` role.

        :raises ConflictError: If the email is already registered.
        """
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            if repo.exists_by_email(dto.email):
                raise ConflictError("User", "email already in use")

            user = repo.model(
                email=dto.email,
                password=dto.password,  # model setter hashes
                first_name=dto.first_name,
                last_name=dto.last_name,
                role="user",
                is_active=True,
            )
            repo.add(user)
            out = self._to_user_out(user)

        logger.info("User registered", extra={"user_id": out.id})
        return out

    # ------------------------------------------------------------------ #
    # Login / logout
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> TokenPair:
        """
        Verify credentials and issue a fresh token pair.

        :raises AuthenticationError: On unknown email, wrong password or inactive user.
        :raises TokenPersistenceError: If the token metadata could not be stored.
        """
        with self.ro_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.authenticate(dto.email, dto.password)
            if user is None:
                logger.warning("Login failed", extra={"reason": "invalid_credentials"})
                raise AuthenticationError()
            identity = UserIdentity(id=user.id, email=user.email, role=user.role)

        return self.tokens.issue(identity, device_id=dto.device_id, client_id=dto.client_id)

    def logout(self, dto: LogoutIn) -> int:
        """
        Revoke the presented token, and optionally every token of its owner.

        :returns: Number of tokens revoked by the call.
        :raises TokenError: If the token is not ours or has no metadata record.
        """
        token_id = self.tokens.revoke(dto.token)
        if not dto.all_sessions:
            return 1

        owner = self.tokens.get_metadata(token_id).user_id
        # The presented token was already flipped above
        return 1 + self.tokens.revoke_all_for_user(owner)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_user(self, user_id: int) -> UserOut:
        """
        :raises NotFoundError: If the user does not exist.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return self._to_user_out(user)

    @staticmethod
    def _to_user_out(user: User) -> UserOut:
        return UserOut(
            id=user.id,
            email=user.email,
            role=user.role,
            is_active=user.is_active,
            first_name=user.first_name,
            last_name=user.last_name,
        )
