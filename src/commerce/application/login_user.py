"""Application service: Login use case."""

from __future__ import annotations

import logging

from commerce.application.dto import LoginResult
from commerce.domain.exceptions import AuthenticationError
from commerce.domain.repository.user_repository import UserRepository
from commerce.domain.service.credentials import PasswordHasher, TokenClaims, TokenService

logger = logging.getLogger(__name__)


class LoginUserHandler:

    def __init__(
        self,
        user_repo: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenService,
    ) -> None:
        self._user_repo = user_repo
        self._hasher = hasher
        self._tokens = tokens

    def handle(self, email: str, password: str) -> LoginResult:
        """Authenticate by email and password and issue a session token.

        Unknown email and wrong password produce the same error so the
        response does not reveal which accounts exist.  A deactivated
        account is reported as such before the password is checked.
        """
        user = self._user_repo.get_by_email(email)
        if user is None:
            logger.warning(f"Failed login attempt for {email!r}")
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            logger.warning(f"Login attempt for deactivated account {email!r}")
            raise AuthenticationError("Account is deactivated")
        if not self._hasher.verify(password, user.password_hash):
            logger.warning(f"Failed login attempt for {email!r}")
            raise AuthenticationError("Invalid email or password")

        user.record_login()
        self._user_repo.record_login(user)

        token = self._tokens.issue(
            TokenClaims(user_id=user.id or "", email=user.email, role=user.role.value)
        )
        logger.info(f"User logged in: id={user.id} email={user.email}")
        return LoginResult(user=user, token=token, expires_in=self._tokens.expires_in)
