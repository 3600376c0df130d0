"""bcrypt implementation of PasswordHasher."""

from __future__ import annotations

import logging

import bcrypt

from commerce.domain.service.credentials import PasswordHasher

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 12


class BcryptPasswordHasher(PasswordHasher):

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError as e:
            logger.error(f"Password verification failed: {e}")
            return False
