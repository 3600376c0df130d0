"""Domain ports for credentials, plus the password strength policy.

Hashing and token signing are infrastructure concerns (bcrypt, JWT); the
domain only needs to know their contracts.  The strength policy is a
business rule and lives here.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

MIN_PASSWORD_LENGTH = 8

_PASSWORD_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"\d"), "Password must contain at least one number"),
    (
        re.compile(r"[!@#$%^&*(),.?\":{}|<>]"),
        "Password must contain at least one special character",
    ),
]


def password_violations(password: str) -> list[str]:
    """Return every rule the password breaks, in a stable order."""
    errors: list[str] = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    for pattern, message in _PASSWORD_RULES:
        if not pattern.search(password):
            errors.append(message)
    return errors


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried inside a session token."""

    user_id: str
    email: str
    role: str


class PasswordHasher(ABC):

    @abstractmethod
    def hash(self, password: str) -> str:
        """Return a salted one-way hash of ``password``."""

    @abstractmethod
    def verify(self, password: str, password_hash: str) -> bool:
        """True if ``password`` matches ``password_hash``."""


class TokenService(ABC):

    @property
    @abstractmethod
    def expires_in(self) -> str:
        """Human-readable lifetime of issued tokens, e.g. ``7d``."""

    @abstractmethod
    def issue(self, claims: TokenClaims) -> str:
        """Sign a new session token for ``claims``."""

    @abstractmethod
    def verify(self, token: str) -> TokenClaims:
        """Decode a token; raises AuthenticationError if invalid or expired."""
