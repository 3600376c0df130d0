"""User aggregate.

Holds identity, profile and account state.  The password is only ever
present as a hash produced by a ``PasswordHasher``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum

from commerce.domain.exceptions import ValidationError


class UserRole(Enum):
    USER = "user"
    ADMIN = "admin"
    MODERATOR = "moderator"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass
class User:

    id: str | None
    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: UserRole = UserRole.USER
    phone: str | None = None
    date_of_birth: date | None = None
    is_active: bool = True
    last_login_at: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @staticmethod
    def register(
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.USER,
        phone: str | None = None,
        date_of_birth: date | None = None,
    ) -> User:
        if not email or "@" not in email:
            raise ValidationError("Invalid email address")
        if not first_name or not first_name.strip():
            raise ValidationError("First name is required")
        if not last_name or not last_name.strip():
            raise ValidationError("Last name is required")
        now = _utcnow()
        return User(
            id=None,
            email=normalize_email(email),
            password_hash=password_hash,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            role=role,
            phone=phone or None,
            date_of_birth=date_of_birth,
            created_at=now,
            updated_at=now,
        )

    def deactivate(self) -> None:
        if not self.is_active:
            raise ValidationError("User account is already deactivated")
        self.is_active = False
        self.touch()

    def change_password_hash(self, password_hash: str) -> None:
        self.password_hash = password_hash
        self.touch()

    def record_login(self) -> None:
        self.last_login_at = _utcnow()

    def update_profile(
        self,
        first_name: str | None = None,
        last_name: str | None = None,
        phone: str | None = None,
        date_of_birth: date | None = None,
        is_active: bool | None = None,
    ) -> None:
        if first_name is not None:
            if not first_name.strip():
                raise ValidationError("First name is required")
            self.first_name = first_name.strip()
        if last_name is not None:
            if not last_name.strip():
                raise ValidationError("Last name is required")
            self.last_name = last_name.strip()
        if phone is not None:
            self.phone = phone
        if date_of_birth is not None:
            self.date_of_birth = date_of_birth
        if is_active is not None:
            self.is_active = is_active
        self.touch()

    def touch(self) -> None:
        self.updated_at = _utcnow()
