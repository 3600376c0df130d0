"""Abstract repository for User aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from commerce.domain.model.paging import PageRequest
from commerce.domain.model.user import User, UserRole

USER_SORT_FIELDS = ("createdAt", "updatedAt", "firstName", "lastName", "email")


@dataclass(frozen=True)
class UserQuery:
    paging: PageRequest = field(default_factory=PageRequest)
    role: UserRole | None = None
    is_active: bool | None = None
    search: str | None = None


@dataclass(frozen=True)
class UserStats:
    total_users: int
    active_users: int
    inactive_users: int
    role_counts: dict[UserRole, int]


class UserRepository(ABC):

    @abstractmethod
    def add(self, user: User) -> None:
        """Persist a new user and assign its ``id``."""

    @abstractmethod
    def get_by_id(self, user_id: str) -> User | None:
        """Return a user by ID, or None."""

    @abstractmethod
    def get_by_email(self, email: str) -> User | None:
        """Return a user by email (case-insensitive), or None."""

    @abstractmethod
    def find_many(self, query: UserQuery) -> tuple[list[User], int]:
        """Return one page of matching users and the total match count."""

    @abstractmethod
    def save(self, user: User, expected_active: bool | None = None) -> bool:
        """Overwrite a stored user; False if it no longer exists.

        With ``expected_active`` the write only lands while the stored
        active flag still equals it, and False is returned otherwise.
        """

    @abstractmethod
    def record_login(self, user: User) -> None:
        """Persist only the last-login timestamp."""

    @abstractmethod
    def delete(self, user_id: str) -> bool:
        """Remove a user; True if something was deleted."""

    @abstractmethod
    def stats(self) -> UserStats:
        """Aggregate account counts per state and role."""
