"""Application services: read-only User use cases."""

from __future__ import annotations

from commerce.domain.exceptions import EntityNotFoundError
from commerce.domain.model.paging import Page
from commerce.domain.model.user import User
from commerce.domain.repository.user_repository import UserQuery, UserRepository, UserStats


class ShowUserHandler:

    def __init__(self, user_repo: UserRepository) -> None:
        self._user_repo = user_repo

    def handle(self, user_id: str) -> User:
        user = self._user_repo.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundError("User not found")
        return user


class ListUsersHandler:

    def __init__(self, user_repo: UserRepository) -> None:
        self._user_repo = user_repo

    def handle(self, query: UserQuery) -> Page[User]:
        users, total = self._user_repo.find_many(query)
        return Page.of(users, total, query.paging)


class UserStatsHandler:

    def __init__(self, user_repo: UserRepository) -> None:
        self._user_repo = user_repo

    def handle(self) -> UserStats:
        return self._user_repo.stats()
