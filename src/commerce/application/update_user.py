"""Application service: Update User use case.

Users edit their own profile; admins may edit anyone, including the
``is_active`` flag.
"""

from __future__ import annotations

import logging

from commerce.application.dto import UserChanges
from commerce.domain.exceptions import EntityNotFoundError
from commerce.domain.model.user import User
from commerce.domain.repository.user_repository import UserRepository

logger = logging.getLogger(__name__)


class UpdateUserHandler:

    def __init__(self, user_repo: UserRepository) -> None:
        self._user_repo = user_repo

    def handle(self, user_id: str, changes: UserChanges, allow_status: bool = False) -> User:
        user = self._user_repo.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundError("User not found")

        user.update_profile(
            first_name=changes.first_name,
            last_name=changes.last_name,
            phone=changes.phone,
            date_of_birth=changes.date_of_birth,
            is_active=changes.is_active if allow_status else None,
        )
        if not self._user_repo.save(user):
            raise EntityNotFoundError("User not found")

        logger.info(f"User updated: id={user.id}")
        return user
