"""Application service: Deactivate User use case."""

from __future__ import annotations

import logging

from commerce.domain.exceptions import ConflictError, EntityNotFoundError
from commerce.domain.model.user import User
from commerce.domain.repository.user_repository import UserRepository

logger = logging.getLogger(__name__)


class DeactivateUserHandler:
    """Switch an active account off.

    The write only lands while the stored account is still active, so two
    concurrent deactivations cannot both succeed.
    """

    def __init__(self, user_repo: UserRepository) -> None:
        self._user_repo = user_repo

    def handle(self, user_id: str) -> User:
        user = self._user_repo.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundError("User not found")

        user.deactivate()
        if not self._user_repo.save(user, expected_active=True):
            if self._user_repo.get_by_id(user_id) is None:
                raise EntityNotFoundError("User not found")
            raise ConflictError("User was modified concurrently, please retry")

        logger.info(f"User deactivated: id={user.id} email={user.email}")
        return user
