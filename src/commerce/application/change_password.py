"""Application service: Change Password use case."""

from __future__ import annotations

import logging

from commerce.application.register_user import check_password_strength
from commerce.domain.exceptions import EntityNotFoundError, ValidationError
from commerce.domain.repository.user_repository import UserRepository
from commerce.domain.service.credentials import PasswordHasher

logger = logging.getLogger(__name__)


class ChangePasswordHandler:

    def __init__(self, user_repo: UserRepository, hasher: PasswordHasher) -> None:
        self._user_repo = user_repo
        self._hasher = hasher

    def handle(self, user_id: str, current_password: str, new_password: str) -> None:
        user = self._user_repo.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundError("User not found")
        if not self._hasher.verify(current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")

        check_password_strength(new_password)

        user.change_password_hash(self._hasher.hash(new_password))
        if not self._user_repo.save(user):
            raise EntityNotFoundError("User not found")

        logger.info(f"Password changed: user={user.id}")
