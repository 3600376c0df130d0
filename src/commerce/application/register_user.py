"""Application service: Register User use case."""

from __future__ import annotations

import logging

from commerce.application.dto import NewUser
from commerce.domain.exceptions import ConflictError, ValidationError
from commerce.domain.model.user import User
from commerce.domain.repository.user_repository import UserRepository
from commerce.domain.service.credentials import PasswordHasher, password_violations

logger = logging.getLogger(__name__)


def check_password_strength(password: str) -> None:
    """Raise a single ValidationError listing every broken password rule."""
    violations = password_violations(password)
    if violations:
        raise ValidationError(f"Password validation failed: {', '.join(violations)}")


class RegisterUserHandler:

    def __init__(self, user_repo: UserRepository, hasher: PasswordHasher) -> None:
        self._user_repo = user_repo
        self._hasher = hasher

    def handle(self, new_user: NewUser) -> User:
        if self._user_repo.get_by_email(new_user.email) is not None:
            raise ConflictError("User with this email already exists")

        check_password_strength(new_user.password)

        user = User.register(
            email=new_user.email,
            password_hash=self._hasher.hash(new_user.password),
            first_name=new_user.first_name,
            last_name=new_user.last_name,
            role=new_user.role,
            phone=new_user.phone,
            date_of_birth=new_user.date_of_birth,
        )
        self._user_repo.add(user)

        logger.info(f"User registered: id={user.id} email={user.email} role={user.role.value}")
        return user
