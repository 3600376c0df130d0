"""Ownership rules shared by the order and payment use cases.

Admins see everything; everyone else only sees records whose customer is
themselves.
"""

from __future__ import annotations

from commerce.domain.exceptions import AuthorizationError
from commerce.domain.model.user import UserRole
from commerce.domain.service.credentials import TokenClaims


def is_admin(actor: TokenClaims) -> bool:
    return actor.role == UserRole.ADMIN.value


def scope_customer(actor: TokenClaims, requested: str | None) -> str | None:
    """Customer filter to apply for ``actor``: their own id unless admin."""
    if is_admin(actor):
        return requested
    return actor.user_id


def ensure_owner(actor: TokenClaims, customer_id: str) -> None:
    if not is_admin(actor) and customer_id != actor.user_id:
        raise AuthorizationError(
            "Access denied: You can only access your own resources"
        )
