"""FastAPI dependencies: the container and the authenticated caller."""

from __future__ import annotations

import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from commerce.domain.exceptions import AuthenticationError, AuthorizationError
from commerce.domain.model.user import UserRole
from commerce.domain.service.credentials import TokenClaims
from commerce.infrastructure.bootstrap import Container

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_container(request: Request) -> Container:
    return request.app.state.container


def current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    container: Container = Depends(get_container),
) -> TokenClaims:
    """Validate the bearer token and return its claims."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token provided")
    claims = container.tokens.verify(credentials.credentials)
    logger.debug(
        f"User authenticated: user={claims.user_id} {request.method} {request.url.path}"
    )
    return claims


def require_admin(user: TokenClaims = Depends(current_user)) -> TokenClaims:
    if user.role != UserRole.ADMIN.value:
        raise AuthorizationError("Insufficient permissions")
    return user
