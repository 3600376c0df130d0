"""User endpoints, mounted under ``/api/users``.

``/register`` and ``/login`` are public; the profile routes act on the
caller; everything else is admin-only.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from commerce.application.change_password import ChangePasswordHandler
from commerce.application.deactivate_user import DeactivateUserHandler
from commerce.application.login_user import LoginUserHandler
from commerce.application.register_user import RegisterUserHandler
from commerce.application.update_user import UpdateUserHandler
from commerce.application.user_queries import ListUsersHandler, ShowUserHandler, UserStatsHandler
from commerce.domain.service.credentials import TokenClaims
from commerce.infrastructure.api.presenters import envelope, paged, user_dict, user_stats_dict
from commerce.infrastructure.api.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    UpdateUserRequest,
    UserListParams,
)
from commerce.infrastructure.api.security import current_user, get_container, require_admin
from commerce.infrastructure.bootstrap import Container

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("/register", status_code=201)
def register(
    body: RegisterRequest,
    container: Container = Depends(get_container),
) -> JSONResponse:
    user = RegisterUserHandler(container.users, container.hasher).handle(body.to_command())
    return JSONResponse(
        status_code=201,
        content=envelope(user_dict(user), "User registered successfully"),
    )


@router.post("/login")
def login(
    body: LoginRequest,
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    result = LoginUserHandler(container.users, container.hasher, container.tokens).handle(
        body.email, body.password
    )
    return envelope(
        {
            "user": user_dict(result.user),
            "token": result.token,
            "expiresIn": result.expires_in,
        },
        "Login successful",
    )


@router.get("/profile")
def get_profile(
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    return envelope(user_dict(ShowUserHandler(container.users).handle(user.user_id)))


@router.put("/profile")
def update_profile(
    body: UpdateUserRequest,
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    updated = UpdateUserHandler(container.users).handle(user.user_id, body.to_changes())
    return envelope(user_dict(updated), "Profile updated successfully")


@router.put("/change-password")
def change_password(
    body: ChangePasswordRequest,
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    ChangePasswordHandler(container.users, container.hasher).handle(
        user.user_id, body.current_password, body.new_password
    )
    return envelope(message="Password changed successfully")


@router.patch("/deactivate")
def deactivate(
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    DeactivateUserHandler(container.users).handle(user.user_id)
    return envelope(message="Account deactivated successfully")


@router.get("")
@router.get("/", include_in_schema=False)
def list_users(
    request: Request,
    admin: TokenClaims = Depends(require_admin),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    params = UserListParams.model_validate(dict(request.query_params))
    return paged(ListUsersHandler(container.users).handle(params.to_query()), user_dict)


@router.get("/stats")
def user_stats(
    admin: TokenClaims = Depends(require_admin),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    return envelope(user_stats_dict(UserStatsHandler(container.users).handle()))


@router.get("/{user_id}")
def get_user(
    user_id: str,
    admin: TokenClaims = Depends(require_admin),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    return envelope(user_dict(ShowUserHandler(container.users).handle(user_id)))


@router.put("/{user_id}")
def update_user(
    user_id: str,
    body: UpdateUserRequest,
    admin: TokenClaims = Depends(require_admin),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    updated = UpdateUserHandler(container.users).handle(
        user_id, body.to_changes(), allow_status=True
    )
    return envelope(user_dict(updated), "User updated successfully")
