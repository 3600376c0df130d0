"""Order endpoints, mounted under ``/api/orders``."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from commerce.application.cancel_order import CancelOrderHandler
from commerce.application.create_order import CreateOrderHandler
from commerce.application.order_queries import (
    ListOrdersHandler,
    OrderStatsHandler,
    ShowOrderHandler,
)
from commerce.application.update_order import UpdateOrderHandler
from commerce.domain.service.credentials import TokenClaims
from commerce.infrastructure.api.presenters import (
    envelope,
    order_dict,
    order_stats_dict,
    paged,
)
from commerce.infrastructure.api.schemas import (
    CancelRequest,
    CreateOrderRequest,
    OrderListParams,
    UpdateOrderRequest,
)
from commerce.infrastructure.api.security import current_user, get_container
from commerce.infrastructure.bootstrap import Container

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", status_code=201)
@router.post("/", status_code=201, include_in_schema=False)
def create_order(
    body: CreateOrderRequest,
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> JSONResponse:
    order = CreateOrderHandler(container.orders).handle(body.to_command(user.user_id))
    return JSONResponse(
        status_code=201,
        content=envelope(order_dict(order), "Order created successfully"),
    )


@router.get("")
@router.get("/", include_in_schema=False)
def list_orders(
    request: Request,
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    params = OrderListParams.model_validate(dict(request.query_params))
    page = ListOrdersHandler(container.orders).handle(params.to_query(), user)
    return paged(page, order_dict)


@router.get("/stats")
def order_stats(
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    stats = OrderStatsHandler(container.orders).handle(user)
    return envelope(order_stats_dict(stats))


@router.get("/number/{order_number}")
def get_order_by_number(
    order_number: str,
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    order = ShowOrderHandler(container.orders).by_number(order_number, user)
    return envelope(order_dict(order))


@router.get("/{order_id}")
def get_order(
    order_id: str,
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    order = ShowOrderHandler(container.orders).handle(order_id, user)
    return envelope(order_dict(order))


@router.put("/{order_id}")
def update_order(
    order_id: str,
    body: UpdateOrderRequest,
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    order = UpdateOrderHandler(container.orders).handle(order_id, body.to_changes(), user)
    return envelope(order_dict(order), "Order updated successfully")


@router.patch("/{order_id}/cancel")
def cancel_order(
    order_id: str,
    body: CancelRequest | None = None,
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    reason = body.reason if body else None
    order = CancelOrderHandler(container.orders).handle(order_id, reason, user)
    return envelope(order_dict(order), "Order cancelled successfully")
