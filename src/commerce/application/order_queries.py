"""Application services: read-only Order use cases."""

from __future__ import annotations

from commerce.application.access import ensure_owner, scope_customer
from commerce.domain.exceptions import EntityNotFoundError
from commerce.domain.model.order import Order
from commerce.domain.model.paging import Page
from commerce.domain.repository.order_repository import (
    OrderQuery,
    OrderRepository,
    OrderStats,
)
from commerce.domain.service.credentials import TokenClaims


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: str, actor: TokenClaims | None = None) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError("Order not found")
        if actor is not None:
            ensure_owner(actor, order.customer_id)
        return order

    def by_number(self, order_number: str, actor: TokenClaims | None = None) -> Order:
        order = self._order_repo.get_by_order_number(order_number)
        if order is None:
            raise EntityNotFoundError("Order not found")
        if actor is not None:
            ensure_owner(actor, order.customer_id)
        return order


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, query: OrderQuery, actor: TokenClaims) -> Page[Order]:
        scoped = OrderQuery(
            paging=query.paging,
            status=query.status,
            customer_id=scope_customer(actor, query.customer_id),
        )
        orders, total = self._order_repo.find_many(scoped)
        return Page.of(orders, total, scoped.paging)


class OrderStatsHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, actor: TokenClaims, customer_id: str | None = None) -> OrderStats:
        return self._order_repo.stats(scope_customer(actor, customer_id))
