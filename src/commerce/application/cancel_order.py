"""Application service: Cancel Order use case.

Cancellation is its own operation rather than a generic status update:
it is allowed from every non-terminal status except DELIVERED, and the
reason is appended to the order notes.
"""

from __future__ import annotations

import logging

from commerce.application.access import ensure_owner
from commerce.domain.exceptions import ConflictError, EntityNotFoundError
from commerce.domain.model.order import Order
from commerce.domain.repository.order_repository import OrderRepository
from commerce.domain.service.credentials import TokenClaims

logger = logging.getLogger(__name__)


class CancelOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        order_id: str,
        reason: str | None = None,
        actor: TokenClaims | None = None,
    ) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError("Order not found")
        if actor is not None:
            ensure_owner(actor, order.customer_id)

        previous_status = order.status
        order.cancel(reason)

        if not self._order_repo.update(order, expected_status=previous_status):
            raise ConflictError("Order was modified concurrently, please retry")

        logger.info(
            f"Order cancelled: id={order.id} number={order.order_number} reason={reason!r}"
        )
        return order
