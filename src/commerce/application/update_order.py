"""Application service: Update Order use case.

A status change is validated against the order's transition table and
written with a compare-and-swap on the previous status, so two
concurrent updates cannot both win.
"""

from __future__ import annotations

import logging

from commerce.application.access import ensure_owner
from commerce.application.create_order import to_address
from commerce.application.dto import OrderChanges
from commerce.domain.exceptions import ConflictError, EntityNotFoundError
from commerce.domain.model.order import Order
from commerce.domain.repository.order_repository import OrderRepository
from commerce.domain.service.credentials import TokenClaims

logger = logging.getLogger(__name__)


class UpdateOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        order_id: str,
        changes: OrderChanges,
        actor: TokenClaims | None = None,
    ) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError("Order not found")
        if actor is not None:
            ensure_owner(actor, order.customer_id)

        previous_status = order.status
        if changes.status is not None:
            order.transition_to(changes.status)

        order.update_details(
            notes=changes.notes,
            shipping_address=(
                to_address(changes.shipping_address)
                if changes.shipping_address is not None
                else None
            ),
        )

        if not self._order_repo.update(order, expected_status=previous_status):
            raise ConflictError("Order was modified concurrently, please retry")

        logger.info(
            f"Order updated: id={order.id} number={order.order_number} "
            f"status={order.status.value}"
        )
        return order
