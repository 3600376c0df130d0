"""Application service: Create Order use case.

Turns validated client input into value objects and lets the Order
aggregate compute totals and enforce its rules.
"""

from __future__ import annotations

import logging

from commerce.application.dto import AddressSpec, NewOrder, OrderItemSpec
from commerce.domain.model.order import Order, OrderLineItem
from commerce.domain.model.value_objects import Address, Money, Quantity
from commerce.domain.repository.order_repository import OrderRepository

logger = logging.getLogger(__name__)


def to_address(spec: AddressSpec) -> Address:
    return Address(
        street=spec.street,
        city=spec.city,
        state=spec.state,
        zip_code=spec.zip_code,
        country=spec.country,
    )


def to_line_item(spec: OrderItemSpec) -> OrderLineItem:
    return OrderLineItem(
        product_id=spec.product_id,
        name=spec.name,
        unit_price=Money.of(spec.price),
        quantity=Quantity(spec.quantity),
        total=Money.of(spec.total),
    )


class CreateOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, new_order: NewOrder) -> Order:
        """Create a new pending order.

        Steps:
        1. Build line items and the address (value objects validate).
        2. Let the Order aggregate compute subtotal, tax, shipping, total.
        3. Persist and return the stored order.
        """
        order = Order.create(
            customer_id=new_order.customer_id,
            items=[to_line_item(spec) for spec in new_order.items],
            shipping_address=to_address(new_order.shipping_address),
            notes=new_order.notes,
        )
        self._order_repo.add(order)

        logger.info(
            f"Order created: id={order.id} number={order.order_number} "
            f"customer={order.customer_id} total={order.total}"
        )
        return order
