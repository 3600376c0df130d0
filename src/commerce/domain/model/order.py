"""Order aggregate, the core of the domain.

The Order is an aggregate root that owns its line items, its monetary
summary and its status.  All business invariants are enforced here:
totals are computed exactly once at creation, and the status only moves
along the edges of ``ALLOWED_TRANSITIONS``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from commerce.domain.exceptions import InvalidTransitionError, ValidationError
from commerce.domain.model.references import generate_reference
from commerce.domain.model.value_objects import Address, Money, Quantity


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
TAX_RATE = Decimal("0.10")
FREE_SHIPPING_THRESHOLD = Decimal("100")
FLAT_SHIPPING_FEE = Decimal("10")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OrderLineItem:
    """A product as ordered: a price snapshot plus the quantity.

    ``total`` is the line total supplied by the caller; it feeds the
    order subtotal.
    """

    product_id: str
    name: str
    unit_price: Money
    quantity: Quantity
    total: Money

    def __post_init__(self) -> None:
        if not self.product_id or not self.product_id.strip():
            raise ValidationError("Product ID is required")
        if not self.name or not self.name.strip():
            raise ValidationError("Product name is required")
        if self.unit_price.is_zero:
            raise ValidationError("Price must be positive")
        if self.total.is_zero:
            raise ValidationError("Total must be positive")


@dataclass(frozen=True)
class OrderTotals:
    """Monetary summary of an order.

    Invariants:
    - ``subtotal`` is the sum of line totals
    - ``tax`` is ``TAX_RATE`` of the subtotal
    - ``shipping`` is zero above ``FREE_SHIPPING_THRESHOLD``, else the flat fee
    - ``total == subtotal + tax + shipping``
    """

    subtotal: Money
    tax: Money
    shipping: Money
    total: Money

    @staticmethod
    def for_items(items: list[OrderLineItem]) -> OrderTotals:
        subtotal = Money.zero(items[0].total.currency if items else "USD")
        for item in items:
            subtotal = subtotal + item.total
        tax = subtotal.percent(TAX_RATE)
        if subtotal.amount > FREE_SHIPPING_THRESHOLD:
            shipping = Money.zero(subtotal.currency)
        else:
            shipping = Money(FLAT_SHIPPING_FEE, subtotal.currency)
        return OrderTotals(
            subtotal=subtotal,
            tax=tax,
            shipping=shipping,
            total=subtotal + tax + shipping,
        )


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules and computes totals.  The ``__init__`` is intentionally
    simple so the repository can reconstitute persisted orders without
    re-validating.
    """

    id: str | None
    order_number: str
    customer_id: str
    items: list[OrderLineItem]
    totals: OrderTotals
    shipping_address: Address
    notes: str | None = None
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        customer_id: str,
        items: list[OrderLineItem],
        shipping_address: Address,
        notes: str | None = None,
        order_number: str | None = None,
    ) -> Order:
        """Create a new pending order, enforcing all invariants."""
        if not customer_id or not customer_id.strip():
            raise ValidationError("Customer ID is required")

        if not items:
            raise ValidationError("At least one item is required")

        currencies = {item.total.currency for item in items}
        if len(currencies) > 1:
            raise ValidationError("All items must use the same currency")

        now = _utcnow()
        return Order(
            id=None,
            order_number=order_number or generate_reference("ORD"),
            customer_id=customer_id.strip(),
            items=list(items),
            totals=OrderTotals.for_items(items),
            shipping_address=shipping_address,
            notes=notes or None,
            created_at=now,
            updated_at=now,
        )

    # --- State transitions ----------------------------------------------------

    def can_transition_to(self, new_status: OrderStatus) -> bool:
        return new_status in ALLOWED_TRANSITIONS[self.status]

    def transition_to(self, new_status: OrderStatus) -> None:
        """Move to ``new_status`` if the transition table allows it."""
        if not self.can_transition_to(new_status):
            raise InvalidTransitionError(self.status.value, new_status.value)
        self.status = new_status
        self.touch()

    def cancel(self, reason: str | None = None) -> None:
        """Transition any non-terminal status -> CANCELLED.

        The reason, if given, is appended to the existing notes rather
        than replacing them.
        """
        if self.status == OrderStatus.CANCELLED:
            raise ValidationError("Order is already cancelled")
        if self.status == OrderStatus.DELIVERED:
            raise ValidationError("Cannot cancel delivered order")
        self.status = OrderStatus.CANCELLED
        if reason:
            self.notes = f"{self.notes or ''}\nCancellation reason: {reason}".strip()
        self.touch()

    # --- Plain edits ----------------------------------------------------------

    def update_details(
        self,
        notes: str | None = None,
        shipping_address: Address | None = None,
    ) -> None:
        if notes is not None:
            self.notes = notes
        if shipping_address is not None:
            self.shipping_address = shipping_address
        self.touch()

    def touch(self) -> None:
        self.updated_at = _utcnow()

    # --- Computed properties --------------------------------------------------

    @property
    def subtotal(self) -> Money:
        return self.totals.subtotal

    @property
    def tax(self) -> Money:
        return self.totals.tax

    @property
    def shipping(self) -> Money:
        return self.totals.shipping

    @property
    def total(self) -> Money:
        return self.totals.total

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self.status]
