"""Abstract repository for Order aggregate.

Defined in the domain layer so the domain never depends on
infrastructure.  Concrete implementations (MongoDB, in-memory) live
elsewhere.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal

from commerce.domain.model.order import Order, OrderStatus
from commerce.domain.model.paging import PageRequest

ORDER_SORT_FIELDS = ("createdAt", "updatedAt", "total")


@dataclass(frozen=True)
class OrderQuery:
    paging: PageRequest = field(default_factory=PageRequest)
    status: OrderStatus | None = None
    customer_id: str | None = None


@dataclass(frozen=True)
class OrderStats:
    total_orders: int
    total_revenue: Decimal
    average_order_value: Decimal
    status_counts: dict[OrderStatus, int]


class OrderRepository(ABC):

    @abstractmethod
    def add(self, order: Order) -> None:
        """Persist a new order and assign its ``id``."""

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_order_number(self, order_number: str) -> Order | None:
        """Return an order by its order number, or None if not found."""

    @abstractmethod
    def find_many(self, query: OrderQuery) -> tuple[list[Order], int]:
        """Return one page of matching orders and the total match count."""

    @abstractmethod
    def update(self, order: Order, expected_status: OrderStatus) -> bool:
        """Write ``order`` only if the stored status is still ``expected_status``.

        Returns False when no document matched (missing, or changed by a
        concurrent writer).
        """

    @abstractmethod
    def delete(self, order_id: str) -> bool:
        """Remove an order; True if something was deleted."""

    @abstractmethod
    def stats(self, customer_id: str | None = None) -> OrderStats:
        """Aggregate counts and revenue, optionally for one customer."""
