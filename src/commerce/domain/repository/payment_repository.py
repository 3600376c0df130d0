"""Abstract repository for Payment aggregate and its Refund records."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal

from commerce.domain.model.paging import PageRequest
from commerce.domain.model.payment import Payment, PaymentMethod, PaymentStatus, Refund

PAYMENT_SORT_FIELDS = ("createdAt", "updatedAt", "amount")


@dataclass(frozen=True)
class PaymentQuery:
    paging: PageRequest = field(default_factory=PageRequest)
    status: PaymentStatus | None = None
    method: PaymentMethod | None = None
    customer_id: str | None = None
    order_id: str | None = None


@dataclass(frozen=True)
class PaymentStats:
    total_payments: int
    total_amount: Decimal
    average_amount: Decimal
    status_counts: dict[PaymentStatus, int]
    method_counts: dict[PaymentMethod, int]


class PaymentRepository(ABC):

    @abstractmethod
    def add(self, payment: Payment) -> None:
        """Persist a new payment and assign its ``id``."""

    @abstractmethod
    def get_by_id(self, payment_id: str) -> Payment | None:
        """Return a payment by its ID, or None if not found."""

    @abstractmethod
    def get_latest_for_order(self, order_id: str) -> Payment | None:
        """Return the most recently created payment for an order, or None."""

    @abstractmethod
    def find_many(self, query: PaymentQuery) -> tuple[list[Payment], int]:
        """Return one page of matching payments and the total match count."""

    @abstractmethod
    def update(self, payment: Payment, expected_status: PaymentStatus) -> bool:
        """Write ``payment`` only if the stored status is still ``expected_status``."""

    @abstractmethod
    def delete(self, payment_id: str) -> bool:
        """Remove a payment; True if something was deleted."""

    @abstractmethod
    def add_refund(self, refund: Refund) -> None:
        """Persist a refund record and assign its ``id``."""

    @abstractmethod
    def list_refunds(self, payment_id: str) -> list[Refund]:
        """Return every refund recorded against a payment, oldest first."""

    @abstractmethod
    def stats(self, customer_id: str | None = None) -> PaymentStats:
        """Aggregate counts and amounts, optionally for one customer."""
