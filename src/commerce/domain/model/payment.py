"""Payment aggregate and the Refund records hanging off it.

Lifecycle::

    pending --claim--> processing --> completed | failed
    (any but completed/cancelled) --> cancelled
    completed --successful refund--> refunded

Gateway calls happen outside the aggregate; these methods only record
their outcome and guard the legal source states.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from commerce.domain.exceptions import ValidationError
from commerce.domain.model.value_objects import Money


class PaymentStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    BANK_TRANSFER = "bank_transfer"
    PAYPAL = "paypal"
    STRIPE = "stripe"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Payment:
    """Aggregate root for a single payment attempt against an order."""

    id: str | None
    order_id: str
    amount: Money
    method: PaymentMethod
    customer_id: str
    status: PaymentStatus = PaymentStatus.PENDING
    description: str | None = None
    transaction_id: str | None = None
    failure_reason: str | None = None
    metadata: dict[str, Any] | None = None
    processed_at: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @staticmethod
    def create(
        order_id: str,
        amount: Money,
        method: PaymentMethod,
        customer_id: str,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Payment:
        if not order_id or not order_id.strip():
            raise ValidationError("Order ID is required")
        if not customer_id or not customer_id.strip():
            raise ValidationError("Customer ID is required")
        if amount.is_zero:
            raise ValidationError("Amount must be positive")
        now = _utcnow()
        return Payment(
            id=None,
            order_id=order_id.strip(),
            amount=amount,
            method=method,
            customer_id=customer_id.strip(),
            description=description or None,
            metadata=metadata or None,
            created_at=now,
            updated_at=now,
        )

    # --- Lifecycle ------------------------------------------------------------

    @property
    def blocks_new_payment(self) -> bool:
        """A failed payment may be retried with a new one; nothing else may."""
        return self.status != PaymentStatus.FAILED

    def start_processing(self) -> None:
        if self.status != PaymentStatus.PENDING:
            raise ValidationError(f"Payment is already {self.status.value}")
        self.status = PaymentStatus.PROCESSING
        self.touch()

    def complete(self, transaction_id: str) -> None:
        self._require(PaymentStatus.PROCESSING)
        self.status = PaymentStatus.COMPLETED
        self.transaction_id = transaction_id
        self.failure_reason = None
        self.processed_at = _utcnow()
        self.touch()

    def fail(self, reason: str) -> None:
        self._require(PaymentStatus.PROCESSING)
        self.status = PaymentStatus.FAILED
        self.transaction_id = None
        self.failure_reason = reason
        self.processed_at = _utcnow()
        self.touch()

    def cancel(self, reason: str | None = None) -> None:
        if self.status == PaymentStatus.COMPLETED:
            raise ValidationError("Cannot cancel completed payment")
        if self.status == PaymentStatus.CANCELLED:
            raise ValidationError("Payment is already cancelled")
        self.status = PaymentStatus.CANCELLED
        self.failure_reason = reason or None
        self.touch()

    def refund_amount(self, requested: Money | None) -> Money:
        """Validate a refund request and return the amount to refund.

        Defaults to the full payment amount.
        """
        if self.status != PaymentStatus.COMPLETED:
            raise ValidationError("Can only refund completed payments")
        if requested is None:
            return self.amount
        if requested.currency != self.amount.currency:
            raise ValidationError(
                f"Refund currency {requested.currency} does not match payment "
                f"currency {self.amount.currency}"
            )
        if requested.is_zero:
            raise ValidationError("Refund amount must be positive")
        if requested > self.amount:
            raise ValidationError("Refund amount cannot exceed payment amount")
        return requested

    def mark_refunded(self) -> None:
        self._require(PaymentStatus.COMPLETED)
        self.status = PaymentStatus.REFUNDED
        self.touch()

    # --- Plain edits ----------------------------------------------------------

    def update_details(
        self,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        if description is not None:
            self.description = description
        if metadata is not None:
            self.metadata = metadata
        self.touch()

    def touch(self) -> None:
        self.updated_at = _utcnow()

    def _require(self, expected: PaymentStatus) -> None:
        if self.status != expected:
            raise ValidationError(
                f"Payment must be {expected.value}, current status is {self.status.value}"
            )


@dataclass
class Refund:
    """Record of one refund attempt; stored whether it succeeded or not."""

    id: str | None
    payment_id: str
    amount: Money
    reason: str
    status: PaymentStatus
    transaction_id: str | None = None
    metadata: dict[str, Any] | None = None
    processed_at: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @staticmethod
    def record(
        payment_id: str,
        amount: Money,
        reason: str,
        succeeded: bool,
        transaction_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Refund:
        if not reason or not reason.strip():
            raise ValidationError("Refund reason is required")
        now = _utcnow()
        return Refund(
            id=None,
            payment_id=payment_id,
            amount=amount,
            reason=reason.strip(),
            status=PaymentStatus.COMPLETED if succeeded else PaymentStatus.FAILED,
            transaction_id=transaction_id if succeeded else None,
            metadata=metadata or None,
            processed_at=now if succeeded else None,
            created_at=now,
            updated_at=now,
        )

    @property
    def succeeded(self) -> bool:
        return self.status == PaymentStatus.COMPLETED
