"""Domain port: external payment gateway.

The payment handlers never decide success or failure themselves; they ask
a ``PaymentGateway`` and record the result.  Implementations live in the
infrastructure layer (a simulated one and an HTTP client).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from commerce.domain.model.payment import Payment
from commerce.domain.model.value_objects import Money


@dataclass(frozen=True)
class GatewayResult:
    success: bool
    transaction_id: str | None = None
    failure_reason: str | None = None

    @staticmethod
    def approved(transaction_id: str) -> GatewayResult:
        return GatewayResult(success=True, transaction_id=transaction_id)

    @staticmethod
    def declined(reason: str) -> GatewayResult:
        return GatewayResult(success=False, failure_reason=reason)


class PaymentGateway(ABC):

    @abstractmethod
    def charge(self, payment: Payment) -> GatewayResult:
        """Attempt to collect ``payment.amount``.

        Repeated charges of the same payment must not collect twice.
        """

    @abstractmethod
    def refund(self, payment: Payment, amount: Money, attempt_key: str) -> GatewayResult:
        """Attempt to return ``amount`` of a completed payment.

        ``attempt_key`` identifies one refund attempt; resending the same
        key must not refund twice.
        """
