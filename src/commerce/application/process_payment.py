"""Application service: Process Payment use case.

Two compare-and-swap writes bracket the gateway call:

1. claim the payment (``pending -> processing``); a concurrent caller
   that loses this race gets a conflict and never reaches the gateway;
2. record the outcome (``processing -> completed | failed``).

A gateway that raises counts as a failed charge, so a claimed payment
always leaves PROCESSING.
"""

from __future__ import annotations

import logging

from commerce.application.access import ensure_owner
from commerce.domain.exceptions import ConflictError, EntityNotFoundError
from commerce.domain.model.payment import Payment, PaymentStatus
from commerce.domain.repository.payment_repository import PaymentRepository
from commerce.domain.service.credentials import TokenClaims
from commerce.domain.service.payment_gateway import GatewayResult, PaymentGateway

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_REASON = "Payment processing failed"


class ProcessPaymentHandler:

    def __init__(self, payment_repo: PaymentRepository, gateway: PaymentGateway) -> None:
        self._payment_repo = payment_repo
        self._gateway = gateway

    def handle(self, payment_id: str, actor: TokenClaims | None = None) -> Payment:
        payment = self._payment_repo.get_by_id(payment_id)
        if payment is None:
            raise EntityNotFoundError("Payment not found")
        if actor is not None:
            ensure_owner(actor, payment.customer_id)

        payment.start_processing()
        if not self._payment_repo.update(payment, expected_status=PaymentStatus.PENDING):
            raise ConflictError("Payment was modified concurrently, please retry")

        try:
            result = self._gateway.charge(payment)
        except Exception:
            logger.exception(f"Gateway charge raised for payment {payment.id}")
            result = GatewayResult.declined(DEFAULT_FAILURE_REASON)

        if result.success:
            payment.complete(result.transaction_id or "")
        else:
            payment.fail(result.failure_reason or DEFAULT_FAILURE_REASON)

        if not self._payment_repo.update(payment, expected_status=PaymentStatus.PROCESSING):
            logger.error(
                f"Payment {payment.id} changed while the gateway call was in flight; "
                f"gateway outcome success={result.success} "
                f"transaction={result.transaction_id} was not recorded"
            )
            raise ConflictError("Payment was modified concurrently, please retry")

        logger.info(
            f"Payment processed: id={payment.id} order={payment.order_id} "
            f"status={payment.status.value} transaction={payment.transaction_id}"
        )
        return payment
