"""Application service: Cancel Payment use case."""

from __future__ import annotations

import logging

from commerce.application.access import ensure_owner
from commerce.domain.exceptions import ConflictError, EntityNotFoundError
from commerce.domain.model.payment import Payment
from commerce.domain.repository.payment_repository import PaymentRepository
from commerce.domain.service.credentials import TokenClaims

logger = logging.getLogger(__name__)


class CancelPaymentHandler:

    def __init__(self, payment_repo: PaymentRepository) -> None:
        self._payment_repo = payment_repo

    def handle(
        self,
        payment_id: str,
        reason: str | None = None,
        actor: TokenClaims | None = None,
    ) -> Payment:
        payment = self._payment_repo.get_by_id(payment_id)
        if payment is None:
            raise EntityNotFoundError("Payment not found")
        if actor is not None:
            ensure_owner(actor, payment.customer_id)

        previous_status = payment.status
        payment.cancel(reason)

        if not self._payment_repo.update(payment, expected_status=previous_status):
            raise ConflictError("Payment was modified concurrently, please retry")

        logger.info(
            f"Payment cancelled: id={payment.id} order={payment.order_id} reason={reason!r}"
        )
        return payment
