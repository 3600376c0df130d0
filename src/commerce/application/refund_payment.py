"""Application service: Refund Payment use case.

Only a completed payment can be refunded, and never for more than it
collected.  Every attempt leaves a Refund record; only a successful one
moves the payment to REFUNDED.  A failed attempt leaves the payment
COMPLETED, so the caller may try again.
"""

from __future__ import annotations

import logging
import uuid

from commerce.application.access import ensure_owner
from commerce.application.dto import RefundRequest
from commerce.domain.exceptions import ConflictError, EntityNotFoundError, ValidationError
from commerce.domain.model.payment import PaymentStatus, Refund
from commerce.domain.model.value_objects import Money
from commerce.domain.repository.payment_repository import PaymentRepository
from commerce.domain.service.credentials import TokenClaims
from commerce.domain.service.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


class RefundPaymentHandler:

    def __init__(self, payment_repo: PaymentRepository, gateway: PaymentGateway) -> None:
        self._payment_repo = payment_repo
        self._gateway = gateway

    def handle(
        self,
        payment_id: str,
        request: RefundRequest,
        actor: TokenClaims | None = None,
    ) -> Refund:
        payment = self._payment_repo.get_by_id(payment_id)
        if payment is None:
            raise EntityNotFoundError("Payment not found")
        if actor is not None:
            ensure_owner(actor, payment.customer_id)

        if not request.reason or not request.reason.strip():
            raise ValidationError("Refund reason is required")
        requested = (
            Money.of(request.amount, payment.amount.currency)
            if request.amount is not None
            else None
        )
        amount = payment.refund_amount(requested)

        attempt_key = f"refund-{payment.id}-{uuid.uuid4().hex}"
        result = self._gateway.refund(payment, amount, attempt_key)
        refund = Refund.record(
            payment_id=payment.id or payment_id,
            amount=amount,
            reason=request.reason,
            succeeded=result.success,
            transaction_id=result.transaction_id,
            metadata=request.metadata,
        )
        self._payment_repo.add_refund(refund)

        if refund.succeeded:
            payment.mark_refunded()
            if not self._payment_repo.update(payment, expected_status=PaymentStatus.COMPLETED):
                logger.error(
                    f"Refund {refund.id} succeeded but payment {payment.id} was no longer "
                    f"completed; payment status left unchanged"
                )
                raise ConflictError("Payment was modified concurrently, please retry")
        else:
            logger.warning(
                f"Refund declined: payment={payment.id} amount={amount} "
                f"reason={result.failure_reason!r}"
            )

        logger.info(
            f"Refund processed: id={refund.id} payment={payment.id} "
            f"amount={amount} status={refund.status.value}"
        )
        return refund
