"""Application service: Create Payment use case."""

from __future__ import annotations

import logging

from commerce.application.dto import NewPayment
from commerce.domain.exceptions import ConflictError
from commerce.domain.model.payment import Payment
from commerce.domain.model.value_objects import Money
from commerce.domain.repository.payment_repository import PaymentRepository

logger = logging.getLogger(__name__)


class CreatePaymentHandler:

    def __init__(self, payment_repo: PaymentRepository) -> None:
        self._payment_repo = payment_repo

    def handle(self, new_payment: NewPayment) -> Payment:
        """Open a pending payment for an order.

        An order may only carry one live payment.  A previous payment that
        *failed* does not count, so a failed charge can be retried with a
        fresh payment.
        """
        existing = self._payment_repo.get_latest_for_order(new_payment.order_id)
        if existing is not None and existing.blocks_new_payment:
            raise ConflictError("Payment already exists for this order")

        payment = Payment.create(
            order_id=new_payment.order_id,
            amount=Money.of(new_payment.amount, new_payment.currency),
            method=new_payment.method,
            customer_id=new_payment.customer_id,
            description=new_payment.description,
            metadata=new_payment.metadata,
        )
        self._payment_repo.add(payment)

        logger.info(
            f"Payment created: id={payment.id} order={payment.order_id} "
            f"amount={payment.amount} customer={payment.customer_id}"
        )
        return payment
