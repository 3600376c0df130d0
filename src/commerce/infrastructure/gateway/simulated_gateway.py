"""In-process payment gateway that approves most requests.

Stands in for a real provider in development and demos.  The outcome is
drawn from an injectable ``random.Random`` so it can be made
deterministic.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable

from commerce.domain.model.payment import Payment
from commerce.domain.model.references import generate_reference
from commerce.domain.model.value_objects import Money
from commerce.domain.service.payment_gateway import GatewayResult, PaymentGateway

logger = logging.getLogger(__name__)

CHARGE_SUCCESS_RATE = 0.95
REFUND_SUCCESS_RATE = 0.98
DEFAULT_DELAY_SECONDS = 1.0


class SimulatedPaymentGateway(PaymentGateway):

    def __init__(
        self,
        charge_success_rate: float = CHARGE_SUCCESS_RATE,
        refund_success_rate: float = REFUND_SUCCESS_RATE,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._charge_success_rate = charge_success_rate
        self._refund_success_rate = refund_success_rate
        self._delay_seconds = delay_seconds
        self._rng = rng or random.Random()
        self._sleep = sleep

    def charge(self, payment: Payment) -> GatewayResult:
        if self._attempt(self._charge_success_rate):
            return GatewayResult.approved(generate_reference("TXN", self._rng))
        logger.info(f"Simulated charge declined: payment={payment.id} amount={payment.amount}")
        return GatewayResult.declined("Payment processing failed")

    def refund(self, payment: Payment, amount: Money, attempt_key: str) -> GatewayResult:
        if self._attempt(self._refund_success_rate):
            return GatewayResult.approved(generate_reference("TXN", self._rng))
        logger.info(f"Simulated refund declined: payment={payment.id} amount={amount}")
        return GatewayResult.declined("Refund processing failed")

    def _attempt(self, success_rate: float) -> bool:
        if self._delay_seconds > 0:
            self._sleep(self._delay_seconds)
        return self._rng.random() < success_rate
