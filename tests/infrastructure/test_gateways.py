"""Tests for the simulated and HTTP payment gateways."""

import json
import random

import httpx
import pytest

from commerce.domain.model.payment import Payment, PaymentMethod
from commerce.domain.model.value_objects import Money
from commerce.infrastructure.gateway.http_gateway import HttpPaymentGateway
from commerce.infrastructure.gateway.simulated_gateway import SimulatedPaymentGateway


def _payment() -> Payment:
    payment = Payment.create("order-1", Money.of("12.34"), PaymentMethod.STRIPE, "alice")
    payment.id = "pay-1"
    return payment


class _FixedRandom(random.Random):

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self._value = value

    def random(self) -> float:
        return self._value


class TestSimulatedPaymentGateway:

    def test_approves_below_success_rate(self):
        sleeps = []
        gateway = SimulatedPaymentGateway(rng=_FixedRandom(0.5), sleep=sleeps.append)

        result = gateway.charge(_payment())

        assert result.success
        assert result.transaction_id.startswith("TXN-")
        assert sleeps == [1.0]

    def test_declines_above_success_rate(self):
        gateway = SimulatedPaymentGateway(rng=_FixedRandom(0.97), delay_seconds=0)

        assert not gateway.charge(_payment()).success
        # 0.97 is still inside the refund success rate.
        assert gateway.refund(_payment(), Money.of("1"), "refund-1").success


def _gateway(handler) -> HttpPaymentGateway:
    client = httpx.Client(base_url="http://payments.test", transport=httpx.MockTransport(handler))
    return HttpPaymentGateway(client)


class TestHttpPaymentGateway:

    def test_charge_posts_minor_units(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            seen["key"] = request.headers.get("Idempotency-Key")
            return httpx.Response(200, json={"transactionId": "ch_1", "status": "succeeded"})

        result = _gateway(handler).charge(_payment())

        assert result.success
        assert result.transaction_id == "ch_1"
        assert seen["path"] == "/v2/charges"
        assert seen["body"]["amount"] == 1234
        assert seen["body"]["referenceId"] == "pay-1"
        assert seen["key"]

    def test_402_is_a_decline_with_provider_message(self):
        def handler(request):
            return httpx.Response(
                402, json={"detail": {"errorCode": "payment_declined", "message": "Card declined."}}
            )

        result = _gateway(handler).charge(_payment())

        assert not result.success
        assert result.failure_reason == "Card declined."

    def test_server_error_is_a_failure(self):
        result = _gateway(lambda request: httpx.Response(503)).charge(_payment())
        assert not result.success
        assert "503" in result.failure_reason

    def test_timeout_is_a_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        result = _gateway(handler).refund(_payment(), Money.of("5"), "refund-1")

        assert not result.success
        assert result.failure_reason == "Payment gateway timeout"

    @pytest.mark.parametrize("body", [{}, {"transactionId": ""}])
    def test_missing_transaction_id_is_a_failure(self, body):
        result = _gateway(lambda request: httpx.Response(200, json=body)).charge(_payment())
        assert not result.success

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>ok</html>", headers={"content-type": "text/html"}),
            httpx.Response(200, json=["ch_1"]),
        ],
    )
    def test_unreadable_success_body_is_a_failure(self, response):
        result = _gateway(lambda request: response).charge(_payment())

        assert not result.success
        assert result.failure_reason == "Payment gateway returned an invalid response"

    def test_charge_key_is_stable_per_payment(self):
        keys = []

        def handler(request):
            keys.append(request.headers["Idempotency-Key"])
            return httpx.Response(200, json={"transactionId": "ch_1"})

        gateway = _gateway(handler)
        gateway.charge(_payment())
        gateway.charge(_payment())

        assert keys == ["charge-pay-1", "charge-pay-1"]

    def test_refund_sends_caller_attempt_key(self):
        keys = []

        def handler(request):
            keys.append(request.headers["Idempotency-Key"])
            return httpx.Response(200, json={"transactionId": "re_1"})

        _gateway(handler).refund(_payment(), Money.of("5"), "refund-pay-1-abc")

        assert keys == ["refund-pay-1-abc"]
