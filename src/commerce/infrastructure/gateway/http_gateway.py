"""Payment gateway backed by an external provider's REST API.

Wire contract (amounts in minor units)::

    POST /v2/charges  {amount, currency, referenceId, paymentMethod}
    POST /v2/refunds  {amount, currency, referenceId, transactionId}
    -> 2xx {"transactionId": "...", "status": "succeeded"}
    -> 402 {"detail": {"errorCode": "...", "message": "..."}}

Every request carries an ``Idempotency-Key``: ``charge-<payment id>`` for
charges, and the caller's attempt key for refunds, so a resent request is
deduplicated by the provider.  A timeout is recorded as a failure even
though the provider may have acted on the request.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

import httpx

from commerce.domain.model.payment import Payment
from commerce.domain.model.value_objects import Money
from commerce.domain.service.payment_gateway import GatewayResult, PaymentGateway

logger = logging.getLogger(__name__)


def to_minor_units(money: Money) -> int:
    return int(money.amount * Decimal(100))


class HttpPaymentGateway(PaymentGateway):

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    @classmethod
    def from_url(cls, base_url: str) -> HttpPaymentGateway:
        timeout_config = httpx.Timeout(5.0, read=8.0)
        return cls(httpx.Client(base_url=base_url, timeout=timeout_config))

    def close(self) -> None:
        self._client.close()

    def charge(self, payment: Payment) -> GatewayResult:
        payload = {
            "amount": to_minor_units(payment.amount),
            "currency": payment.amount.currency,
            "referenceId": payment.id,
            "paymentMethod": payment.method.value,
        }
        return self._post(
            "/v2/charges", payload, reference=payment.id, key=f"charge-{payment.id}"
        )

    def refund(self, payment: Payment, amount: Money, attempt_key: str) -> GatewayResult:
        payload = {
            "amount": to_minor_units(amount),
            "currency": amount.currency,
            "referenceId": payment.id,
            "transactionId": payment.transaction_id,
        }
        return self._post("/v2/refunds", payload, reference=payment.id, key=attempt_key)

    def _post(
        self,
        path: str,
        payload: dict[str, Any],
        reference: str | None,
        key: str,
    ) -> GatewayResult:
        headers = {"Idempotency-Key": key}
        try:
            response = self._client.post(path, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.TimeoutException:
            logger.error(f"[Payment: {reference}] Gateway timeout on {path}; outcome unknown")
            return GatewayResult.declined("Payment gateway timeout")
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if 400 <= status < 500:
                reason = _decline_message(e.response)
                logger.warning(f"[Payment: {reference}] Gateway declined {path}: {reason}")
                return GatewayResult.declined(reason)
            logger.error(f"[Payment: {reference}] Gateway error on {path}: {e}")
            return GatewayResult.declined(f"Payment gateway error ({status})")
        except httpx.HTTPError as e:
            logger.error(f"[Payment: {reference}] Gateway unreachable on {path}: {e}")
            return GatewayResult.declined("Payment gateway unavailable")

        try:
            body = response.json()
        except ValueError:
            logger.error(f"[Payment: {reference}] Gateway sent a non-JSON body on {path}")
            return GatewayResult.declined("Payment gateway returned an invalid response")
        if not isinstance(body, dict):
            logger.error(f"[Payment: {reference}] Gateway sent an unexpected body on {path}")
            return GatewayResult.declined("Payment gateway returned an invalid response")

        transaction_id = body.get("transactionId")
        if not transaction_id:
            logger.error(f"[Payment: {reference}] Gateway response without transactionId")
            return GatewayResult.declined("Payment gateway returned no transaction id")
        return GatewayResult.approved(str(transaction_id))


def _decline_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "Payment declined"
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, dict) and detail.get("message"):
        return str(detail["message"])
    if isinstance(detail, str) and detail:
        return detail
    return "Payment declined"
