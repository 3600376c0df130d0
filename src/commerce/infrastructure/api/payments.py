"""Payment endpoints, mounted under ``/api/payments``."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from commerce.application.cancel_payment import CancelPaymentHandler
from commerce.application.create_payment import CreatePaymentHandler
from commerce.application.payment_queries import (
    ListPaymentsHandler,
    PaymentStatsHandler,
    ShowPaymentHandler,
)
from commerce.application.process_payment import ProcessPaymentHandler
from commerce.application.refund_payment import RefundPaymentHandler
from commerce.application.update_payment import UpdatePaymentHandler
from commerce.domain.service.credentials import TokenClaims
from commerce.infrastructure.api.presenters import (
    envelope,
    paged,
    payment_dict,
    payment_stats_dict,
    refund_dict,
)
from commerce.infrastructure.api.schemas import (
    CancelRequest,
    CreatePaymentRequest,
    PaymentListParams,
    RefundPaymentRequest,
    UpdatePaymentRequest,
)
from commerce.infrastructure.api.security import current_user, get_container
from commerce.infrastructure.bootstrap import Container

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("", status_code=201)
@router.post("/", status_code=201, include_in_schema=False)
def create_payment(
    body: CreatePaymentRequest,
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> JSONResponse:
    payment = CreatePaymentHandler(container.payments).handle(body.to_command(user.user_id))
    return JSONResponse(
        status_code=201,
        content=envelope(payment_dict(payment), "Payment created successfully"),
    )


@router.get("")
@router.get("/", include_in_schema=False)
def list_payments(
    request: Request,
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    params = PaymentListParams.model_validate(dict(request.query_params))
    page = ListPaymentsHandler(container.payments).handle(params.to_query(), user)
    return paged(page, payment_dict)


@router.get("/stats")
def payment_stats(
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    stats = PaymentStatsHandler(container.payments).handle(user)
    return envelope(payment_stats_dict(stats))


@router.get("/{payment_id}")
def get_payment(
    payment_id: str,
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    payment = ShowPaymentHandler(container.payments).handle(payment_id, user)
    return envelope(payment_dict(payment))


@router.put("/{payment_id}")
def update_payment(
    payment_id: str,
    body: UpdatePaymentRequest,
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    payment = UpdatePaymentHandler(container.payments).handle(
        payment_id, body.to_changes(), user
    )
    return envelope(payment_dict(payment), "Payment updated successfully")


@router.patch("/{payment_id}/cancel")
def cancel_payment(
    payment_id: str,
    body: CancelRequest | None = None,
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    reason = body.reason if body else None
    payment = CancelPaymentHandler(container.payments).handle(payment_id, reason, user)
    return envelope(payment_dict(payment), "Payment cancelled successfully")


@router.post("/{payment_id}/process")
def process_payment(
    payment_id: str,
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    payment = ProcessPaymentHandler(container.payments, container.gateway).handle(
        payment_id, user
    )
    return envelope(payment_dict(payment), "Payment processed")


@router.post("/{payment_id}/refund")
def refund_payment(
    payment_id: str,
    body: RefundPaymentRequest,
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    refund = RefundPaymentHandler(container.payments, container.gateway).handle(
        payment_id, body.to_request(), user
    )
    return envelope(refund_dict(refund), "Refund processed")


@router.get("/{payment_id}/refunds")
def list_refunds(
    payment_id: str,
    user: TokenClaims = Depends(current_user),
    container: Container = Depends(get_container),
) -> dict[str, Any]:
    refunds = ShowPaymentHandler(container.payments).refunds(payment_id, user)
    return envelope([refund_dict(r) for r in refunds])
