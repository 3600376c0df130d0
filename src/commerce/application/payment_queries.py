"""Application services: read-only Payment use cases."""

from __future__ import annotations

from commerce.application.access import ensure_owner, scope_customer
from commerce.domain.exceptions import EntityNotFoundError
from commerce.domain.model.paging import Page
from commerce.domain.model.payment import Payment, Refund
from commerce.domain.repository.payment_repository import (
    PaymentQuery,
    PaymentRepository,
    PaymentStats,
)
from commerce.domain.service.credentials import TokenClaims


class ShowPaymentHandler:

    def __init__(self, payment_repo: PaymentRepository) -> None:
        self._payment_repo = payment_repo

    def handle(self, payment_id: str, actor: TokenClaims | None = None) -> Payment:
        payment = self._payment_repo.get_by_id(payment_id)
        if payment is None:
            raise EntityNotFoundError("Payment not found")
        if actor is not None:
            ensure_owner(actor, payment.customer_id)
        return payment

    def refunds(self, payment_id: str, actor: TokenClaims | None = None) -> list[Refund]:
        payment = self.handle(payment_id, actor)
        return self._payment_repo.list_refunds(payment.id or payment_id)


class ListPaymentsHandler:

    def __init__(self, payment_repo: PaymentRepository) -> None:
        self._payment_repo = payment_repo

    def handle(self, query: PaymentQuery, actor: TokenClaims) -> Page[Payment]:
        scoped = PaymentQuery(
            paging=query.paging,
            status=query.status,
            method=query.method,
            customer_id=scope_customer(actor, query.customer_id),
            order_id=query.order_id,
        )
        payments, total = self._payment_repo.find_many(scoped)
        return Page.of(payments, total, scoped.paging)


class PaymentStatsHandler:

    def __init__(self, payment_repo: PaymentRepository) -> None:
        self._payment_repo = payment_repo

    def handle(self, actor: TokenClaims, customer_id: str | None = None) -> PaymentStats:
        return self._payment_repo.stats(scope_customer(actor, customer_id))
