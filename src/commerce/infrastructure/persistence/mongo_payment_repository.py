"""MongoDB implementation of PaymentRepository.

Payments live in ``payments``; refund records in ``refunds``, keyed by
``paymentId``.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from pymongo import DESCENDING

from commerce.domain.model.payment import Payment, PaymentMethod, PaymentStatus, Refund
from commerce.domain.model.value_objects import CENT, Money
from commerce.domain.repository.payment_repository import (
    PaymentQuery,
    PaymentRepository,
    PaymentStats,
)
from commerce.infrastructure.persistence.mongo import (
    MongoConnection,
    as_utc,
    count_by,
    find_page,
    object_id,
    to_decimal,
    to_decimal128,
)

logger = logging.getLogger(__name__)

PAYMENTS = "payments"
REFUNDS = "refunds"


class MongoPaymentRepository(PaymentRepository):

    def __init__(self, connection: MongoConnection) -> None:
        self._connection = connection

    @property
    def _payments(self):
        return self._connection.collection(PAYMENTS)

    @property
    def _refunds(self):
        return self._connection.collection(REFUNDS)

    def add(self, payment: Payment) -> None:
        result = self._payments.insert_one(self._to_document(payment))
        payment.id = str(result.inserted_id)

    def get_by_id(self, payment_id: str) -> Payment | None:
        oid = object_id(payment_id)
        if oid is None:
            return None
        doc = self._payments.find_one({"_id": oid})
        return self._to_domain(doc) if doc else None

    def get_latest_for_order(self, order_id: str) -> Payment | None:
        doc = self._payments.find_one(
            {"orderId": order_id},
            sort=[("createdAt", DESCENDING), ("_id", DESCENDING)],
        )
        return self._to_domain(doc) if doc else None

    def find_many(self, query: PaymentQuery) -> tuple[list[Payment], int]:
        filter_: dict[str, Any] = {}
        if query.status is not None:
            filter_["status"] = query.status.value
        if query.method is not None:
            filter_["paymentMethod"] = query.method.value
        if query.customer_id:
            filter_["customerId"] = query.customer_id
        if query.order_id:
            filter_["orderId"] = query.order_id
        docs, total = find_page(self._payments, filter_, query.paging)
        return [self._to_domain(doc) for doc in docs], total

    def update(self, payment: Payment, expected_status: PaymentStatus) -> bool:
        oid = object_id(payment.id or "")
        if oid is None:
            return False
        result = self._payments.replace_one(
            {"_id": oid, "status": expected_status.value},
            self._to_document(payment),
        )
        if result.matched_count == 0:
            logger.warning(
                f"Payment update matched nothing: id={payment.id} "
                f"expected_status={expected_status.value}"
            )
        return result.matched_count == 1

    def delete(self, payment_id: str) -> bool:
        oid = object_id(payment_id)
        if oid is None:
            return False
        return self._payments.delete_one({"_id": oid}).deleted_count > 0

    def add_refund(self, refund: Refund) -> None:
        doc = {
            "paymentId": refund.payment_id,
            "amount": to_decimal128(refund.amount.amount),
            "currency": refund.amount.currency,
            "reason": refund.reason,
            "status": refund.status.value,
            "transactionId": refund.transaction_id,
            "metadata": refund.metadata,
            "processedAt": refund.processed_at,
            "createdAt": refund.created_at,
            "updatedAt": refund.updated_at,
        }
        result = self._refunds.insert_one(doc)
        refund.id = str(result.inserted_id)

    def list_refunds(self, payment_id: str) -> list[Refund]:
        cursor = self._refunds.find({"paymentId": payment_id}).sort("createdAt", 1)
        return [
            Refund(
                id=str(doc["_id"]),
                payment_id=doc["paymentId"],
                amount=Money(to_decimal(doc["amount"]), doc.get("currency", "USD")),
                reason=doc["reason"],
                status=PaymentStatus(doc["status"]),
                transaction_id=doc.get("transactionId"),
                metadata=doc.get("metadata"),
                processed_at=as_utc(doc.get("processedAt")),
                created_at=as_utc(doc["createdAt"]),
                updated_at=as_utc(doc["updatedAt"]),
            )
            for doc in cursor
        ]

    def stats(self, customer_id: str | None = None) -> PaymentStats:
        match = {"customerId": customer_id} if customer_id else {}
        pipeline = [
            {"$match": match},
            {
                "$group": {
                    "_id": None,
                    "totalPayments": {"$sum": 1},
                    "totalAmount": {"$sum": "$amount"},
                }
            },
        ]
        rows = list(self._payments.aggregate(pipeline))
        total_payments = rows[0]["totalPayments"] if rows else 0
        total_amount = to_decimal(rows[0]["totalAmount"]) if rows else Decimal("0")
        by_status = count_by(self._payments, match, "status")
        by_method = count_by(self._payments, match, "paymentMethod")
        return PaymentStats(
            total_payments=total_payments,
            total_amount=total_amount.quantize(CENT),
            average_amount=(
                (total_amount / total_payments).quantize(CENT)
                if total_payments
                else Decimal("0")
            ),
            status_counts={s: by_status.get(s.value, 0) for s in PaymentStatus},
            method_counts={m: by_method.get(m.value, 0) for m in PaymentMethod},
        )

    @staticmethod
    def _to_document(payment: Payment) -> dict[str, Any]:
        return {
            "orderId": payment.order_id,
            "amount": to_decimal128(payment.amount.amount),
            "currency": payment.amount.currency,
            "paymentMethod": payment.method.value,
            "customerId": payment.customer_id,
            "status": payment.status.value,
            "description": payment.description,
            "transactionId": payment.transaction_id,
            "failureReason": payment.failure_reason,
            "metadata": payment.metadata,
            "processedAt": payment.processed_at,
            "createdAt": payment.created_at,
            "updatedAt": payment.updated_at,
        }

    @staticmethod
    def _to_domain(doc: dict[str, Any]) -> Payment:
        return Payment(
            id=str(doc["_id"]),
            order_id=doc["orderId"],
            amount=Money(to_decimal(doc["amount"]), doc.get("currency", "USD")),
            method=PaymentMethod(doc["paymentMethod"]),
            customer_id=doc["customerId"],
            status=PaymentStatus(doc["status"]),
            description=doc.get("description"),
            transaction_id=doc.get("transactionId"),
            failure_reason=doc.get("failureReason"),
            metadata=doc.get("metadata"),
            processed_at=as_utc(doc.get("processedAt")),
            created_at=as_utc(doc["createdAt"]),
            updated_at=as_utc(doc["updatedAt"]),
        )
