"""Response shaping: domain objects to JSON-ready dicts, and the envelope."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from commerce.domain.model.order import Order
from commerce.domain.model.paging import Page
from commerce.domain.model.payment import Payment, Refund
from commerce.domain.model.user import User
from commerce.domain.repository.order_repository import OrderStats
from commerce.domain.repository.payment_repository import PaymentStats
from commerce.domain.repository.user_repository import UserStats


def envelope(
    data: Any = None,
    message: str | None = None,
    pagination: dict[str, int] | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    if pagination is not None:
        body["pagination"] = pagination
    return body


def paged(page: Page, present) -> dict[str, Any]:
    return envelope(
        data=[present(item) for item in page.items],
        pagination={
            "page": page.page,
            "limit": page.limit,
            "total": page.total,
            "totalPages": page.total_pages,
        },
    )


def _number(value: Decimal) -> float:
    return float(value)


def _timestamp(value: datetime | date | None) -> str | None:
    return value.isoformat() if value is not None else None


def order_dict(order: Order) -> dict[str, Any]:
    address = order.shipping_address
    return {
        "id": order.id,
        "orderNumber": order.order_number,
        "customerId": order.customer_id,
        "items": [
            {
                "productId": item.product_id,
                "name": item.name,
                "price": _number(item.unit_price.amount),
                "quantity": item.quantity.value,
                "total": _number(item.total.amount),
            }
            for item in order.items
        ],
        "status": order.status.value,
        "currency": order.total.currency,
        "subtotal": _number(order.subtotal.amount),
        "tax": _number(order.tax.amount),
        "shipping": _number(order.shipping.amount),
        "total": _number(order.total.amount),
        "shippingAddress": {
            "street": address.street,
            "city": address.city,
            "state": address.state,
            "zipCode": address.zip_code,
            "country": address.country,
        },
        "notes": order.notes,
        "createdAt": _timestamp(order.created_at),
        "updatedAt": _timestamp(order.updated_at),
    }


def order_stats_dict(stats: OrderStats) -> dict[str, Any]:
    return {
        "totalOrders": stats.total_orders,
        "totalRevenue": _number(stats.total_revenue),
        "averageOrderValue": _number(stats.average_order_value),
        "statusCounts": {s.value: n for s, n in stats.status_counts.items()},
    }


def payment_dict(payment: Payment) -> dict[str, Any]:
    return {
        "id": payment.id,
        "orderId": payment.order_id,
        "amount": _number(payment.amount.amount),
        "currency": payment.amount.currency,
        "paymentMethod": payment.method.value,
        "status": payment.status.value,
        "customerId": payment.customer_id,
        "description": payment.description,
        "transactionId": payment.transaction_id,
        "failureReason": payment.failure_reason,
        "metadata": payment.metadata,
        "processedAt": _timestamp(payment.processed_at),
        "createdAt": _timestamp(payment.created_at),
        "updatedAt": _timestamp(payment.updated_at),
    }


def refund_dict(refund: Refund) -> dict[str, Any]:
    return {
        "id": refund.id,
        "paymentId": refund.payment_id,
        "amount": _number(refund.amount.amount),
        "currency": refund.amount.currency,
        "reason": refund.reason,
        "status": refund.status.value,
        "transactionId": refund.transaction_id,
        "metadata": refund.metadata,
        "processedAt": _timestamp(refund.processed_at),
        "createdAt": _timestamp(refund.created_at),
        "updatedAt": _timestamp(refund.updated_at),
    }


def payment_stats_dict(stats: PaymentStats) -> dict[str, Any]:
    return {
        "totalPayments": stats.total_payments,
        "totalAmount": _number(stats.total_amount),
        "averageAmount": _number(stats.average_amount),
        "statusCounts": {s.value: n for s, n in stats.status_counts.items()},
        "methodCounts": {m.value: n for m, n in stats.method_counts.items()},
    }


def user_dict(user: User) -> dict[str, Any]:
    """Public view of a user; the password hash never leaves the service."""
    return {
        "id": user.id,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "role": user.role.value,
        "phone": user.phone,
        "dateOfBirth": _timestamp(user.date_of_birth),
        "isActive": user.is_active,
        "lastLoginAt": _timestamp(user.last_login_at),
        "createdAt": _timestamp(user.created_at),
        "updatedAt": _timestamp(user.updated_at),
    }


def user_stats_dict(stats: UserStats) -> dict[str, Any]:
    return {
        "totalUsers": stats.total_users,
        "activeUsers": stats.active_users,
        "inactiveUsers": stats.inactive_users,
        "roleCounts": {r.value: n for r, n in stats.role_counts.items()},
    }
