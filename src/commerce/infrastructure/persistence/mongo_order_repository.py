"""MongoDB implementation of OrderRepository (collection ``orders``)."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from commerce.domain.model.order import Order, OrderLineItem, OrderStatus, OrderTotals
from commerce.domain.model.value_objects import CENT, Address, Money, Quantity
from commerce.domain.repository.order_repository import (
    OrderQuery,
    OrderRepository,
    OrderStats,
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

COLLECTION = "orders"


class MongoOrderRepository(OrderRepository):

    def __init__(self, connection: MongoConnection) -> None:
        self._connection = connection

    @property
    def _orders(self):
        return self._connection.collection(COLLECTION)

    # --- OrderRepository interface --------------------------------------------

    def add(self, order: Order) -> None:
        result = self._orders.insert_one(self._to_document(order))
        order.id = str(result.inserted_id)

    def get_by_id(self, order_id: str) -> Order | None:
        oid = object_id(order_id)
        if oid is None:
            return None
        doc = self._orders.find_one({"_id": oid})
        return self._to_domain(doc) if doc else None

    def get_by_order_number(self, order_number: str) -> Order | None:
        doc = self._orders.find_one({"orderNumber": order_number})
        return self._to_domain(doc) if doc else None

    def find_many(self, query: OrderQuery) -> tuple[list[Order], int]:
        filter_: dict[str, Any] = {}
        if query.status is not None:
            filter_["status"] = query.status.value
        if query.customer_id:
            filter_["customerId"] = query.customer_id
        docs, total = find_page(self._orders, filter_, query.paging)
        return [self._to_domain(doc) for doc in docs], total

    def update(self, order: Order, expected_status: OrderStatus) -> bool:
        oid = object_id(order.id or "")
        if oid is None:
            return False
        result = self._orders.replace_one(
            {"_id": oid, "status": expected_status.value},
            self._to_document(order),
        )
        if result.matched_count == 0:
            logger.warning(
                f"Order update matched nothing: id={order.id} expected_status={expected_status.value}"
            )
        return result.matched_count == 1

    def delete(self, order_id: str) -> bool:
        oid = object_id(order_id)
        if oid is None:
            return False
        return self._orders.delete_one({"_id": oid}).deleted_count > 0

    def stats(self, customer_id: str | None = None) -> OrderStats:
        match = {"customerId": customer_id} if customer_id else {}
        pipeline = [
            {"$match": match},
            {
                "$group": {
                    "_id": None,
                    "totalOrders": {"$sum": 1},
                    "totalRevenue": {"$sum": "$total"},
                }
            },
        ]
        rows = list(self._orders.aggregate(pipeline))
        total_orders = rows[0]["totalOrders"] if rows else 0
        total_revenue = to_decimal(rows[0]["totalRevenue"]) if rows else Decimal("0")
        average = (
            (total_revenue / total_orders).quantize(CENT) if total_orders else Decimal("0")
        )
        by_status = count_by(self._orders, match, "status")
        return OrderStats(
            total_orders=total_orders,
            total_revenue=total_revenue.quantize(CENT),
            average_order_value=average,
            status_counts={s: by_status.get(s.value, 0) for s in OrderStatus},
        )

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_document(order: Order) -> dict[str, Any]:
        address = order.shipping_address
        return {
            "orderNumber": order.order_number,
            "customerId": order.customer_id,
            "items": [
                {
                    "productId": item.product_id,
                    "name": item.name,
                    "price": to_decimal128(item.unit_price.amount),
                    "quantity": item.quantity.value,
                    "total": to_decimal128(item.total.amount),
                }
                for item in order.items
            ],
            "currency": order.total.currency,
            "subtotal": to_decimal128(order.subtotal.amount),
            "tax": to_decimal128(order.tax.amount),
            "shipping": to_decimal128(order.shipping.amount),
            "total": to_decimal128(order.total.amount),
            "shippingAddress": {
                "street": address.street,
                "city": address.city,
                "state": address.state,
                "zipCode": address.zip_code,
                "country": address.country,
            },
            "notes": order.notes,
            "status": order.status.value,
            "createdAt": order.created_at,
            "updatedAt": order.updated_at,
        }

    @staticmethod
    def _to_domain(doc: dict[str, Any]) -> Order:
        currency = doc.get("currency", "USD")
        address = doc["shippingAddress"]
        return Order(
            id=str(doc["_id"]),
            order_number=doc["orderNumber"],
            customer_id=doc["customerId"],
            items=[
                OrderLineItem(
                    product_id=item["productId"],
                    name=item["name"],
                    unit_price=Money(to_decimal(item["price"]), currency),
                    quantity=Quantity(item["quantity"]),
                    total=Money(to_decimal(item["total"]), currency),
                )
                for item in doc["items"]
            ],
            totals=OrderTotals(
                subtotal=Money(to_decimal(doc["subtotal"]), currency),
                tax=Money(to_decimal(doc["tax"]), currency),
                shipping=Money(to_decimal(doc["shipping"]), currency),
                total=Money(to_decimal(doc["total"]), currency),
            ),
            shipping_address=Address(
                street=address["street"],
                city=address["city"],
                state=address["state"],
                zip_code=address["zipCode"],
                country=address["country"],
            ),
            notes=doc.get("notes"),
            status=OrderStatus(doc["status"]),
            created_at=as_utc(doc["createdAt"]),
            updated_at=as_utc(doc["updatedAt"]),
        )
