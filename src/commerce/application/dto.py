"""Data Transfer Objects: plain containers that cross layer boundaries.

Inputs are what the HTTP layer hands to a handler after schema
validation; outputs are the few results that are not a bare aggregate.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from commerce.domain.model.order import OrderStatus
from commerce.domain.model.payment import PaymentMethod
from commerce.domain.model.user import User, UserRole


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: one line of an order as the client sent it."""

    product_id: str
    name: str
    price: Decimal
    quantity: int
    total: Decimal


@dataclass(frozen=True)
class AddressSpec:
    street: str
    city: str
    state: str
    zip_code: str
    country: str


@dataclass(frozen=True)
class NewOrder:
    customer_id: str
    items: list[OrderItemSpec]
    shipping_address: AddressSpec
    notes: str | None = None


@dataclass(frozen=True)
class OrderChanges:
    status: OrderStatus | None = None
    notes: str | None = None
    shipping_address: AddressSpec | None = None


@dataclass(frozen=True)
class NewPayment:
    order_id: str
    amount: Decimal
    method: PaymentMethod
    customer_id: str
    currency: str = "USD"
    description: str | None = None
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class PaymentChanges:
    description: str | None = None
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class RefundRequest:
    reason: str
    amount: Decimal | None = None
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class NewUser:
    email: str
    password: str
    first_name: str
    last_name: str
    role: UserRole = UserRole.USER
    phone: str | None = None
    date_of_birth: date | None = None


@dataclass(frozen=True)
class UserChanges:
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    is_active: bool | None = None


@dataclass(frozen=True)
class LoginResult:
    """Output: the authenticated user plus a freshly signed token."""

    user: User
    token: str
    expires_in: str
