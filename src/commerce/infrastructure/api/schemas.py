"""Request schemas for the HTTP layer (camelCase on the wire)."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from commerce.application.dto import (
    AddressSpec,
    NewOrder,
    NewPayment,
    NewUser,
    OrderChanges,
    OrderItemSpec,
    PaymentChanges,
    RefundRequest,
    UserChanges,
)
from commerce.domain.model.order import OrderStatus
from commerce.domain.model.paging import MAX_PAGE_SIZE, PageRequest, SortOrder
from commerce.domain.model.payment import PaymentMethod, PaymentStatus
from commerce.domain.model.user import UserRole
from commerce.domain.repository.order_repository import OrderQuery
from commerce.domain.repository.payment_repository import PaymentQuery
from commerce.domain.repository.user_repository import UserQuery

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Orders -------------------------------------------------------------------


class AddressSchema(CamelModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)

    def to_spec(self) -> AddressSpec:
        return AddressSpec(
            street=self.street,
            city=self.city,
            state=self.state,
            zip_code=self.zip_code,
            country=self.country,
        )


class OrderItemSchema(CamelModel):
    product_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    price: Decimal = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    total: Decimal = Field(..., gt=0)


class CreateOrderRequest(CamelModel):
    items: list[OrderItemSchema] = Field(..., min_length=1)
    shipping_address: AddressSchema
    customer_id: Optional[str] = None
    notes: Optional[str] = None

    def to_command(self, customer_id: str) -> NewOrder:
        return NewOrder(
            customer_id=customer_id,
            items=[
                OrderItemSpec(
                    product_id=item.product_id,
                    name=item.name,
                    price=item.price,
                    quantity=item.quantity,
                    total=item.total,
                )
                for item in self.items
            ],
            shipping_address=self.shipping_address.to_spec(),
            notes=self.notes,
        )


class UpdateOrderRequest(CamelModel):
    status: Optional[OrderStatus] = None
    notes: Optional[str] = None
    shipping_address: Optional[AddressSchema] = None

    def to_changes(self) -> OrderChanges:
        return OrderChanges(
            status=self.status,
            notes=self.notes,
            shipping_address=self.shipping_address.to_spec() if self.shipping_address else None,
        )


class CancelRequest(CamelModel):
    reason: Optional[str] = None


# --- Payments -----------------------------------------------------------------


class CreatePaymentRequest(CamelModel):
    order_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    payment_method: PaymentMethod
    customer_id: Optional[str] = None
    description: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None

    def to_command(self, customer_id: str) -> NewPayment:
        return NewPayment(
            order_id=self.order_id,
            amount=self.amount,
            method=self.payment_method,
            customer_id=customer_id,
            currency=self.currency,
            description=self.description,
            metadata=self.metadata,
        )


class UpdatePaymentRequest(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    description: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None

    def to_changes(self) -> PaymentChanges:
        return PaymentChanges(description=self.description, metadata=self.metadata)


class RefundPaymentRequest(CamelModel):
    amount: Optional[Decimal] = Field(None, gt=0)
    reason: str = Field(..., min_length=1)
    metadata: Optional[dict[str, Any]] = None

    def to_request(self) -> RefundRequest:
        return RefundRequest(reason=self.reason, amount=self.amount, metadata=self.metadata)


# --- Users --------------------------------------------------------------------


class RegisterRequest(CamelModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    date_of_birth: Optional[datetime] = None

    def to_command(self) -> NewUser:
        return NewUser(
            email=self.email,
            password=self.password,
            first_name=self.first_name,
            last_name=self.last_name,
            role=UserRole.USER,
            phone=self.phone,
            date_of_birth=self.date_of_birth.date() if self.date_of_birth else None,
        )


class LoginRequest(CamelModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)


class UpdateUserRequest(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    is_active: Optional[bool] = None

    def to_changes(self) -> UserChanges:
        birthday: date | None = self.date_of_birth.date() if self.date_of_birth else None
        return UserChanges(
            first_name=self.first_name,
            last_name=self.last_name,
            phone=self.phone,
            date_of_birth=birthday,
            is_active=self.is_active,
        )


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8)


# --- List queries -------------------------------------------------------------


class PagingParams(CamelModel):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=MAX_PAGE_SIZE)
    sort_order: Literal["asc", "desc"] = "desc"

    def page_request(self, sort_by: str) -> PageRequest:
        return PageRequest(
            page=self.page,
            limit=self.limit,
            sort_by=sort_by,
            sort_order=SortOrder(self.sort_order),
        )


class OrderListParams(PagingParams):
    status: Optional[OrderStatus] = None
    customer_id: Optional[str] = None
    sort_by: Literal["createdAt", "updatedAt", "total"] = "createdAt"

    def to_query(self) -> OrderQuery:
        return OrderQuery(
            paging=self.page_request(self.sort_by),
            status=self.status,
            customer_id=self.customer_id,
        )


class PaymentListParams(PagingParams):
    status: Optional[PaymentStatus] = None
    payment_method: Optional[PaymentMethod] = None
    customer_id: Optional[str] = None
    order_id: Optional[str] = None
    sort_by: Literal["createdAt", "updatedAt", "amount"] = "createdAt"

    def to_query(self) -> PaymentQuery:
        return PaymentQuery(
            paging=self.page_request(self.sort_by),
            status=self.status,
            method=self.payment_method,
            customer_id=self.customer_id,
            order_id=self.order_id,
        )


class UserListParams(PagingParams):
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    search: Optional[str] = None
    sort_by: Literal["createdAt", "updatedAt", "firstName", "lastName", "email"] = "createdAt"

    def to_query(self) -> UserQuery:
        return UserQuery(
            paging=self.page_request(self.sort_by),
            role=self.role,
            is_active=self.is_active,
            search=self.search or None,
        )
