"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.  Tests build a
``Container`` by hand with in-memory fakes instead.
"""

from __future__ import annotations

from dataclasses import dataclass

from commerce.domain.repository.order_repository import OrderRepository
from commerce.domain.repository.payment_repository import PaymentRepository
from commerce.domain.repository.user_repository import UserRepository
from commerce.domain.service.credentials import PasswordHasher, TokenService
from commerce.domain.service.payment_gateway import PaymentGateway
from commerce.infrastructure.auth.bcrypt_hasher import BcryptPasswordHasher
from commerce.infrastructure.auth.jwt_tokens import JwtTokenService
from commerce.infrastructure.config import Settings
from commerce.infrastructure.gateway.http_gateway import HttpPaymentGateway
from commerce.infrastructure.gateway.simulated_gateway import SimulatedPaymentGateway
from commerce.infrastructure.persistence.mongo import MongoConnection
from commerce.infrastructure.persistence.mongo_order_repository import MongoOrderRepository
from commerce.infrastructure.persistence.mongo_payment_repository import (
    MongoPaymentRepository,
)
from commerce.infrastructure.persistence.mongo_user_repository import MongoUserRepository


@dataclass
class Container:
    settings: Settings
    orders: OrderRepository
    payments: PaymentRepository
    users: UserRepository
    gateway: PaymentGateway
    hasher: PasswordHasher
    tokens: TokenService
    connection: MongoConnection | None = None

    def start(self) -> None:
        if self.connection is not None:
            self.connection.connect()

    def stop(self) -> None:
        if isinstance(self.gateway, HttpPaymentGateway):
            self.gateway.close()
        if self.connection is not None:
            self.connection.close()


def payment_gateway(settings: Settings) -> PaymentGateway:
    if settings.gateway.kind == "http" and settings.gateway.url:
        return HttpPaymentGateway.from_url(settings.gateway.url)
    return SimulatedPaymentGateway(delay_seconds=settings.gateway.delay_seconds)


def build_container(settings: Settings) -> Container:
    connection = MongoConnection(settings.database)
    return Container(
        settings=settings,
        orders=MongoOrderRepository(connection),
        payments=MongoPaymentRepository(connection),
        users=MongoUserRepository(connection),
        gateway=payment_gateway(settings),
        hasher=BcryptPasswordHasher(settings.security.bcrypt_rounds),
        tokens=JwtTokenService(
            settings.security.jwt_secret, settings.security.jwt_expires_in
        ),
        connection=connection,
    )
