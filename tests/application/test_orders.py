"""Integration tests for the order use cases."""

from decimal import Decimal

import pytest

from commerce.application.cancel_order import CancelOrderHandler
from commerce.application.create_order import CreateOrderHandler
from commerce.application.dto import AddressSpec, NewOrder, OrderChanges, OrderItemSpec
from commerce.application.order_queries import (
    ListOrdersHandler,
    OrderStatsHandler,
    ShowOrderHandler,
)
from commerce.application.update_order import UpdateOrderHandler
from commerce.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    EntityNotFoundError,
    InvalidTransitionError,
    ValidationError,
)
from commerce.domain.model.order import OrderStatus
from commerce.domain.model.paging import PageRequest
from commerce.domain.model.value_objects import Money
from commerce.domain.repository.order_repository import OrderQuery
from commerce.domain.service.credentials import TokenClaims
from tests.fakes import FakeOrderRepository

ALICE = TokenClaims(user_id="alice", email="alice@example.com", role="user")
BOB = TokenClaims(user_id="bob", email="bob@example.com", role="user")
ADMIN = TokenClaims(user_id="root", email="root@example.com", role="admin")

ADDRESS = AddressSpec("1 Main St", "Springfield", "IL", "62701", "US")


def _new_order(customer_id: str = "alice", price: str = "60", qty: int = 2, notes=None) -> NewOrder:
    total = Decimal(price) * qty
    return NewOrder(
        customer_id=customer_id,
        items=[OrderItemSpec("p-1", "Widget", Decimal(price), qty, total)],
        shipping_address=ADDRESS,
        notes=notes,
    )


def _setup():
    repo = FakeOrderRepository()
    return repo, CreateOrderHandler(repo)


class TestCreateOrder:

    def test_create_computes_totals_and_persists(self):
        repo, create = _setup()
        order = create.handle(_new_order())

        stored = repo.get_by_id(order.id)
        assert stored.status == OrderStatus.PENDING
        assert stored.subtotal == Money.of("120")
        assert stored.tax == Money.of("12")
        assert stored.shipping == Money.of("0")
        assert stored.total == Money.of("132")

    def test_invalid_item_rejected(self):
        _, create = _setup()
        bad = NewOrder(
            customer_id="alice",
            items=[OrderItemSpec("p-1", "Widget", Decimal("10"), 0, Decimal("10"))],
            shipping_address=ADDRESS,
        )
        with pytest.raises(ValidationError, match="positive integer"):
            create.handle(bad)


class TestUpdateOrder:

    def test_legal_transition_is_saved(self):
        repo, create = _setup()
        order = create.handle(_new_order())

        UpdateOrderHandler(repo).handle(order.id, OrderChanges(status=OrderStatus.CONFIRMED), ALICE)

        assert repo.get_by_id(order.id).status == OrderStatus.CONFIRMED

    def test_illegal_transition_leaves_order_untouched(self):
        repo, create = _setup()
        order = create.handle(_new_order())

        with pytest.raises(InvalidTransitionError, match="from pending to shipped"):
            UpdateOrderHandler(repo).handle(order.id, OrderChanges(status=OrderStatus.SHIPPED))

        assert repo.get_by_id(order.id).status == OrderStatus.PENDING

    def test_notes_and_address_without_status(self):
        repo, create = _setup()
        order = create.handle(_new_order())
        new_address = AddressSpec("2 Elm St", "Shelbyville", "IL", "62565", "US")

        UpdateOrderHandler(repo).handle(
            order.id, OrderChanges(notes="Ring twice", shipping_address=new_address)
        )

        stored = repo.get_by_id(order.id)
        assert stored.notes == "Ring twice"
        assert stored.shipping_address.city == "Shelbyville"
        assert stored.status == OrderStatus.PENDING

    def test_concurrent_change_is_a_conflict(self):
        repo, create = _setup()
        order = create.handle(_new_order())
        repo.lose_next_update = True

        with pytest.raises(ConflictError, match="modified concurrently"):
            UpdateOrderHandler(repo).handle(order.id, OrderChanges(status=OrderStatus.CONFIRMED))

    def test_other_customer_forbidden(self):
        repo, create = _setup()
        order = create.handle(_new_order())

        with pytest.raises(AuthorizationError):
            UpdateOrderHandler(repo).handle(order.id, OrderChanges(notes="x"), BOB)

    def test_missing_order(self):
        repo, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Order not found"):
            UpdateOrderHandler(repo).handle("nope", OrderChanges(notes="x"))


class TestCancelOrder:

    def test_cancel_appends_reason(self):
        repo, create = _setup()
        order = create.handle(_new_order(notes="Gift"))

        CancelOrderHandler(repo).handle(order.id, "Found it cheaper", ALICE)

        stored = repo.get_by_id(order.id)
        assert stored.status == OrderStatus.CANCELLED
        assert stored.notes == "Gift\nCancellation reason: Found it cheaper"

    def test_cancel_twice_rejected(self):
        repo, create = _setup()
        order = create.handle(_new_order())
        CancelOrderHandler(repo).handle(order.id)

        with pytest.raises(ValidationError, match="already cancelled"):
            CancelOrderHandler(repo).handle(order.id)

    def test_admin_may_cancel_any_order(self):
        repo, create = _setup()
        order = create.handle(_new_order())

        CancelOrderHandler(repo).handle(order.id, actor=ADMIN)

        assert repo.get_by_id(order.id).status == OrderStatus.CANCELLED


class TestOrderQueries:

    def test_show_by_number(self):
        repo, create = _setup()
        order = create.handle(_new_order())

        found = ShowOrderHandler(repo).by_number(order.order_number, ALICE)

        assert found.id == order.id

    def test_show_other_customers_order_forbidden(self):
        repo, create = _setup()
        order = create.handle(_new_order())

        with pytest.raises(AuthorizationError, match="only access your own"):
            ShowOrderHandler(repo).handle(order.id, BOB)

    def test_list_is_scoped_for_non_admins(self):
        repo, create = _setup()
        create.handle(_new_order("alice"))
        create.handle(_new_order("alice"))
        create.handle(_new_order("bob"))

        alice_page = ListOrdersHandler(repo).handle(OrderQuery(customer_id="bob"), ALICE)
        admin_page = ListOrdersHandler(repo).handle(OrderQuery(), ADMIN)

        assert alice_page.total == 2
        assert {o.customer_id for o in alice_page.items} == {"alice"}
        assert admin_page.total == 3

    def test_pagination(self):
        repo, create = _setup()
        for _ in range(5):
            create.handle(_new_order())

        page = ListOrdersHandler(repo).handle(OrderQuery(paging=PageRequest(page=2, limit=2)), ALICE)

        assert len(page.items) == 2
        assert page.total == 5
        assert page.total_pages == 3

    def test_stats(self):
        repo, create = _setup()
        create.handle(_new_order(price="60", qty=2))  # 132
        small = create.handle(_new_order(price="50", qty=1))  # 50 + 5 + 10 = 65
        CancelOrderHandler(repo).handle(small.id)

        stats = OrderStatsHandler(repo).handle(ALICE)

        assert stats.total_orders == 2
        assert stats.total_revenue == Decimal("197.00")
        assert stats.average_order_value == Decimal("98.50")
        assert stats.status_counts[OrderStatus.PENDING] == 1
        assert stats.status_counts[OrderStatus.CANCELLED] == 1
        assert stats.status_counts[OrderStatus.DELIVERED] == 0
