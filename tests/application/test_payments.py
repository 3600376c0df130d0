"""Integration tests for the payment use cases."""

from decimal import Decimal

import pytest

from commerce.application.cancel_payment import CancelPaymentHandler
from commerce.application.create_payment import CreatePaymentHandler
from commerce.application.dto import NewPayment, PaymentChanges, RefundRequest
from commerce.application.payment_queries import (
    ListPaymentsHandler,
    PaymentStatsHandler,
    ShowPaymentHandler,
)
from commerce.application.process_payment import ProcessPaymentHandler
from commerce.application.refund_payment import RefundPaymentHandler
from commerce.application.update_payment import UpdatePaymentHandler
from commerce.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    EntityNotFoundError,
    ValidationError,
)
from commerce.domain.model.payment import PaymentMethod, PaymentStatus
from commerce.domain.model.value_objects import Money
from commerce.domain.repository.payment_repository import PaymentQuery
from commerce.domain.service.credentials import TokenClaims
from tests.fakes import FakeGateway, FakePaymentRepository

ALICE = TokenClaims(user_id="alice", email="alice@example.com", role="user")
BOB = TokenClaims(user_id="bob", email="bob@example.com", role="user")
ADMIN = TokenClaims(user_id="root", email="root@example.com", role="admin")


def _new_payment(order_id: str = "order-1", amount: str = "100.00", customer_id: str = "alice") -> NewPayment:
    return NewPayment(
        order_id=order_id,
        amount=Decimal(amount),
        method=PaymentMethod.CREDIT_CARD,
        customer_id=customer_id,
    )


def _setup(charge_ok: bool = True, refund_ok: bool = True):
    repo = FakePaymentRepository()
    gateway = FakeGateway(charge_ok=charge_ok, refund_ok=refund_ok)
    return repo, gateway, CreatePaymentHandler(repo)


def _completed_payment(repo, gateway, create, amount: str = "100.00"):
    payment = create.handle(_new_payment(amount=amount))
    return ProcessPaymentHandler(repo, gateway).handle(payment.id)


class TestCreatePayment:

    def test_create_is_pending(self):
        repo, _, create = _setup()
        payment = create.handle(_new_payment())
        assert repo.get_by_id(payment.id).status == PaymentStatus.PENDING

    def test_second_payment_for_order_conflicts(self):
        _, _, create = _setup()
        create.handle(_new_payment())
        with pytest.raises(ConflictError, match="Payment already exists for this order"):
            create.handle(_new_payment())

    def test_new_payment_allowed_after_failure(self):
        repo, gateway, create = _setup(charge_ok=False)
        first = create.handle(_new_payment())
        ProcessPaymentHandler(repo, gateway).handle(first.id)

        second = create.handle(_new_payment())

        assert second.id != first.id
        assert repo.get_latest_for_order("order-1").id == second.id

    def test_other_orders_are_independent(self):
        _, _, create = _setup()
        create.handle(_new_payment("order-1"))
        create.handle(_new_payment("order-2"))


class TestProcessPayment:

    def test_success_completes_with_transaction(self):
        repo, gateway, create = _setup()
        payment = _completed_payment(repo, gateway, create)

        stored = repo.get_by_id(payment.id)
        assert stored.status == PaymentStatus.COMPLETED
        assert stored.transaction_id == "TXN-CHARGE-1"
        assert stored.processed_at is not None

    def test_status_writes_go_through_processing(self):
        repo, gateway, create = _setup()
        _completed_payment(repo, gateway, create)

        assert repo.status_writes == [
            (PaymentStatus.PENDING, PaymentStatus.PROCESSING),
            (PaymentStatus.PROCESSING, PaymentStatus.COMPLETED),
        ]

    def test_decline_fails_with_reason(self):
        repo, gateway, create = _setup(charge_ok=False)
        payment = create.handle(_new_payment())

        ProcessPaymentHandler(repo, gateway).handle(payment.id)

        stored = repo.get_by_id(payment.id)
        assert stored.status == PaymentStatus.FAILED
        assert stored.failure_reason == "Card declined"
        assert stored.transaction_id is None
        assert stored.processed_at is not None

    def test_processing_twice_rejected(self):
        repo, gateway, create = _setup()
        payment = _completed_payment(repo, gateway, create)

        with pytest.raises(ValidationError, match="Payment is already completed"):
            ProcessPaymentHandler(repo, gateway).handle(payment.id)
        assert len(gateway.charges) == 1

    def test_lost_claim_never_reaches_gateway(self):
        repo, gateway, create = _setup()
        payment = create.handle(_new_payment())
        # Another worker claims the payment between our read and our write.
        repo.on_update = lambda p: repo.force_status(p.id, PaymentStatus.PROCESSING)

        with pytest.raises(ConflictError, match="modified concurrently"):
            ProcessPaymentHandler(repo, gateway).handle(payment.id)

        assert gateway.charges == []

    def test_other_customer_forbidden(self):
        repo, gateway, create = _setup()
        payment = create.handle(_new_payment())

        with pytest.raises(AuthorizationError):
            ProcessPaymentHandler(repo, gateway).handle(payment.id, BOB)

    def test_missing_payment(self):
        repo, gateway, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Payment not found"):
            ProcessPaymentHandler(repo, gateway).handle("missing")

    def test_gateway_error_fails_payment_and_allows_a_new_one(self):
        repo = FakePaymentRepository()
        gateway = FakeGateway(charge_error=ValueError("garbled response"))
        create = CreatePaymentHandler(repo)
        payment = create.handle(_new_payment())

        processed = ProcessPaymentHandler(repo, gateway).handle(payment.id)

        stored = repo.get_by_id(payment.id)
        assert processed.status == PaymentStatus.FAILED
        assert stored.status == PaymentStatus.FAILED
        assert stored.failure_reason == "Payment processing failed"
        assert create.handle(_new_payment()).id != payment.id


class TestCancelPayment:

    def test_cancel_pending(self):
        repo, _, create = _setup()
        payment = create.handle(_new_payment())

        CancelPaymentHandler(repo).handle(payment.id, "No longer needed", ALICE)

        stored = repo.get_by_id(payment.id)
        assert stored.status == PaymentStatus.CANCELLED
        assert stored.failure_reason == "No longer needed"

    def test_cancel_completed_rejected(self):
        repo, gateway, create = _setup()
        payment = _completed_payment(repo, gateway, create)

        with pytest.raises(ValidationError, match="Cannot cancel completed payment"):
            CancelPaymentHandler(repo).handle(payment.id)


class TestRefundPayment:

    def test_full_refund_marks_payment_refunded(self):
        repo, gateway, create = _setup()
        payment = _completed_payment(repo, gateway, create)

        refund = RefundPaymentHandler(repo, gateway).handle(
            payment.id, RefundRequest(reason="Damaged"), ALICE
        )

        assert refund.amount == Money.of("100.00")
        assert refund.status == PaymentStatus.COMPLETED
        assert repo.get_by_id(payment.id).status == PaymentStatus.REFUNDED
        assert [r.id for r in repo.list_refunds(payment.id)] == [refund.id]

    def test_partial_refund(self):
        repo, gateway, create = _setup()
        payment = _completed_payment(repo, gateway, create)

        refund = RefundPaymentHandler(repo, gateway).handle(
            payment.id, RefundRequest(reason="Partial", amount=Decimal("30"))
        )

        assert refund.amount == Money.of("30")

    def test_declined_refund_is_recorded_and_payment_stays_completed(self):
        repo, gateway, create = _setup(refund_ok=False)
        payment = _completed_payment(repo, gateway, create)

        refund = RefundPaymentHandler(repo, gateway).handle(
            payment.id, RefundRequest(reason="Damaged")
        )

        assert refund.status == PaymentStatus.FAILED
        assert refund.processed_at is None
        assert repo.get_by_id(payment.id).status == PaymentStatus.COMPLETED
        assert len(repo.list_refunds(payment.id)) == 1

    def test_refund_of_pending_payment_rejected(self):
        repo, gateway, create = _setup()
        payment = create.handle(_new_payment())

        with pytest.raises(ValidationError, match="Can only refund completed payments"):
            RefundPaymentHandler(repo, gateway).handle(payment.id, RefundRequest(reason="x"))
        assert gateway.refunds == []

    def test_over_amount_rejected(self):
        repo, gateway, create = _setup()
        payment = _completed_payment(repo, gateway, create)

        with pytest.raises(ValidationError, match="cannot exceed payment amount"):
            RefundPaymentHandler(repo, gateway).handle(
                payment.id, RefundRequest(reason="x", amount=Decimal("150"))
            )
        assert repo.list_refunds(payment.id) == []

    def test_refund_twice_rejected(self):
        repo, gateway, create = _setup()
        payment = _completed_payment(repo, gateway, create)
        handler = RefundPaymentHandler(repo, gateway)
        handler.handle(payment.id, RefundRequest(reason="Damaged"))

        with pytest.raises(ValidationError, match="Can only refund completed payments"):
            handler.handle(payment.id, RefundRequest(reason="Again"))

    def test_each_refund_attempt_has_its_own_key(self):
        repo, gateway, create = _setup(refund_ok=False)
        payment = _completed_payment(repo, gateway, create)
        refunds = RefundPaymentHandler(repo, gateway)

        refunds.handle(payment.id, RefundRequest(reason="Damaged"))
        refunds.handle(payment.id, RefundRequest(reason="Damaged"))

        first, second = gateway.refund_keys
        assert first != second
        assert first.startswith(f"refund-{payment.id}-")
        assert second.startswith(f"refund-{payment.id}-")


class TestUpdateAndQueries:

    def test_update_edits_description_and_metadata_only(self):
        repo, _, create = _setup()
        payment = create.handle(_new_payment())

        UpdatePaymentHandler(repo).handle(
            payment.id, PaymentChanges(description="Deposit", metadata={"ref": "A1"})
        )

        stored = repo.get_by_id(payment.id)
        assert stored.description == "Deposit"
        assert stored.metadata == {"ref": "A1"}
        assert stored.status == PaymentStatus.PENDING

    def test_show_forbidden_for_other_customer(self):
        repo, _, create = _setup()
        payment = create.handle(_new_payment())

        with pytest.raises(AuthorizationError):
            ShowPaymentHandler(repo).handle(payment.id, BOB)

    def test_list_scoped_and_filtered(self):
        repo, _, create = _setup()
        create.handle(_new_payment("order-1", customer_id="alice"))
        create.handle(_new_payment("order-2", customer_id="alice"))
        create.handle(_new_payment("order-3", customer_id="bob"))

        mine = ListPaymentsHandler(repo).handle(PaymentQuery(), ALICE)
        one_order = ListPaymentsHandler(repo).handle(PaymentQuery(order_id="order-3"), ADMIN)

        assert mine.total == 2
        assert [p.customer_id for p in one_order.items] == ["bob"]

    def test_stats(self):
        repo, gateway, create = _setup()
        _completed_payment(repo, gateway, create, amount="100")
        create.handle(_new_payment("order-2", amount="50"))

        stats = PaymentStatsHandler(repo).handle(ADMIN)

        assert stats.total_payments == 2
        assert stats.total_amount == Decimal("150.00")
        assert stats.average_amount == Decimal("75.00")
        assert stats.status_counts[PaymentStatus.COMPLETED] == 1
        assert stats.status_counts[PaymentStatus.PENDING] == 1
        assert stats.method_counts[PaymentMethod.CREDIT_CARD] == 2
        assert stats.method_counts[PaymentMethod.PAYPAL] == 0
