"""Unit tests for the Payment aggregate and Refund records."""

import pytest

from commerce.domain.exceptions import ValidationError
from commerce.domain.model.payment import Payment, PaymentMethod, PaymentStatus, Refund
from commerce.domain.model.value_objects import Money


def _make_payment(status: PaymentStatus = PaymentStatus.PENDING, amount: str = "100.00") -> Payment:
    payment = Payment.create(
        order_id="order-1",
        amount=Money.of(amount),
        method=PaymentMethod.CREDIT_CARD,
        customer_id="customer-1",
    )
    payment.status = status
    return payment


class TestPaymentCreation:

    def test_happy_path(self):
        payment = _make_payment()
        assert payment.status == PaymentStatus.PENDING
        assert payment.transaction_id is None
        assert payment.processed_at is None

    def test_zero_amount_rejected(self):
        with pytest.raises(ValidationError, match="Amount must be positive"):
            _make_payment(amount="0")

    @pytest.mark.parametrize("status", list(PaymentStatus))
    def test_only_failed_payments_allow_a_new_one(self, status):
        assert _make_payment(status).blocks_new_payment == (status != PaymentStatus.FAILED)


class TestPaymentProcessing:

    def test_claim_then_complete(self):
        payment = _make_payment()
        payment.start_processing()
        payment.complete("TXN-1")
        assert payment.status == PaymentStatus.COMPLETED
        assert payment.transaction_id == "TXN-1"
        assert payment.processed_at is not None

    def test_claim_then_fail(self):
        payment = _make_payment()
        payment.start_processing()
        payment.fail("Card declined")
        assert payment.status == PaymentStatus.FAILED
        assert payment.failure_reason == "Card declined"
        assert payment.transaction_id is None
        assert payment.processed_at is not None

    @pytest.mark.parametrize(
        "status", [s for s in PaymentStatus if s != PaymentStatus.PENDING]
    )
    def test_only_pending_can_be_processed(self, status):
        with pytest.raises(ValidationError, match=f"Payment is already {status.value}"):
            _make_payment(status).start_processing()

    def test_complete_requires_processing(self):
        with pytest.raises(ValidationError, match="must be processing"):
            _make_payment().complete("TXN-1")


class TestPaymentCancel:

    def test_cancel_stores_reason(self):
        payment = _make_payment()
        payment.cancel("Customer request")
        assert payment.status == PaymentStatus.CANCELLED
        assert payment.failure_reason == "Customer request"

    def test_cancel_completed_rejected(self):
        with pytest.raises(ValidationError, match="Cannot cancel completed payment"):
            _make_payment(PaymentStatus.COMPLETED).cancel()

    def test_cancel_cancelled_rejected(self):
        with pytest.raises(ValidationError, match="already cancelled"):
            _make_payment(PaymentStatus.CANCELLED).cancel()


class TestRefundRules:

    def test_defaults_to_full_amount(self):
        payment = _make_payment(PaymentStatus.COMPLETED)
        assert payment.refund_amount(None) == Money.of("100.00")

    def test_partial_amount(self):
        payment = _make_payment(PaymentStatus.COMPLETED)
        assert payment.refund_amount(Money.of("40")) == Money.of("40")

    @pytest.mark.parametrize(
        "status", [s for s in PaymentStatus if s != PaymentStatus.COMPLETED]
    )
    def test_only_completed_can_be_refunded(self, status):
        with pytest.raises(ValidationError, match="Can only refund completed payments"):
            _make_payment(status).refund_amount(None)

    def test_over_amount_rejected(self):
        payment = _make_payment(PaymentStatus.COMPLETED)
        with pytest.raises(ValidationError, match="cannot exceed payment amount"):
            payment.refund_amount(Money.of("100.01"))

    def test_other_currency_rejected(self):
        payment = _make_payment(PaymentStatus.COMPLETED)
        with pytest.raises(ValidationError, match="does not match"):
            payment.refund_amount(Money.of("10", "EUR"))

    def test_mark_refunded(self):
        payment = _make_payment(PaymentStatus.COMPLETED)
        payment.mark_refunded()
        assert payment.status == PaymentStatus.REFUNDED


class TestRefundRecord:

    def test_successful_refund(self):
        refund = Refund.record("pay-1", Money.of("10"), "Damaged", succeeded=True, transaction_id="TXN-9")
        assert refund.status == PaymentStatus.COMPLETED
        assert refund.succeeded
        assert refund.transaction_id == "TXN-9"
        assert refund.processed_at is not None

    def test_failed_refund_has_no_processed_at(self):
        refund = Refund.record("pay-1", Money.of("10"), "Damaged", succeeded=False, transaction_id="TXN-9")
        assert refund.status == PaymentStatus.FAILED
        assert refund.transaction_id is None
        assert refund.processed_at is None

    def test_reason_required(self):
        with pytest.raises(ValidationError, match="reason is required"):
            Refund.record("pay-1", Money.of("10"), " ", succeeded=True)
