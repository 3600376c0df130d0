"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from commerce.domain.exceptions import ValidationError
from commerce.domain.model.value_objects import Address, Money, Quantity


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation(self):
        m = Money(Decimal("10.50"))
        assert m.amount == Decimal("10.50")
        assert m.currency == "USD"

    def test_of_factory_from_string(self):
        assert Money.of("25.99").amount == Decimal("25.99")

    def test_of_factory_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("ten dollars")

    def test_amount_rounded_half_up_to_cents(self):
        assert Money.of("0.125").amount == Decimal("0.13")
        assert Money.of("0.124").amount == Decimal("0.12")

    def test_currency_normalised_to_upper_case(self):
        assert Money.of("1", "eur").currency == "EUR"

    def test_bad_currency_rejected(self):
        with pytest.raises(ValidationError, match="3 characters"):
            Money.of("1", "EURO")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_float_amount_rejected(self):
        with pytest.raises(ValidationError, match="must be a Decimal"):
            Money(10.5)

    def test_addition(self):
        assert Money.of("10") + Money.of("5.50") == Money.of("15.50")

    def test_zero(self):
        assert Money.zero("eur").is_zero
        assert Money.zero("eur").currency == "EUR"

    def test_percent(self):
        assert Money.of("120").percent(Decimal("0.10")) == Money.of("12")

    def test_currency_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money(Decimal("10"), "USD") + Money(Decimal("5"), "EUR")

    def test_str_formatting(self):
        assert str(Money.of("9.5")) == "9.50 USD"

    def test_comparison_operators(self):
        assert Money.of("5") < Money.of("10")
        assert Money.of("10") >= Money.of("10")
        assert Money.of("10.01") > Money.of("10")

    def test_comparing_currencies_rejected(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money.of("1", "EUR") > Money.of("1")


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_valid_quantity(self):
        assert Quantity(5).value == 5

    @pytest.mark.parametrize("value", [0, -3])
    def test_non_positive_rejected(self, value):
        with pytest.raises(ValidationError, match="positive integer"):
            Quantity(value)

    def test_bool_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(True)


# ── Address ──────────────────────────────────────────────────────────────────


class TestAddress:

    def test_valid_address(self):
        address = Address("1 Main St", "Springfield", "IL", "62701", "US")
        assert address.zip_code == "62701"

    def test_blank_zip_rejected(self):
        with pytest.raises(ValidationError, match="ZIP code is required"):
            Address("1 Main St", "Springfield", "IL", "  ", "US")
