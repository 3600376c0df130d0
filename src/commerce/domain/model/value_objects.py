"""Immutable value types used by the order and payment aggregates.

Each one validates itself on construction, so an instance that exists is
always valid.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import total_ordering

from commerce.domain.exceptions import ValidationError

CENT = Decimal("0.01")
DEFAULT_CURRENCY = "USD"


@total_ordering
@dataclass(frozen=True)
class Money:
    """A non-negative Decimal amount in one ISO-4217 currency.

    Amounts are quantized to cents (half-up) on construction; floats are
    refused outright.  Combining or comparing two different currencies is
    a ValidationError.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise ValidationError(f"Money amount cannot be negative, got {self.amount}")
        if len(self.currency) != 3 or not self.currency.isalpha():
            raise ValidationError("Currency must be 3 characters")
        object.__setattr__(self, "amount", self.amount.quantize(CENT, ROUND_HALF_UP))
        object.__setattr__(self, "currency", self.currency.upper())

    @staticmethod
    def of(amount: str | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Build Money from client input, e.g. ``Money.of("19.99", "eur")``."""
        try:
            value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        except InvalidOperation:
            raise ValidationError(f"Invalid money amount: {amount!r}") from None
        return Money(value, currency)

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> Money:
        return Money(Decimal(0), currency)

    @property
    def is_zero(self) -> bool:
        return not self.amount

    def __add__(self, other: Money) -> Money:
        self._same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._same_currency(other)
        return self.amount < other.amount

    def percent(self, rate: Decimal) -> Money:
        """``rate`` of this amount, where ``rate`` is a fraction like 0.10."""
        return Money(self.amount * rate, self.currency)

    def _same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(f"Cannot combine {self.currency} with {other.currency}")

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"


@dataclass(frozen=True)
class Quantity:
    """Units of one product on an order line."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value < 1:
            raise ValidationError("Quantity must be a positive integer")


_ADDRESS_LABELS = {
    "street": "Street",
    "city": "City",
    "state": "State",
    "zip_code": "ZIP code",
    "country": "Country",
}


@dataclass(frozen=True)
class Address:
    """Postal shipping address; every field is required."""

    street: str
    city: str
    state: str
    zip_code: str
    country: str

    def __post_init__(self) -> None:
        for attr, label in _ADDRESS_LABELS.items():
            value = getattr(self, attr)
            if not value or not value.strip():
                raise ValidationError(f"{label} is required")
