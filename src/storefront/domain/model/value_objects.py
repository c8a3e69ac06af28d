"""Money and Quantity.

Both are frozen and validated on construction, so a negative price or a
zero-unit order line cannot be represented at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import total_ordering

from storefront.domain.exceptions import ValidationError

CENTS = Decimal("0.01")
CURRENCY_SYMBOLS = {"INR": "₹"}


@total_ordering
@dataclass(frozen=True)
class Money:
    """A non-negative Decimal amount in one currency (rupees by default).

    Amounts keep whatever precision they were built with; only tax
    calculation rounds, via ``percent()``.
    """

    amount: Decimal
    currency: str = "INR"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount.is_signed() and self.amount != 0:
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        """Build from anything Decimal understands, via ``str`` for floats."""
        try:
            return Money(Decimal(str(amount)))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0.00"))

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + self._same_currency(other).amount, self.currency)

    def __mul__(self, units: int) -> Money:
        if not isinstance(units, int):
            raise TypeError(f"Can only multiply Money by int, got {type(units).__name__}")
        return Money(self.amount * units, self.currency)

    def percent(self, rate: Decimal) -> Money:
        """``amount * rate``, rounded half-up to whole paise."""
        return Money(
            (self.amount * rate).quantize(CENTS, rounding=ROUND_HALF_UP),
            self.currency,
        )

    def __lt__(self, other: Money) -> bool:
        return self.amount < self._same_currency(other).amount

    def __str__(self) -> str:
        symbol = CURRENCY_SYMBOLS.get(self.currency, f"{self.currency} ")
        return f"{symbol}{self.amount:.2f}"

    def _same_currency(self, other: Money) -> Money:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )
        return other


@dataclass(frozen=True)
class Quantity:
    """Units of one product on an order line; always a positive int."""

    value: int

    def __post_init__(self) -> None:
        # bool is an int subclass; True must not order one unit.
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value < 1:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)
