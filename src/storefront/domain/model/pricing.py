"""Order pricing: subtotal, flat-rate shipping and GST.

Pricing is a pure function of the line items so the same cart always
produces the same breakdown.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from storefront.domain.model.value_objects import Money, Quantity

FREE_SHIPPING_THRESHOLD = Money(Decimal("500.00"))
FLAT_SHIPPING_COST = Money(Decimal("50.00"))
TAX_RATE = Decimal("0.18")  # 18% GST


@dataclass(frozen=True)
class PriceBreakdown:

    subtotal: Money
    shipping_cost: Money
    tax_amount: Money

    @property
    def total_amount(self) -> Money:
        return self.subtotal + self.shipping_cost + self.tax_amount


def shipping_for(subtotal: Money) -> Money:
    if subtotal >= FREE_SHIPPING_THRESHOLD:
        return Money.zero()
    return FLAT_SHIPPING_COST


def price_subtotal(subtotal: Money) -> PriceBreakdown:
    return PriceBreakdown(
        subtotal=subtotal,
        shipping_cost=shipping_for(subtotal),
        tax_amount=subtotal.percent(TAX_RATE),
    )


def price_lines(lines: Iterable[tuple[Money, Quantity]]) -> PriceBreakdown:
    """Price a cart given ``(unit_price, quantity)`` pairs."""
    subtotal = Money.zero()
    for unit_price, quantity in lines:
        subtotal = subtotal + unit_price * quantity.value
    return price_subtotal(subtotal)
