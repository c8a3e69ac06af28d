"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.model.customer import Address, UserSummary
from storefront.domain.model.order import Order, OrderItem


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: one cart line (product ID + quantity + optional variant)."""

    product_id: str
    quantity: int
    size: str | None = None
    color: str | None = None


@dataclass(frozen=True)
class OrderItemDTO:
    """Output: a single line item as displayed to the user."""

    product_id: str
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "₹1200.00"
    line_total: str
    size: str | None = None
    color: str | None = None

    @staticmethod
    def from_item(item: OrderItem) -> OrderItemDTO:
        return OrderItemDTO(
            product_id=item.product_id,
            product_name=item.product_name or item.product_id,
            quantity=item.quantity.value,
            unit_price=str(item.unit_price),
            line_total=str(item.line_total),
            size=item.size,
            color=item.color,
        )


@dataclass(frozen=True)
class AddressDTO:

    id: str
    full_name: str
    line: str
    phone: str | None = None

    @staticmethod
    def from_address(address: Address) -> AddressDTO:
        return AddressDTO(
            id=address.id,
            full_name=address.full_name,
            line=address.one_line(),
            phone=address.phone,
        )


@dataclass(frozen=True)
class UserSummaryDTO:

    first_name: str
    last_name: str
    email: str

    @staticmethod
    def from_summary(user: UserSummary) -> UserSummaryDTO:
        return UserSummaryDTO(
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
        )


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: str
    order_number: str
    user_id: str
    status: str
    payment_status: str
    payment_method: str
    items: list[OrderItemDTO]
    subtotal: str
    shipping_cost: str
    tax_amount: str
    total_amount: str
    created_at: str
    notes: str | None = None
    address: AddressDTO | None = None
    user: UserSummaryDTO | None = None

    @staticmethod
    def from_order(
        order: Order,
        address: Address | None = None,
        user: UserSummary | None = None,
    ) -> OrderDTO:
        return OrderDTO(
            id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            status=order.status.value,
            payment_status=order.payment_status.value,
            payment_method=order.payment_method,
            items=[OrderItemDTO.from_item(item) for item in order.items],
            subtotal=str(order.subtotal),
            shipping_cost=str(order.shipping_cost),
            tax_amount=str(order.tax_amount),
            total_amount=str(order.total_amount),
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
            notes=order.notes,
            address=AddressDTO.from_address(address) if address else None,
            user=UserSummaryDTO.from_summary(user) if user else None,
        )


@dataclass(frozen=True)
class OrderPageDTO:
    """Output: one page of orders plus pagination metadata."""

    orders: list[OrderDTO]
    total: int
    pages: int
    current_page: int
    limit: int
