"""CLI commands for customers placing and managing their own orders."""

from __future__ import annotations

import click

from storefront.application.cancel_order import CancelOrderHandler
from storefront.application.create_order import CreateOrderHandler
from storefront.application.dto import OrderItemSpec
from storefront.application.list_orders import ListOrdersHandler
from storefront.application.show_order import ShowOrderHandler
from storefront.infrastructure.cli.common import display_order, display_page, store_session


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse 'PRODUCT:QTY[:SIZE[:COLOR]],...' into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for entry in raw.split(","):
        parts = [p.strip() for p in entry.strip().split(":")]
        if len(parts) < 2 or len(parts) > 4 or not parts[0]:
            raise click.BadParameter(
                f"Invalid item format '{entry.strip()}'. "
                "Expected 'PRODUCT:QTY[:SIZE[:COLOR]]'."
            )
        product_id, qty_str = parts[0], parts[1]
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        size = parts[2] if len(parts) > 2 and parts[2] else None
        color = parts[3] if len(parts) > 3 and parts[3] else None
        specs.append(OrderItemSpec(product_id=product_id, quantity=qty, size=size, color=color))
    return specs


@click.command("create")
@click.option("--user", "user_id", required=True, help="Customer user ID.")
@click.option("--address", "address_id", required=True, help="Shipping address ID.")
@click.option("--items", required=True, help="Items as 'PRODUCT:QTY[:SIZE[:COLOR]],...'.")
@click.option("--payment", "payment_method", required=True, help="Payment method, e.g. COD.")
@click.option("--notes", default=None, help="Free-text note for the order.")
@click.option("--idempotency-key", default=None, help="Repeat-safe request key.")
def order_create(
    user_id: str,
    address_id: str,
    items: str,
    payment_method: str,
    notes: str | None,
    idempotency_key: str | None,
) -> None:
    """Place a new order and reserve its stock."""
    specs = _parse_items(items)

    with store_session() as store:
        handler = CreateOrderHandler(store.unit_of_work)
        dto = handler.handle(
            user_id=user_id,
            address_id=address_id,
            item_specs=specs,
            payment_method=payment_method,
            notes=notes,
            idempotency_key=idempotency_key,
        )

    click.echo("Order placed.")
    display_order(dto)


@click.command("list")
@click.option("--user", "user_id", required=True, help="Customer user ID.")
@click.option("--page", default=1, show_default=True, type=int)
@click.option("--limit", default=10, show_default=True, type=int)
def order_list(user_id: str, page: int, limit: int) -> None:
    """List your orders, newest first."""
    with store_session() as store:
        result = ListOrdersHandler(store.unit_of_work).handle(user_id, page=page, limit=limit)

    display_page(result)


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
@click.option("--user", "user_id", required=True, help="Customer user ID.")
def order_show(order_id: str, user_id: str) -> None:
    """Show one of your orders."""
    with store_session() as store:
        dto = ShowOrderHandler(store.unit_of_work).handle(order_id, user_id=user_id)

    display_order(dto)


@click.command("cancel")
@click.option("--id", "order_id", required=True, help="Order ID to cancel.")
@click.option("--user", "user_id", required=True, help="Customer user ID.")
def order_cancel(order_id: str, user_id: str) -> None:
    """Cancel a pending order and return its stock."""
    with store_session() as store:
        CancelOrderHandler(store.unit_of_work).handle(order_id, user_id)

    click.echo("Order cancelled successfully")
