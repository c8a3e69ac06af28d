"""CLI commands for store administrators."""

from __future__ import annotations

import click

from storefront.application.list_orders import ListOrdersHandler
from storefront.application.show_order import ShowOrderHandler
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.application.update_payment_status import UpdatePaymentStatusHandler
from storefront.domain.model.order_status import (
    OrderStatus,
    PaymentStatus,
    parse_order_status,
    parse_payment_status,
)
from storefront.infrastructure.cli.common import display_order, display_page, store_session

ORDER_STATUS_CHOICE = click.Choice([s.value for s in OrderStatus], case_sensitive=False)
PAYMENT_STATUS_CHOICE = click.Choice([s.value for s in PaymentStatus], case_sensitive=False)


@click.command("orders")
@click.option("--status", default=None, type=ORDER_STATUS_CHOICE, help="Only orders in this status.")
@click.option("--page", default=1, show_default=True, type=int)
@click.option("--limit", default=10, show_default=True, type=int)
def admin_orders(status: str | None, page: int, limit: int) -> None:
    """List every customer's orders, newest first."""
    with store_session() as store:
        result = ListOrdersHandler(store.unit_of_work).handle_admin(
            status=parse_order_status(status) if status else None,
            page=page,
            limit=limit,
        )

    display_page(result)


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
def admin_show(order_id: str) -> None:
    """Show any order."""
    with store_session() as store:
        dto = ShowOrderHandler(store.unit_of_work).handle(order_id)

    display_order(dto)


@click.command("set-status")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--status", required=True, type=ORDER_STATUS_CHOICE, help="New order status.")
def admin_set_status(order_id: str, status: str) -> None:
    """Move an order to a new status."""
    with store_session() as store:
        dto = UpdateOrderStatusHandler(store.unit_of_work).handle(
            order_id, parse_order_status(status),
        )

    click.echo(f"Order {dto.order_number} is now {dto.status}")


@click.command("set-payment")
@click.option("--id", "order_id", required=True, help="Order ID.")
@click.option("--status", required=True, type=PAYMENT_STATUS_CHOICE, help="New payment status.")
def admin_set_payment(order_id: str, status: str) -> None:
    """Record a payment status change."""
    with store_session() as store:
        dto = UpdatePaymentStatusHandler(store.unit_of_work).handle(
            order_id, parse_payment_status(status),
        )

    click.echo(f"Order {dto.order_number} payment is now {dto.payment_status}")
