"""Shared plumbing for CLI commands: store lifecycle and error mapping."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import click

from storefront.application.dto import OrderDTO
from storefront.domain.exceptions import DomainException, InfrastructureError
from storefront.infrastructure.bootstrap import Store, open_store

logger = logging.getLogger(__name__)


@contextmanager
def store_session() -> Iterator[Store]:
    """Open the store for one command.

    Domain errors are shown verbatim.  Infrastructure errors are logged
    in full and shown to the user as a generic message.
    """
    try:
        with open_store() as store:
            yield store
    except DomainException as exc:
        raise click.ClickException(str(exc))
    except InfrastructureError as exc:
        logger.error(f"{type(exc).__name__}: {exc}", extra={"error_code": exc.code})
        raise click.ClickException(exc.user_message)


def display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.order_number}  (status={dto.status}, payment={dto.payment_status})")
    click.echo(f"ID:       {dto.id}")
    if dto.user:
        click.echo(f"Customer: {dto.user.first_name} {dto.user.last_name} <{dto.user.email}>")
    if dto.address:
        click.echo(f"Ship to:  {dto.address.full_name}, {dto.address.line}")
    click.echo(f"Payment:  {dto.payment_method}")
    click.echo(f"Created:  {dto.created_at}")
    if dto.notes:
        click.echo(f"Notes:    {dto.notes}")
    click.echo()

    click.echo(f"  {'Product':<40} {'Qty':>5} {'Price':>12} {'Total':>12}")
    click.echo(f"  {'-'*72}")
    for item in dto.items:
        variant = "/".join(v for v in (item.size, item.color) if v)
        name = f"{item.product_name} ({variant})" if variant else item.product_name
        click.echo(
            f"  {name:<40} {item.quantity:>5} {item.unit_price:>12} {item.line_total:>12}"
        )
    click.echo(f"  {'-'*72}")
    click.echo(f"  {'Subtotal':<47} {dto.subtotal:>24}")
    click.echo(f"  {'Shipping':<47} {dto.shipping_cost:>24}")
    click.echo(f"  {'Tax (18% GST)':<47} {dto.tax_amount:>24}")
    click.echo(f"  {'Order Total':<47} {dto.total_amount:>24}")


def display_page(page) -> None:
    """One line per order plus the pagination footer."""
    if not page.orders:
        click.echo("No orders found.")
    else:
        click.echo(f"{'Order':<26} {'Status':<10} {'Payment':<9} {'Total':>12}  Created")
        click.echo("-" * 80)
        for dto in page.orders:
            click.echo(
                f"{dto.order_number:<26} {dto.status:<10} {dto.payment_status:<9} "
                f"{dto.total_amount:>12}  {dto.created_at}"
            )
    click.echo(
        f"Page {page.current_page} of {page.pages} "
        f"({page.total} orders, {page.limit} per page)"
    )
