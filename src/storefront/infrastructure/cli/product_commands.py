"""CLI commands for the product catalog."""

from __future__ import annotations

import click

from storefront.infrastructure.cli.common import store_session


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    with store_session() as store:
        with store.unit_of_work() as uow:
            products = uow.products.list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<36} {'SKU':<20} {'Name':<40} {'Price':>10} {'Stock':>6}")
    click.echo("-" * 116)
    for p in products:
        name = p.name if p.is_active else f"{p.name} (inactive)"
        click.echo(f"{p.id:<36} {p.sku or '-':<20} {name:<40} {str(p.price):>10} {p.stock:>6}")
