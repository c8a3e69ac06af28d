"""CLI commands for schema setup, sample data and connectivity."""

from __future__ import annotations

import click

from storefront.infrastructure.cli.common import store_session


@click.command("init")
def db_init() -> None:
    """Create any missing tables."""
    with store_session() as store:
        store.create_schema()
    click.echo("Schema ready.")


@click.command("seed")
def db_seed() -> None:
    """Create the schema and load the sample catalog and accounts."""
    with store_session() as store:
        store.create_schema()
        result = store.load_sample_data()

    click.echo(f"Customer ID: {result.customer_id}")
    click.echo(f"Address ID:  {result.address_id}")
    click.echo(f"Admin ID:    {result.admin_id}")
    for sku, product_id in result.product_ids.items():
        click.echo(f"Product {sku:<20} {product_id}")


@click.command("health")
def db_health() -> None:
    """Run a liveness query and report the connection status."""
    with store_session() as store:
        healthy = store.connections.health_check()
        status = store.connections.status()

    click.echo(f"connected:   {'yes' if status.connected else 'no'}")
    click.echo(f"retries:     {status.retries}/{status.max_retries}")
    if not healthy:
        raise click.ClickException("Database health check failed")
    click.echo("Database OK")
