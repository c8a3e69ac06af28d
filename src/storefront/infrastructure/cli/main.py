import click

from storefront.infrastructure.cli.admin_commands import (
    admin_orders,
    admin_set_payment,
    admin_set_status,
    admin_show,
)
from storefront.infrastructure.cli.db_commands import db_health, db_init, db_seed
from storefront.infrastructure.cli.order_commands import (
    order_cancel,
    order_create,
    order_list,
    order_show,
)
from storefront.infrastructure.cli.product_commands import product_list
from storefront.infrastructure.config import get_settings
from storefront.infrastructure.observability import setup_logging


@click.group()
def cli() -> None:
    """Storefront — order fulfillment"""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)


@cli.group()
def db() -> None:
    """Set up and check the database."""


@cli.group()
def product() -> None:
    """Browse the catalog."""


@cli.group()
def order() -> None:
    """Place and manage your orders."""


@cli.group()
def admin() -> None:
    """Administer all orders."""


# Register subcommands
db.add_command(db_health)
db.add_command(db_init)
db.add_command(db_seed)
product.add_command(product_list)
order.add_command(order_cancel)
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_show)
admin.add_command(admin_orders)
admin.add_command(admin_set_payment)
admin.add_command(admin_set_status)
admin.add_command(admin_show)
