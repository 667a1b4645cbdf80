import click

from shopcart.infrastructure.cli.cart_commands import (
    cart_add,
    cart_apply_voucher,
    cart_remove,
    cart_show,
    cart_update,
)
from shopcart.infrastructure.logging import configure_logging


@click.group()
def cli() -> None:
    """Shopcart: customer shopping cart service"""
    configure_logging()


@cli.group()
def cart() -> None:
    """Manage a customer's cart."""


# Register subcommands
cart.add_command(cart_add)
cart.add_command(cart_apply_voucher)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_update)
