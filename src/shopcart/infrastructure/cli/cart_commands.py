"""CLI commands for the shopping cart."""

from __future__ import annotations

import json
from datetime import datetime, time, timezone

import click

from shopcart.application.add_item import AddItemHandler
from shopcart.application.apply_voucher import ApplyVoucherHandler
from shopcart.application.dto import CartDTO, CartItemInput, OperationResult, VoucherInput
from shopcart.application.get_cart import GetCartHandler
from shopcart.application.identity import CustomerIdentity, resolve_identity
from shopcart.application.remove_item import RemoveItemHandler
from shopcart.application.update_item import UpdateItemHandler
from shopcart.domain.exceptions import DomainException
from shopcart.infrastructure.bootstrap import cart_repository, voucher_policy

_DATE_FORMAT = "%Y-%m-%d"
_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


class ExpirationDateTime(click.DateTime):
    """UTC expiration.  A bare date means the last instant of that day."""

    name = "expiration"

    def __init__(self) -> None:
        super().__init__(formats=[_DATE_FORMAT, _DATETIME_FORMAT])

    def convert(self, value, param, ctx) -> datetime:
        parsed = super().convert(value, param, ctx)
        if isinstance(value, str) and _is_bare_date(value):
            parsed = datetime.combine(parsed.date(), time.max)
        return parsed.replace(tzinfo=timezone.utc)


def _is_bare_date(value: str) -> bool:
    try:
        datetime.strptime(value, _DATE_FORMAT)
    except ValueError:
        return False
    return True


customer_option = click.option(
    "--customer",
    envvar="SHOPCART_CUSTOMER",
    help="Authenticated customer ID (or set SHOPCART_CUSTOMER).",
)


def _identity(customer: str | None) -> CustomerIdentity:
    try:
        return resolve_identity(customer)
    except DomainException as exc:
        raise click.ClickException(str(exc))


def _report(result: OperationResult, message: str) -> None:
    """Echo *message* on success, or fail with the problem payload."""
    if not result.succeeded:
        raise click.ClickException(json.dumps(result.to_problem()))
    click.echo(message)


def _display_cart(dto: CartDTO) -> None:
    click.echo(f"Cart {dto.id}")
    click.echo(f"Customer: {dto.customer_id}")
    click.echo()

    if not dto.items:
        click.echo("  (empty)")
    else:
        click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
        click.echo(f"  {'-'*47}")
        for item in dto.items:
            click.echo(
                f"  {item.name:<20} {item.quantity:>5} {item.price:>10} {item.line_total:>10}"
            )
        click.echo(f"  {'-'*47}")

    click.echo(f"  {'Amount':<27} {dto.amount:>20}")
    if dto.has_voucher:
        click.echo(f"  {'Discount (' + str(dto.voucher_code) + ')':<27} {dto.discount:>20}")
    click.echo(f"  {'Total':<27} {dto.total:>20}")


@click.command("show")
@customer_option
def cart_show(customer: str | None) -> None:
    """Show the customer's cart."""
    identity = _identity(customer)
    dto = GetCartHandler(cart_repo=cart_repository()).handle(identity)
    _display_cart(dto)


@click.command("add")
@customer_option
@click.option("--product", required=True, help="Product ID.")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Unit price (e.g. 10.00).")
@click.option("--quantity", default=1, show_default=True, type=int, help="Units to add.")
@click.option("--image", default="", help="Product image reference.")
def cart_add(
    customer: str | None,
    product: str,
    name: str,
    price: str,
    quantity: int,
    image: str,
) -> None:
    """Add an item to the cart (merges with an existing line)."""
    identity = _identity(customer)
    handler = AddItemHandler(cart_repo=cart_repository())
    result = handler.handle(
        identity,
        CartItemInput(product_id=product, name=name, price=price, quantity=quantity, image=image),
    )
    _report(result, f"Added {quantity} x {name} to cart")


@click.command("update")
@customer_option
@click.option("--product", required=True, help="Product ID of the item to update.")
@click.option("--quantity", required=True, type=int, help="New quantity.")
@click.option(
    "--body-product",
    default=None,
    help="Product ID sent in the payload (defaults to --product).",
)
def cart_update(
    customer: str | None,
    product: str,
    quantity: int,
    body_product: str | None,
) -> None:
    """Replace the quantity of an item in the cart."""
    identity = _identity(customer)
    handler = UpdateItemHandler(cart_repo=cart_repository())
    result = handler.handle(
        identity,
        product,
        CartItemInput(product_id=body_product or product, quantity=quantity),
    )
    _report(result, f"Item {product} updated to {quantity}")


@click.command("remove")
@customer_option
@click.option("--product", required=True, help="Product ID of the item to remove.")
def cart_remove(customer: str | None, product: str) -> None:
    """Remove an item from the cart."""
    identity = _identity(customer)
    handler = RemoveItemHandler(cart_repo=cart_repository())
    result = handler.handle(identity, product)
    _report(result, f"Item {product} removed")


@click.command("apply-voucher")
@customer_option
@click.option("--code", required=True, help="Voucher code.")
@click.option(
    "--type",
    "discount_type",
    required=True,
    type=click.Choice(["PERCENTAGE", "FIXED_VALUE"], case_sensitive=False),
    help="Discount type.",
)
@click.option("--percentage", default=None, help="Percentage off (PERCENTAGE vouchers).")
@click.option("--value", default=None, help="Amount off (FIXED_VALUE vouchers).")
@click.option(
    "--expires",
    required=True,
    type=ExpirationDateTime(),
    help="Expiration in UTC. A bare date (YYYY-MM-DD) expires at the end of that day.",
)
@click.option("--inactive", is_flag=True, default=False, help="Voucher is not active.")
@click.option("--first-time-only", is_flag=True, default=False, help="Single use per customer.")
def cart_apply_voucher(
    customer: str | None,
    code: str,
    discount_type: str,
    percentage: str | None,
    value: str | None,
    expires: datetime,
    inactive: bool,
    first_time_only: bool,
) -> None:
    """Apply a discount voucher to the cart."""
    identity = _identity(customer)
    handler = ApplyVoucherHandler(cart_repo=cart_repository(), policy=voucher_policy())
    result = handler.handle(
        identity,
        VoucherInput(
            code=code,
            discount_type=discount_type.upper(),
            expiration_date=expires,
            percentage=percentage,
            value=value,
            active=not inactive,
            first_time_use_only=first_time_only,
        ),
    )
    _report(result, f"Voucher {code} applied")
