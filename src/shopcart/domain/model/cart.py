"""CustomerShoppingCart aggregate, the core of the domain.

The cart is an aggregate root that owns its items and a copy of the
applied voucher.  Totals are derived from them on every read, so they
can never drift from the items and voucher that produced them.

Every mutation checks its preconditions first and raises before
touching state, so a rejected operation leaves the cart unchanged.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from shopcart.domain.exceptions import EntityNotFoundError, ValidationError
from shopcart.domain.model.value_objects import Money
from shopcart.domain.model.voucher import Voucher
from shopcart.domain.service.voucher_policy import VoucherPolicy

# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MIN_QUANTITY_ITEM = 1
MAX_QUANTITY_ITEM = 15


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class CartItem:
    """A product placed in a cart.

    ``name``, ``image`` and ``price`` are a snapshot of catalog data taken
    when the item was added.
    """

    product_id: str
    name: str
    price: Money
    quantity: int
    image: str = ""
    shopping_cart_id: str | None = None
    id: str = field(default_factory=_new_id)

    @property
    def line_total(self) -> Money:
        return self.price * self.quantity

    def validation_errors(self) -> list[str]:
        errors = item_field_errors(self.product_id, self.name, self.quantity)
        if self.price.is_zero:
            errors.append(f"The value of {self.name} must be greater than 0")
        return errors


def item_field_errors(product_id: str, name: str, quantity: int) -> list[str]:
    """Messages for the item fields that do not depend on its price."""
    errors: list[str] = []
    if not product_id:
        errors.append("Invalid product id")
    if not name or not name.strip():
        errors.append("The product name was not informed")
    errors.extend(quantity_errors(name, quantity))
    return errors


def quantity_errors(name: str, quantity: int) -> list[str]:
    """Messages for a quantity outside [MIN_QUANTITY_ITEM, MAX_QUANTITY_ITEM]."""
    if quantity < MIN_QUANTITY_ITEM:
        return [f"The minimum quantity for {name} is {MIN_QUANTITY_ITEM}"]
    if quantity > MAX_QUANTITY_ITEM:
        return [f"The maximum quantity of {name} is {MAX_QUANTITY_ITEM}"]
    return []


@dataclass(frozen=True)
class ValidationResult:
    errors: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass
class CustomerShoppingCart:
    """Aggregate root for a customer's in-progress cart.

    Use ``CustomerShoppingCart.create()`` for new carts.  The ``__init__``
    stays simple so the repository can reconstitute stored carts.
    ``version`` is the concurrency token managed by the repository.
    """

    customer_id: str
    id: str = field(default_factory=_new_id)
    items: list[CartItem] = field(default_factory=list)
    voucher: Voucher | None = None
    version: int = 0

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def create(customer_id: str) -> CustomerShoppingCart:
        if not customer_id or not customer_id.strip():
            raise ValidationError("Customer not recognized")
        return CustomerShoppingCart(customer_id=customer_id)

    # --- Item management ------------------------------------------------------

    def add_item(self, item: CartItem) -> None:
        """Add *item*, or merge its quantity into the existing line."""
        existing = self.get_product_by_id(item.product_id)

        if existing is None:
            errors = item.validation_errors()
            if errors:
                raise ValidationError(*errors)
            item.shopping_cart_id = self.id
            self.items.append(item)
            return

        # The added quantity must be valid on its own, not only the sum
        if item.quantity < MIN_QUANTITY_ITEM:
            errors = quantity_errors(item.name, item.quantity)
        else:
            errors = quantity_errors(existing.name, existing.quantity + item.quantity)
        if errors:
            raise ValidationError(*errors)
        existing.quantity += item.quantity

    def update_unit(self, item: CartItem, new_quantity: int) -> None:
        self._assert_contains(item)
        errors = quantity_errors(item.name, new_quantity)
        if errors:
            raise ValidationError(*errors)
        item.quantity = new_quantity

    def remove_item(self, item: CartItem) -> None:
        """Remove *item*.  An emptied cart is kept, not deleted."""
        self._assert_contains(item)
        self.items = [i for i in self.items if i is not item]

    def has_item(self, candidate: CartItem) -> bool:
        return self.get_product_by_id(candidate.product_id) is not None

    def get_product_by_id(self, product_id: str) -> CartItem | None:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    # --- Voucher --------------------------------------------------------------

    def apply_voucher(
        self,
        voucher: Voucher,
        policy: VoucherPolicy,
        previously_redeemed: bool = False,
    ) -> None:
        """Apply *voucher*, replacing any voucher applied earlier.

        Raises VoucherIneligibleError (state unchanged) when *policy*
        refuses it.
        """
        policy.ensure_applicable(voucher, previously_redeemed=previously_redeemed)
        self.voucher = voucher

    # --- Computed properties --------------------------------------------------

    @property
    def amount(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.line_total
        return result

    @property
    def discount(self) -> Money:
        return VoucherPolicy.compute_discount(self.amount, self.voucher)

    @property
    def total(self) -> Money:
        amount = self.amount
        discount = self.discount
        if discount > amount:
            return Money.zero(amount.currency)
        return amount - discount

    @property
    def has_voucher(self) -> bool:
        return self.voucher is not None

    # --- Validation -----------------------------------------------------------

    def is_valid(self) -> ValidationResult:
        errors: list[str] = []
        if not self.customer_id or not self.customer_id.strip():
            errors.append("Customer not recognized")
        for item in self.items:
            errors.extend(item.validation_errors())
        if self.discount > self.amount:
            errors.append("The cart discount cannot exceed the cart amount")
        return ValidationResult(tuple(errors))

    # --- Internal helpers -----------------------------------------------------

    def _assert_contains(self, item: CartItem) -> None:
        if not any(i is item for i in self.items):
            raise EntityNotFoundError("The item is not in cart")
