"""Unit tests for the CustomerShoppingCart aggregate and its business rules."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from shopcart.domain.exceptions import (
    EntityNotFoundError,
    ValidationError,
    VoucherIneligibleError,
)
from shopcart.domain.model.cart import CartItem, CustomerShoppingCart
from shopcart.domain.model.value_objects import Money
from shopcart.domain.model.voucher import DiscountType, Voucher
from shopcart.domain.service.voucher_policy import VoucherPolicy

NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)
POLICY = VoucherPolicy(clock=lambda: NOW)


def _make_item(product_id: str = "A", qty: int = 1, price: str = "10.00", name: str = "Widget") -> CartItem:
    """Helper to build a valid cart item."""
    return CartItem(product_id=product_id, name=name, price=Money.of(price), quantity=qty)


def _voucher(pct: str = "10", days: int = 30, active: bool = True) -> Voucher:
    return Voucher(
        code="X",
        discount_type=DiscountType.PERCENTAGE,
        percentage=Decimal(pct),
        expiration_date=NOW + timedelta(days=days),
        active=active,
    )


def _assert_amount_invariant(cart: CustomerShoppingCart) -> None:
    expected = sum((i.price.amount * i.quantity for i in cart.items), Decimal("0"))
    assert cart.amount.amount == expected


class TestCartCreation:

    def test_new_cart_is_empty(self):
        cart = CustomerShoppingCart.create("customer-1")
        assert cart.customer_id == "customer-1"
        assert cart.items == []
        assert cart.amount == Money.zero()
        assert cart.discount == Money.zero()
        assert not cart.has_voucher
        assert cart.version == 0

    def test_ids_are_unique(self):
        assert CustomerShoppingCart.create("c").id != CustomerShoppingCart.create("c").id

    def test_blank_customer_rejected(self):
        with pytest.raises(ValidationError, match="Customer not recognized"):
            CustomerShoppingCart.create(" ")


class TestAddItem:

    def test_insert_sets_back_reference(self):
        cart = CustomerShoppingCart.create("c")
        item = _make_item(qty=2)
        cart.add_item(item)
        assert cart.items == [item]
        assert item.shopping_cart_id == cart.id
        assert cart.amount == Money.of("20")

    def test_same_product_merges_quantity(self):
        cart = CustomerShoppingCart.create("c")
        cart.add_item(_make_item(qty=2))
        cart.add_item(_make_item(qty=3))
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5
        assert cart.amount == Money.of("50")

    def test_merge_matches_single_add(self):
        merged = CustomerShoppingCart.create("c")
        merged.add_item(_make_item(qty=2))
        merged.add_item(_make_item(qty=3))

        single = CustomerShoppingCart.create("c")
        single.add_item(_make_item(qty=5))

        assert [(i.product_id, i.quantity) for i in merged.items] == [
            (i.product_id, i.quantity) for i in single.items
        ]
        assert merged.amount == single.amount

    def test_items_keep_insertion_order(self):
        cart = CustomerShoppingCart.create("c")
        for pid in ("B", "A", "C"):
            cart.add_item(_make_item(product_id=pid))
        assert [i.product_id for i in cart.items] == ["B", "A", "C"]

    @pytest.mark.parametrize("qty", [1, 7, 15])
    def test_quantity_in_bounds_accepted(self, qty):
        cart = CustomerShoppingCart.create("c")
        cart.add_item(_make_item(qty=qty))
        assert cart.items[0].quantity == qty

    def test_zero_quantity_rejected_without_change(self):
        cart = CustomerShoppingCart.create("c")
        with pytest.raises(ValidationError, match="minimum quantity for Widget is 1"):
            cart.add_item(_make_item(qty=0))
        assert cart.items == []

    def test_sixteen_rejected_without_change(self):
        cart = CustomerShoppingCart.create("c")
        with pytest.raises(ValidationError, match="maximum quantity of Widget is 15"):
            cart.add_item(_make_item(qty=16))
        assert cart.items == []

    def test_merge_over_limit_rejected_without_change(self):
        cart = CustomerShoppingCart.create("c")
        cart.add_item(_make_item(qty=10))
        with pytest.raises(ValidationError, match="maximum quantity"):
            cart.add_item(_make_item(qty=6))
        assert cart.items[0].quantity == 10
        assert cart.amount == Money.of("100")

    def test_merge_with_zero_quantity_rejected(self):
        cart = CustomerShoppingCart.create("c")
        cart.add_item(_make_item(qty=3))
        with pytest.raises(ValidationError, match="minimum quantity"):
            cart.add_item(_make_item(qty=0))
        assert cart.items[0].quantity == 3


class TestUpdateUnit:

    def test_replaces_quantity(self):
        cart = CustomerShoppingCart.create("c")
        item = _make_item(qty=2)
        cart.add_item(item)
        cart.update_unit(item, 7)
        assert item.quantity == 7
        assert cart.amount == Money.of("70")

    @pytest.mark.parametrize("qty", [0, 16, -1])
    def test_out_of_bounds_rejected_without_change(self, qty):
        cart = CustomerShoppingCart.create("c")
        item = _make_item(qty=2)
        cart.add_item(item)
        with pytest.raises(ValidationError):
            cart.update_unit(item, qty)
        assert item.quantity == 2

    def test_item_must_belong_to_cart(self):
        cart = CustomerShoppingCart.create("c")
        cart.add_item(_make_item(qty=2))
        stranger = _make_item(qty=2)  # same product, different entity
        with pytest.raises(EntityNotFoundError, match="not in cart"):
            cart.update_unit(stranger, 3)


class TestRemoveItem:

    def test_removes_by_identity(self):
        cart = CustomerShoppingCart.create("c")
        a, b = _make_item("A", 1), _make_item("B", 2, price="5")
        cart.add_item(a)
        cart.add_item(b)
        cart.remove_item(a)
        assert cart.items == [b]
        assert cart.amount == Money.of("10")

    def test_removing_last_item_keeps_empty_cart(self):
        cart = CustomerShoppingCart.create("c")
        item = _make_item()
        cart.add_item(item)
        cart.remove_item(item)
        assert cart.items == []
        assert cart.amount.is_zero

    def test_absent_item_rejected(self):
        cart = CustomerShoppingCart.create("c")
        with pytest.raises(EntityNotFoundError):
            cart.remove_item(_make_item())


class TestLookups:

    def test_has_item_matches_by_product(self):
        cart = CustomerShoppingCart.create("c")
        cart.add_item(_make_item("A"))
        assert cart.has_item(_make_item("A"))
        assert not cart.has_item(_make_item("B"))

    def test_get_product_by_id(self):
        cart = CustomerShoppingCart.create("c")
        item = _make_item("A")
        cart.add_item(item)
        assert cart.get_product_by_id("A") is item
        assert cart.get_product_by_id("missing") is None


class TestApplyVoucher:

    def test_percentage_discount(self):
        cart = CustomerShoppingCart.create("c")
        cart.add_item(_make_item(qty=5))
        cart.apply_voucher(_voucher("10"), POLICY)
        assert cart.has_voucher
        assert cart.discount == Money.of("5")
        assert cart.total == Money.of("45")

    def test_discount_follows_later_mutations(self):
        cart = CustomerShoppingCart.create("c")
        item = _make_item(qty=5)
        cart.add_item(item)
        cart.apply_voucher(_voucher("10"), POLICY)
        cart.update_unit(item, 10)
        assert cart.discount == Money.of("10")

    def test_fixed_value_capped(self):
        cart = CustomerShoppingCart.create("c")
        cart.add_item(_make_item(qty=5))
        flat = Voucher(
            code="BIG",
            discount_type=DiscountType.FIXED_VALUE,
            value=Money.of("1000"),
            expiration_date=NOW + timedelta(days=1),
        )
        cart.apply_voucher(flat, POLICY)
        assert cart.discount == Money.of("50")
        assert cart.total.is_zero

    def test_expired_voucher_leaves_cart_unchanged(self):
        cart = CustomerShoppingCart.create("c")
        cart.add_item(_make_item(qty=5))
        with pytest.raises(VoucherIneligibleError):
            cart.apply_voucher(_voucher(days=-1), POLICY)
        assert cart.voucher is None
        assert not cart.has_voucher
        assert cart.discount.is_zero

    def test_rejected_voucher_keeps_previous_one(self):
        cart = CustomerShoppingCart.create("c")
        cart.add_item(_make_item(qty=5))
        first = _voucher("10")
        cart.apply_voucher(first, POLICY)
        with pytest.raises(VoucherIneligibleError):
            cart.apply_voucher(_voucher("50", active=False), POLICY)
        assert cart.voucher is first
        assert cart.discount == Money.of("5")

    def test_new_voucher_replaces_previous(self):
        cart = CustomerShoppingCart.create("c")
        cart.add_item(_make_item(qty=5))
        cart.apply_voucher(_voucher("10"), POLICY)
        cart.apply_voucher(_voucher("20"), POLICY)
        assert cart.discount == Money.of("10")


class TestIsValid:

    def test_valid_cart(self):
        cart = CustomerShoppingCart.create("c")
        cart.add_item(_make_item(qty=3))
        result = cart.is_valid()
        assert result.is_valid
        assert result.errors == ()

    def test_empty_cart_is_valid(self):
        assert CustomerShoppingCart.create("c").is_valid().is_valid

    def test_reports_every_violated_rule(self):
        cart = CustomerShoppingCart(customer_id="c")
        # Reconstituted state bypasses the mutation checks
        cart.items.append(_make_item("A", qty=20, price="0", name="Broken"))
        cart.items.append(CartItem(product_id="", name="", price=Money.of("1"), quantity=1))
        result = cart.is_valid()
        assert not result.is_valid
        assert result.errors == (
            "The maximum quantity of Broken is 15",
            "The value of Broken must be greater than 0",
            "Invalid product id",
            "The product name was not informed",
        )


class TestAmountInvariant:

    def test_holds_after_every_mutation(self):
        cart = CustomerShoppingCart.create("c")
        a = _make_item("A", 2, "10.00")
        b = _make_item("B", 1, "3.33")

        cart.add_item(a)
        _assert_amount_invariant(cart)
        cart.add_item(b)
        _assert_amount_invariant(cart)
        cart.add_item(_make_item("A", 4, "10.00"))
        _assert_amount_invariant(cart)
        cart.update_unit(b, 9)
        _assert_amount_invariant(cart)
        cart.apply_voucher(_voucher("15"), POLICY)
        _assert_amount_invariant(cart)
        cart.remove_item(a)
        _assert_amount_invariant(cart)
        assert cart.amount == Money.of("29.97")
