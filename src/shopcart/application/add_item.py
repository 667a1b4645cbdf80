"""Application service: Add Item use case.

Creates the customer's cart on first use.  Adding a product that is
already in the cart merges the quantities, so the handler decides here
whether the stored item is a new row or an update of the existing one.
"""

from __future__ import annotations

import structlog

from shopcart.application.dto import CartItemInput, OperationResult, ResultStatus
from shopcart.application.errors import ErrorAccumulator
from shopcart.application.identity import CustomerIdentity
from shopcart.application.pipeline import CartCommandHandler, to_item_dto
from shopcart.domain.exceptions import DomainException
from shopcart.domain.model.cart import (
    CartItem,
    CustomerShoppingCart,
    item_field_errors,
)
from shopcart.domain.model.value_objects import Money

logger = structlog.get_logger(__name__)


class AddItemHandler(CartCommandHandler):

    def handle(self, identity: CustomerIdentity, item_input: CartItemInput) -> OperationResult:
        errors = ErrorAccumulator()

        try:
            item = self._to_item(item_input)
        except DomainException as exc:
            # Report the remaining field problems alongside the price error
            errors.record(exc)
            for message in item_field_errors(
                item_input.product_id, item_input.name, item_input.quantity
            ):
                errors.add(message)
            return self._respond(errors)

        cart = self._cart_repo.find_cart(identity.customer_id)
        if cart is None:
            cart = CustomerShoppingCart.create(identity.customer_id)
            is_new_cart = True
        else:
            is_new_cart = False

        merged = cart.has_item(item)
        self._mutate(errors, cart.add_item, item)
        self._validate(cart, errors)
        if errors:
            return self._respond(errors)

        stored_item = cart.get_product_by_id(item.product_id) if merged else item
        self._cart_repo.upsert_cart(cart)
        self._cart_repo.upsert_item(stored_item)  # type: ignore[arg-type]
        self._persist(errors)

        if not errors:
            logger.info(
                "Item added to cart",
                customer_id=identity.customer_id,
                cart_id=cart.id,
                product_id=item.product_id,
                new_cart=is_new_cart,
                merged=merged,
            )
        return self._respond(
            errors,
            ResultStatus.CREATED,
            payload=to_item_dto(stored_item),  # type: ignore[arg-type]
        )

    @staticmethod
    def _to_item(item_input: CartItemInput) -> CartItem:
        return CartItem(
            product_id=item_input.product_id,
            name=item_input.name,
            price=Money.of(item_input.price),
            quantity=item_input.quantity,
            image=item_input.image,
        )
