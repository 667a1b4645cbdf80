"""Application service: Update Item use case."""

from __future__ import annotations

import structlog

from shopcart.application.dto import CartItemInput, OperationResult
from shopcart.application.errors import ErrorAccumulator
from shopcart.application.identity import CustomerIdentity
from shopcart.application.pipeline import CartCommandHandler
from shopcart.domain.exceptions import IdentityMismatchError

logger = structlog.get_logger(__name__)


class UpdateItemHandler(CartCommandHandler):

    def handle(
        self,
        identity: CustomerIdentity,
        product_id: str,
        item_input: CartItemInput,
    ) -> OperationResult:
        """Replace the quantity of *product_id* in the customer's cart.

        ``product_id`` addresses the item; ``item_input`` must refer to
        the same product.
        """
        errors = ErrorAccumulator()

        if item_input.product_id != product_id:
            errors.record(IdentityMismatchError("Current item is not the same sent item"))
            return self._respond(errors)

        cart = self._resolve_cart(identity, errors)
        if cart is None:
            return self._respond(errors)

        item = self._bind_target(cart, product_id, errors)
        if item is None:
            return self._respond(errors)

        self._mutate(errors, cart.update_unit, item, item_input.quantity)
        self._validate(cart, errors)
        if errors:
            return self._respond(errors)

        self._cart_repo.upsert_item(item)
        self._cart_repo.upsert_cart(cart)
        self._persist(errors)

        if not errors:
            logger.info(
                "Cart item quantity updated",
                customer_id=identity.customer_id,
                product_id=product_id,
                quantity=item.quantity,
            )
        return self._respond(errors)
