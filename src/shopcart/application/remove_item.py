"""Application service: Remove Item use case.

Removing the last item leaves an empty cart in storage.
"""

from __future__ import annotations

import structlog

from shopcart.application.dto import OperationResult
from shopcart.application.errors import ErrorAccumulator
from shopcart.application.identity import CustomerIdentity
from shopcart.application.pipeline import CartCommandHandler

logger = structlog.get_logger(__name__)


class RemoveItemHandler(CartCommandHandler):

    def handle(self, identity: CustomerIdentity, product_id: str) -> OperationResult:
        errors = ErrorAccumulator()

        cart = self._resolve_cart(identity, errors)
        if cart is None:
            return self._respond(errors)

        item = self._bind_target(cart, product_id, errors)
        if item is None:
            return self._respond(errors)

        self._mutate(errors, cart.remove_item, item)
        self._validate(cart, errors)
        if errors:
            return self._respond(errors)

        self._cart_repo.delete_item(item)
        self._cart_repo.upsert_cart(cart)
        self._persist(errors)

        if not errors:
            logger.info(
                "Item removed from cart",
                customer_id=identity.customer_id,
                product_id=product_id,
                remaining_items=len(cart.items),
            )
        return self._respond(errors)
