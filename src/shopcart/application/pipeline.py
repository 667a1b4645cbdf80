"""Shared stages of the cart orchestration pipeline.

Every mutating use case runs the same sequence::

    resolve cart -> bind target -> mutate -> validate -> persist -> respond

Stages never raise domain errors to the caller; they record them in the
request's ErrorAccumulator.  Storage commands are only issued once the
accumulator is empty, so a failed request never writes anything.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog

from shopcart.application.dto import CartItemDTO, OperationResult, ResultStatus
from shopcart.application.errors import ErrorAccumulator
from shopcart.application.identity import CustomerIdentity
from shopcart.domain.exceptions import (
    ConcurrentModificationError,
    DomainException,
    EntityNotFoundError,
    PersistenceFailure,
)
from shopcart.domain.model.cart import CartItem, CustomerShoppingCart
from shopcart.domain.repository.cart_repository import CartRepository

logger = structlog.get_logger(__name__)


class CartCommandHandler:
    """Base class for handlers that mutate a customer's cart."""

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    # --- Stages ---------------------------------------------------------------

    def _resolve_cart(
        self,
        identity: CustomerIdentity,
        errors: ErrorAccumulator,
    ) -> CustomerShoppingCart | None:
        cart = self._cart_repo.find_cart(identity.customer_id)
        if cart is None:
            errors.record(EntityNotFoundError("Shopping cart not found"))
        return cart

    @staticmethod
    def _bind_target(
        cart: CustomerShoppingCart,
        product_id: str,
        errors: ErrorAccumulator,
    ) -> CartItem | None:
        item = cart.get_product_by_id(product_id)
        if item is None:
            errors.record(EntityNotFoundError("The item is not in cart"))
        return item

    @staticmethod
    def _mutate(errors: ErrorAccumulator, operation: Callable[..., Any], *args: Any) -> bool:
        try:
            operation(*args)
        except DomainException as exc:
            errors.record(exc)
            return False
        return True

    @staticmethod
    def _validate(cart: CustomerShoppingCart, errors: ErrorAccumulator) -> None:
        result = cart.is_valid()
        for message in result.errors:
            errors.add(message)

    def _persist(self, errors: ErrorAccumulator) -> None:
        """Commit staged commands; a commit with no effect is an error."""
        try:
            affected = self._cart_repo.commit_all()
        except ConcurrentModificationError as exc:
            logger.warning("Cart commit rejected", reason=str(exc))
            errors.record(exc)
            return

        if affected <= 0:
            logger.error("Cart commit affected no rows")
            errors.record(PersistenceFailure("Error saving data"))

    @staticmethod
    def _respond(
        errors: ErrorAccumulator,
        success_status: ResultStatus = ResultStatus.NO_CONTENT,
        payload: Any = None,
    ) -> OperationResult:
        if errors:
            status = ResultStatus.NOT_FOUND if errors.is_not_found else ResultStatus.BAD_REQUEST
            logger.info("Cart request rejected", status=status.value, errors=list(errors.messages))
            return OperationResult(status=status, messages=errors.messages)
        return OperationResult(status=success_status, payload=payload)


# --- Mapping -------------------------------------------------------------------


def to_item_dto(item: CartItem) -> CartItemDTO:
    return CartItemDTO(
        product_id=item.product_id,
        name=item.name,
        image=item.image,
        quantity=item.quantity,
        price=str(item.price),
        line_total=str(item.line_total),
    )
