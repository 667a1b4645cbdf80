"""Application service: Get Cart use case (query)."""

from __future__ import annotations

from shopcart.application.dto import CartDTO
from shopcart.application.identity import CustomerIdentity
from shopcart.application.pipeline import to_item_dto
from shopcart.domain.model.cart import CustomerShoppingCart
from shopcart.domain.repository.cart_repository import CartRepository


class GetCartHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    def handle(self, identity: CustomerIdentity) -> CartDTO:
        """Return the customer's cart, or an empty one that is not stored."""
        cart = self._cart_repo.find_cart(identity.customer_id)
        if cart is None:
            cart = CustomerShoppingCart.create(identity.customer_id)
        return to_cart_dto(cart)


def to_cart_dto(cart: CustomerShoppingCart) -> CartDTO:
    return CartDTO(
        id=cart.id,
        customer_id=cart.customer_id,
        items=[to_item_dto(item) for item in cart.items],
        amount=str(cart.amount),
        discount=str(cart.discount),
        total=str(cart.total),
        has_voucher=cart.has_voucher,
        voucher_code=cart.voucher.code if cart.voucher else None,
    )
