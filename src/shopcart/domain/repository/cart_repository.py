"""Abstract repository for the CustomerShoppingCart aggregate.

Defined in the domain layer so the domain never depends on
infrastructure.  Unlike a plain ``save()`` repository, writes are
explicit commands that stay pending until ``commit_all()`` applies them
atomically.  An instance is scoped to a single request: pending commands
are never shared between requests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from shopcart.domain.model.cart import CartItem, CustomerShoppingCart


class CartRepository(ABC):

    @abstractmethod
    def find_cart(self, customer_id: str) -> CustomerShoppingCart | None:
        """Return the customer's cart with its items, or None."""

    @abstractmethod
    def upsert_cart(self, cart: CustomerShoppingCart) -> None:
        """Stage an insert or update of the cart row."""

    @abstractmethod
    def upsert_item(self, item: CartItem) -> None:
        """Stage an insert or update of a single item row."""

    @abstractmethod
    def delete_item(self, item: CartItem) -> None:
        """Stage the removal of a single item row."""

    @abstractmethod
    def commit_all(self) -> int:
        """Apply every staged command atomically.

        Returns the number of affected rows.  Raises
        ConcurrentModificationError if a staged cart is stale; in that
        case nothing is written.
        """
