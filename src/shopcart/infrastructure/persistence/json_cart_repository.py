"""JSON-file-backed implementation of CartRepository.

The file holds two collections, ``carts`` and ``items``.  Commands are
staged on the instance and written in one atomic file replace by
``commit_all()``, after the version of every staged cart has been checked
against the stored one.  The read, check and write happen under a file
lock, so processes sharing the data file cannot interleave commits.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import structlog
from filelock import FileLock

from shopcart.domain.exceptions import ConcurrentModificationError
from shopcart.domain.model.cart import CartItem, CustomerShoppingCart
from shopcart.domain.model.value_objects import Money
from shopcart.domain.model.voucher import DiscountType, Voucher
from shopcart.domain.repository.cart_repository import CartRepository

logger = structlog.get_logger(__name__)

_FILE_LOCKS: dict[Path, FileLock] = {}
_FILE_LOCKS_GUARD = threading.Lock()


def lock_for(path: Path) -> FileLock:
    """The inter-process lock guarding *path*, held in a sidecar ``.lock`` file.

    One instance is shared per data file within a process, so a thread that
    already holds it can take it again.
    """
    resolved = path.resolve()
    with _FILE_LOCKS_GUARD:
        lock = _FILE_LOCKS.get(resolved)
        if lock is None:
            lock = FileLock(str(resolved.with_name(resolved.name + ".lock")))
            _FILE_LOCKS[resolved] = lock
        return lock


class JsonCartRepository(CartRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._pending_carts: dict[str, CustomerShoppingCart] = {}
        self._pending_items: dict[str, CartItem] = {}
        self._pending_deletes: dict[str, CartItem] = {}
        self._ensure_file()

    # --- CartRepository interface ---------------------------------------------

    def find_cart(self, customer_id: str) -> CustomerShoppingCart | None:
        data = self._load_raw()
        for raw in data["carts"]:
            if raw["customer_id"] == customer_id:
                items = [i for i in data["items"] if i["shopping_cart_id"] == raw["id"]]
                return self._to_domain(raw, items)
        return None

    def upsert_cart(self, cart: CustomerShoppingCart) -> None:
        self._pending_carts[cart.id] = cart

    def upsert_item(self, item: CartItem) -> None:
        self._pending_deletes.pop(item.id, None)
        self._pending_items[item.id] = item

    def delete_item(self, item: CartItem) -> None:
        self._pending_items.pop(item.id, None)
        self._pending_deletes[item.id] = item

    def commit_all(self) -> int:
        try:
            with lock_for(self._file_path):
                return self._commit_locked()
        finally:
            self._pending_carts.clear()
            self._pending_items.clear()
            self._pending_deletes.clear()

    # --- Commit ---------------------------------------------------------------

    def _commit_locked(self) -> int:
        data = self._load_raw()
        carts = {raw["id"]: raw for raw in data["carts"]}
        items = {raw["id"]: raw for raw in data["items"]}

        # Check every staged cart before writing anything
        for cart in self._pending_carts.values():
            self._check_version(cart, carts)

        affected = 0
        for cart in self._pending_carts.values():
            carts[cart.id] = self._cart_to_raw(cart, version=cart.version + 1)
            affected += 1
        for item in self._pending_items.values():
            items[item.id] = self._item_to_raw(item)
            affected += 1
        for item in self._pending_deletes.values():
            if items.pop(item.id, None) is not None:
                affected += 1

        if affected:
            self._persist_raw({"carts": list(carts.values()), "items": list(items.values())})
            for cart in self._pending_carts.values():
                cart.version += 1

        logger.debug("Cart changes committed", file=str(self._file_path), affected=affected)
        return affected

    @staticmethod
    def _check_version(cart: CustomerShoppingCart, stored_carts: dict[str, dict]) -> None:
        stored = stored_carts.get(cart.id)
        if stored is None:
            duplicate = any(
                raw["customer_id"] == cart.customer_id for raw in stored_carts.values()
            )
            if cart.version != 0 or duplicate:
                raise ConcurrentModificationError(
                    "The shopping cart was modified by another request"
                )
        elif stored["version"] != cart.version:
            raise ConcurrentModificationError(
                "The shopping cart was modified by another request"
            )

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _cart_to_raw(cart: CustomerShoppingCart, version: int) -> dict:
        voucher = cart.voucher
        return {
            "id": cart.id,
            "customer_id": cart.customer_id,
            "version": version,
            "voucher": None if voucher is None else {
                "code": voucher.code,
                "discount_type": voucher.discount_type.value,
                "percentage": None if voucher.percentage is None else str(voucher.percentage),
                "value": None if voucher.value is None else str(voucher.value.amount),
                "currency": None if voucher.value is None else voucher.value.currency,
                "expiration_date": voucher.expiration_date.isoformat(),
                "active": voucher.active,
                "first_time_use_only": voucher.first_time_use_only,
            },
        }

    @staticmethod
    def _item_to_raw(item: CartItem) -> dict:
        return {
            "id": item.id,
            "shopping_cart_id": item.shopping_cart_id,
            "product_id": item.product_id,
            "name": item.name,
            "image": item.image,
            "price": str(item.price.amount),
            "currency": item.price.currency,
            "quantity": item.quantity,
        }

    @staticmethod
    def _to_domain(raw: dict, raw_items: list[dict]) -> CustomerShoppingCart:
        items = [
            CartItem(
                id=i["id"],
                shopping_cart_id=i["shopping_cart_id"],
                product_id=i["product_id"],
                name=i["name"],
                image=i.get("image", ""),
                price=Money(Decimal(i["price"]), i.get("currency", "USD")),
                quantity=i["quantity"],
            )
            for i in raw_items
        ]

        voucher = None
        raw_voucher = raw.get("voucher")
        if raw_voucher is not None:
            voucher = Voucher(
                code=raw_voucher["code"],
                discount_type=DiscountType(raw_voucher["discount_type"]),
                percentage=(
                    None if raw_voucher["percentage"] is None
                    else Decimal(raw_voucher["percentage"])
                ),
                value=(
                    None if raw_voucher["value"] is None
                    else Money(Decimal(raw_voucher["value"]), raw_voucher.get("currency") or "USD")
                ),
                expiration_date=datetime.fromisoformat(raw_voucher["expiration_date"]),
                active=raw_voucher["active"],
                first_time_use_only=raw_voucher["first_time_use_only"],
            )

        return CustomerShoppingCart(
            id=raw["id"],
            customer_id=raw["customer_id"],
            items=items,
            voucher=voucher,
            version=raw["version"],
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict[str, list[dict]]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, data: dict[str, list[dict]]) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self._file_path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(json.dumps(data, indent=2) + "\n")
            os.replace(tmp_name, self._file_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(
                json.dumps({"carts": [], "items": []}) + "\n", encoding="utf-8"
            )
