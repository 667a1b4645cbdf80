"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the outer surface (CLI, HTTP adapter) and the
application layer without exposing domain internals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

PROBLEM_FIELD = "Messages"


@dataclass(frozen=True)
class CartItemInput:
    """Input: an item as posted by the customer.

    Update requests only carry ``product_id`` and ``quantity``.
    """

    product_id: str
    quantity: int
    name: str = ""
    price: str = "0"
    image: str = ""


@dataclass(frozen=True)
class VoucherInput:
    """Input: a voucher as resolved by the caller from its code."""

    code: str
    discount_type: str  # "PERCENTAGE" or "FIXED_VALUE"
    expiration_date: datetime
    percentage: str | None = None
    value: str | None = None
    active: bool = True
    first_time_use_only: bool = False


@dataclass(frozen=True)
class CartItemDTO:
    product_id: str
    name: str
    image: str
    quantity: int
    price: str  # formatted, e.g. "$10.00"
    line_total: str


@dataclass(frozen=True)
class CartDTO:
    id: str
    customer_id: str
    items: list[CartItemDTO]
    amount: str
    discount: str
    total: str
    has_voucher: bool
    voucher_code: str | None = None


class ResultStatus(Enum):
    """HTTP-equivalent outcome of an operation."""

    OK = 200
    CREATED = 201
    NO_CONTENT = 204
    BAD_REQUEST = 400
    NOT_FOUND = 404


@dataclass(frozen=True)
class OperationResult:
    """Output of every mutating operation: success, or all error messages."""

    status: ResultStatus
    messages: tuple[str, ...] = ()
    payload: Any = field(default=None)

    @property
    def succeeded(self) -> bool:
        return not self.messages

    def to_problem(self) -> dict[str, list[str]]:
        return {PROBLEM_FIELD: list(self.messages)}
