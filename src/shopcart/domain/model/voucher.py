"""Voucher value object.

Vouchers are owned by a separate marketing system. The cart keeps a
frozen copy that is sufficient to compute the discount, never a live
reference.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from shopcart.domain.exceptions import ValidationError
from shopcart.domain.model.value_objects import Money


class DiscountType(Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED_VALUE = "FIXED_VALUE"


@dataclass(frozen=True)
class Voucher:
    """A named discount instrument.

    ``percentage`` is used iff ``discount_type`` is PERCENTAGE and
    ``value`` iff it is FIXED_VALUE.  ``active``, ``expiration_date`` and
    ``first_time_use_only`` are policy flags checked by VoucherPolicy.
    """

    code: str
    discount_type: DiscountType
    expiration_date: datetime
    percentage: Decimal | None = None
    value: Money | None = None
    active: bool = True
    first_time_use_only: bool = False

    def __post_init__(self) -> None:
        if not self.code or not self.code.strip():
            raise ValidationError("Voucher code is required")
        if self.expiration_date.tzinfo is None:
            raise ValidationError("Voucher expiration date must be timezone-aware")

        if self.discount_type == DiscountType.PERCENTAGE:
            if self.percentage is None:
                raise ValidationError("Percentage vouchers require a percentage")
            if not self.percentage.is_finite() or not (
                Decimal("0") < self.percentage <= Decimal("100")
            ):
                raise ValidationError("Voucher percentage must be between 0 and 100")
        elif self.value is None:
            raise ValidationError("Fixed value vouchers require a value")
