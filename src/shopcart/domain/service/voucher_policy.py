"""Domain service: Voucher Policy.

Decides whether a voucher may be applied and how much it takes off a
cart amount.  Pure logic: the clock is injected and redemption history
is supplied by the caller, so nothing here touches storage.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

from shopcart.domain.exceptions import VoucherIneligibleError
from shopcart.domain.model.value_objects import Money
from shopcart.domain.model.voucher import DiscountType, Voucher


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VoucherPolicy:

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock

    def ensure_applicable(self, voucher: Voucher, previously_redeemed: bool = False) -> None:
        """Raise VoucherIneligibleError listing every reason *voucher* is refused.

        ``previously_redeemed`` only matters for first-time-use vouchers;
        tracking redemptions belongs to whoever calls the policy.
        """
        reasons: list[str] = []
        if not voucher.active:
            reasons.append(f"Voucher {voucher.code} is not active")
        if voucher.expiration_date < self._clock():
            reasons.append(f"Voucher {voucher.code} has expired")
        if voucher.first_time_use_only and previously_redeemed:
            reasons.append(f"Voucher {voucher.code} can only be used once per customer")
        if reasons:
            raise VoucherIneligibleError(*reasons)

    @staticmethod
    def compute_discount(amount: Money, voucher: Voucher | None) -> Money:
        """Discount *voucher* grants on *amount*; never more than *amount*."""
        if voucher is None:
            return Money.zero(amount.currency)

        if voucher.discount_type == DiscountType.PERCENTAGE:
            return amount.percent(voucher.percentage)  # type: ignore[arg-type]

        value = voucher.value  # type: ignore[assignment]
        return value if value <= amount else amount
