"""Application service: Apply Voucher use case.

Whether a first-time-use voucher was already redeemed is answered by an
external lookup; without one, no redemption is assumed.
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal, InvalidOperation

import structlog

from shopcart.application.dto import OperationResult, VoucherInput
from shopcart.application.errors import ErrorAccumulator
from shopcart.application.identity import CustomerIdentity
from shopcart.application.pipeline import CartCommandHandler
from shopcart.domain.exceptions import DomainException, ValidationError
from shopcart.domain.model.value_objects import Money
from shopcart.domain.model.voucher import DiscountType, Voucher
from shopcart.domain.repository.cart_repository import CartRepository
from shopcart.domain.service.voucher_policy import VoucherPolicy

logger = structlog.get_logger(__name__)

# (customer_id, voucher_code) -> already redeemed?
RedemptionLookup = Callable[[str, str], bool]


def _never_redeemed(customer_id: str, code: str) -> bool:
    return False


class ApplyVoucherHandler(CartCommandHandler):

    def __init__(
        self,
        cart_repo: CartRepository,
        policy: VoucherPolicy | None = None,
        redemption_lookup: RedemptionLookup = _never_redeemed,
    ) -> None:
        super().__init__(cart_repo)
        self._policy = policy or VoucherPolicy()
        self._redemption_lookup = redemption_lookup

    def handle(self, identity: CustomerIdentity, voucher_input: VoucherInput) -> OperationResult:
        errors = ErrorAccumulator()

        cart = self._resolve_cart(identity, errors)
        if cart is None:
            return self._respond(errors)

        try:
            voucher = self._to_voucher(voucher_input)
        except DomainException as exc:
            errors.record(exc)
            return self._respond(errors)

        previously_redeemed = voucher.first_time_use_only and self._redemption_lookup(
            identity.customer_id, voucher.code
        )
        self._mutate(errors, cart.apply_voucher, voucher, self._policy, previously_redeemed)
        self._validate(cart, errors)
        if errors:
            return self._respond(errors)

        self._cart_repo.upsert_cart(cart)
        self._persist(errors)

        if not errors:
            logger.info(
                "Voucher applied to cart",
                customer_id=identity.customer_id,
                code=voucher.code,
                discount=str(cart.discount),
            )
        return self._respond(errors)

    @staticmethod
    def _to_voucher(voucher_input: VoucherInput) -> Voucher:
        try:
            discount_type = DiscountType(voucher_input.discount_type.upper())
        except ValueError as exc:
            raise ValidationError(
                f"Unknown discount type: {voucher_input.discount_type!r}"
            ) from exc

        percentage = None
        if voucher_input.percentage is not None:
            try:
                percentage = Decimal(voucher_input.percentage)
            except InvalidOperation as exc:
                raise ValidationError(
                    f"Invalid voucher percentage: {voucher_input.percentage!r}"
                ) from exc
            if not percentage.is_finite():
                raise ValidationError(
                    f"Invalid voucher percentage: {voucher_input.percentage!r}"
                )

        value = Money.of(voucher_input.value) if voucher_input.value is not None else None

        return Voucher(
            code=voucher_input.code,
            discount_type=discount_type,
            expiration_date=voucher_input.expiration_date,
            percentage=percentage,
            value=value,
            active=voucher_input.active,
            first_time_use_only=voucher_input.first_time_use_only,
        )
