"""Customer identity resolution.

Runs before any handler: authentication happens upstream and hands over
a raw customer id, which is verified here once and then passed
explicitly to every handler.
"""

from __future__ import annotations

from dataclasses import dataclass

from shopcart.domain.exceptions import AuthenticationError


@dataclass(frozen=True)
class CustomerIdentity:
    customer_id: str


def resolve_identity(raw_customer_id: str | None) -> CustomerIdentity:
    if raw_customer_id is None or not raw_customer_id.strip():
        raise AuthenticationError("Customer is not authenticated")
    return CustomerIdentity(customer_id=raw_customer_id.strip())
