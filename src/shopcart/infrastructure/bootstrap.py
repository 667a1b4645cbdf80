"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.  Repositories are built
per request because they hold that request's pending commands.
"""

from __future__ import annotations

import os
from pathlib import Path

from shopcart.domain.service.voucher_policy import VoucherPolicy
from shopcart.infrastructure.persistence.json_cart_repository import (
    JsonCartRepository,
)

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_FILE = Path(__file__).resolve().parents[3] / "data" / "carts.json"

DATA_FILE_ENV = "SHOPCART_DATA_FILE"


def data_file() -> Path:
    override = os.getenv(DATA_FILE_ENV)
    return Path(override) if override else _DEFAULT_DATA_FILE


def cart_repository() -> JsonCartRepository:
    return JsonCartRepository(data_file())


def voucher_policy() -> VoucherPolicy:
    return VoucherPolicy()
