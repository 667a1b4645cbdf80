"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from shopcart.domain.exceptions import ValidationError
from shopcart.domain.model.value_objects import Money


class TestMoney:

    def test_defaults_to_usd(self):
        m = Money(Decimal("10.50"))
        assert m.amount == Decimal("10.50")
        assert m.currency == "USD"

    def test_of_factory_from_string(self):
        assert Money.of("25.99").amount == Decimal("25.99")

    def test_of_factory_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("ten dollars")

    @pytest.mark.parametrize("raw", ["NaN", "sNaN", "Infinity", "-Infinity"])
    def test_of_factory_rejects_non_finite(self, raw):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of(raw)

    def test_non_finite_decimal_rejected(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money(Decimal("NaN"))

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money.of("-1")

    def test_float_amount_rejected(self):
        with pytest.raises(ValidationError, match="must be a Decimal"):
            Money(10.5)  # type: ignore[arg-type]

    def test_line_arithmetic(self):
        assert Money.of("7.50") * 3 + Money.of("2.50") == Money.of("25.00")

    def test_subtraction_going_negative_rejected(self):
        with pytest.raises(ValidationError, match="negative amount"):
            Money.of("5") - Money.of("10")

    def test_currency_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money(Decimal("10"), "USD") + Money(Decimal("5"), "EUR")

    def test_zero(self):
        assert Money.zero().is_zero
        assert not Money.of("0.01").is_zero
        assert str(Money.zero()) == "$0.00"


class TestMoneyPercent:

    def test_ten_percent_of_two_hundred(self):
        assert Money.of("200").percent(Decimal("10")) == Money.of("20.00")

    def test_rounds_half_up_to_cents(self):
        # 12.345 -> 12.35
        assert Money.of("123.45").percent(Decimal("10")).amount == Decimal("12.35")

    def test_full_percentage_is_whole_amount(self):
        assert Money.of("49.99").percent(Decimal("100")) == Money.of("49.99")

    def test_keeps_currency(self):
        eur = Money(Decimal("80"), "EUR")
        assert eur.percent(Decimal("25")) == Money(Decimal("20.00"), "EUR")
