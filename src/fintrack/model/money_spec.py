from __future__ import annotations

from decimal import Decimal

import pytest

from fintrack.errors import DomainRuleViolation
from fintrack.model.money import floor_money, same_money, to_decimal, to_money, to_percentage


class DescribeToDecimal:
    def it_should_avoid_binary_float_noise(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def it_should_reject_text_that_is_not_a_number(self):
        with pytest.raises(DomainRuleViolation):
            to_decimal("ten")

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "-inf", Decimal("NaN")])
    def it_should_reject_non_finite_values(self, value):
        with pytest.raises(DomainRuleViolation):
            to_decimal(value)


class DescribeToMoney:
    def it_should_round_half_up_to_cents(self):
        assert to_money("2.345") == Decimal("2.35")
        assert to_money("-2.345") == Decimal("-2.35")

    def it_should_pad_whole_numbers(self):
        assert str(to_money(100)) == "100.00"

    def it_should_reject_infinity_before_quantizing(self):
        with pytest.raises(DomainRuleViolation):
            to_money("Infinity")


class DescribeFloorMoney:
    def it_should_truncate_towards_zero(self):
        assert floor_money(Decimal("100") / 3) == Decimal("33.33")
        assert floor_money(Decimal("-100") / 3) == Decimal("-33.33")


class DescribeToPercentage:
    def it_should_keep_four_places(self):
        assert to_percentage(Decimal(1) / 3) == Decimal("0.3333")


class DescribeSameMoney:
    def it_should_compare_at_cent_precision(self):
        assert same_money(Decimal("10.001"), Decimal("10.00"))
        assert not same_money(Decimal("10.01"), Decimal("10.00"))
