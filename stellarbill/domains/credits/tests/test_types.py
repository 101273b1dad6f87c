"""Tests for usage-to-credit conversion."""

from decimal import Decimal

import pytest

from stellarbill.domains.credits.types import calculate_credits


class TestCalculateCredits:
    def test_exactly_divisible_amount(self):
        assert calculate_credits(1000, unit_divisor=10, units_per_credit=1) == 100

    def test_partial_unit_rounds_up(self):
        assert calculate_credits(1005, unit_divisor=10, units_per_credit=1) == 101

    def test_zero_usage_is_zero_credits(self):
        assert calculate_credits(0, unit_divisor=10, units_per_credit=1) == 0

    def test_missing_divisor_and_units_count_as_one(self):
        assert calculate_credits(7) == 7
        assert calculate_credits(7, unit_divisor=0, units_per_credit=None) == 7

    def test_units_per_credit_applied_after_divisor(self):
        # 2500 / 10 = 250 units, 250 / 100 per credit = 2.5 -> 3
        assert calculate_credits(2500, unit_divisor=10, units_per_credit=100) == 3

    @pytest.mark.parametrize("raw", ["0.3", Decimal("0.3")])
    def test_decimal_amounts_are_exact(self, raw):
        # 0.3 / 0.1-style float drift must not add a credit
        assert calculate_credits(raw, unit_divisor=None, units_per_credit=None) == 1
        assert calculate_credits(Decimal("3.0"), unit_divisor=3) == 1

    def test_negative_usage_rejected(self):
        with pytest.raises(ValueError):
            calculate_credits(-1)
