"""
Tests for the refund calculator.

No database: orders are plain objects with total_amount and points_used.
"""

from decimal import Decimal
from fractions import Fraction
from types import SimpleNamespace

import pytest

from returns.calculator import cash_paid_ratio, compute_refund, exact_cash_paid_ratio


def make_order(total, points_used):
    return SimpleNamespace(total_amount=Decimal(total), points_used=points_used)


class TestComputeRefund:
    """Tests for compute_refund()."""

    def test_partial_return_on_order_paid_partly_with_points(self):
        """Should refund 1900 points for 20,000 of a 95%-cash order."""
        order = make_order("100000", 500)

        result = compute_refund(order, [Decimal("20000")], pesos_per_point=10)

        assert result.monetary_refund == Decimal("20000")
        assert result.points_discount == Decimal("5000")
        assert result.actual_paid == Decimal("95000")
        assert result.refund_percentage == Decimal("0.95")
        assert result.points_to_refund == 1900

    def test_monetary_refund_sums_unit_prices(self):
        """Should add up every returned grant's price."""
        order = make_order("100000", 0)

        result = compute_refund(
            order,
            [Decimal("20000.00"), Decimal("20000.00"), Decimal("60000.00")],
            pesos_per_point=10,
        )

        assert result.monetary_refund == Decimal("100000.00")

    def test_full_order_return(self):
        """Should refund floor(actual_paid / pesos_per_point) when everything comes back."""
        order = make_order("100000", 500)

        result = compute_refund(order, [Decimal("100000")], pesos_per_point=10)

        assert result.monetary_refund == order.total_amount
        assert result.points_to_refund == 9500

    def test_zero_points_order(self):
        """Should refund no points when none were used, whatever the amount."""
        order = make_order("100000", 0)

        result = compute_refund(order, [Decimal("99990")], pesos_per_point=10)

        assert result.points_to_refund == 0
        assert result.monetary_refund == Decimal("99990")

    def test_zero_total_does_not_divide_by_zero(self):
        """Should treat a free order as 0% cash-paid."""
        order = make_order("0", 50)

        result = compute_refund(order, [Decimal("0")], pesos_per_point=10)

        assert result.refund_percentage == Decimal("0")
        assert result.points_to_refund == 0

    def test_inner_floor_truncates_sub_point_amounts(self):
        """Should drop the pesos that don't make up a whole point before scaling."""
        order = make_order("100000", 500)

        result = compute_refund(order, [Decimal("19999")], pesos_per_point=10)

        # floor(19999 / 10) = 1999, 1999 * 0.95 = 1899.05
        assert result.points_to_refund == 1899

    def test_outer_floor_truncates_fractional_points(self):
        """Should floor the scaled points, never round them up."""
        order = make_order("3000", 100)

        result = compute_refund(order, [Decimal("1000")], pesos_per_point=10)

        # 2/3 cash-paid: 100 * 0.666... = 66.66...
        assert result.points_to_refund == 66

    @pytest.mark.parametrize(
        "refund,expected",
        [
            ("30000", 1000),  # floor(3000 * 1/3) lands exactly on a whole point
            ("30", 1),  # floor(3 * 1/3)
            ("90", 3),
        ],
    )
    def test_repeating_ratio_is_not_rounded_down(self, refund, expected):
        """Should scale by the exact cash-paid share when it has no finite decimal form."""
        order = make_order("30000", 2000)

        result = compute_refund(order, [Decimal(refund)], pesos_per_point=10)

        assert result.points_to_refund == expected

    def test_uses_configured_rate_by_default(self, settings):
        """Should read POINTS_PESOS_PER_POINT when no rate is passed."""
        settings.POINTS_PESOS_PER_POINT = 20
        order = make_order("100000", 500)

        result = compute_refund(order, [Decimal("20000")])

        # discount 10,000 -> 90% cash; floor(20000 / 20) = 1000 -> 900
        assert result.pesos_per_point == 20
        assert result.points_to_refund == 900

    def test_no_grants_refunds_nothing(self):
        order = make_order("100000", 500)

        result = compute_refund(order, [], pesos_per_point=10)

        assert result.monetary_refund == Decimal("0")
        assert result.points_to_refund == 0

    def test_invalid_rate_raises(self):
        with pytest.raises(ValueError):
            compute_refund(make_order("100", 1), [Decimal("10")], pesos_per_point=0)


class TestCashPaidRatio:
    """Tests for cash_paid_ratio()."""

    def test_discount_larger_than_total_clamps_to_zero(self):
        """Should never go negative."""
        assert cash_paid_ratio(Decimal("1000"), 500, 10) == Decimal("0")

    def test_no_discount_is_fully_cash_paid(self):
        assert cash_paid_ratio(Decimal("1000"), 0, 10) == Decimal("1")

    def test_exact_ratio_keeps_repeating_fractions(self):
        assert exact_cash_paid_ratio(Decimal("30000"), 2000, 10) == Fraction(1, 3)
