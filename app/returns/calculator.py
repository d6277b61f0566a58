"""
Refund calculator.

Pure functions: no database access, no settings lookups beyond the default
pesos-per-point rate. Given an order's totals and the unit prices of the
grants being returned, work out the monetary refund and how many loyalty
points go back to the customer.

Points are refunded in proportion to the share of the order that was paid
in cash rather than covered by redeemed points:

    points_discount   = points_used * pesos_per_point
    actual_paid       = total_amount - points_discount
    refund_percentage = actual_paid / total_amount
    points_to_refund  = floor(floor(monetary_refund / pesos_per_point) * refund_percentage)

The two floors are applied exactly as above, on exact fractions. Both
truncate in the customer's disfavour; see DESIGN.md before changing either
one. The Decimal ratio is only reported, never used for the floors.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction

from django.conf import settings

ZERO = Decimal("0")
ONE = Decimal("1")


@dataclass(frozen=True)
class RefundComputation:
    """
    Result of a refund computation.

    Attributes:
        monetary_refund: Sum of the returned grants' unit prices
        points_to_refund: Loyalty points to credit back
        refund_percentage: Cash-paid share of the order, in [0, 1]
        points_discount: Pesos covered by redeemed points
        actual_paid: Pesos paid in cash
        pesos_per_point: Conversion rate used
    """

    monetary_refund: Decimal
    points_to_refund: int
    refund_percentage: Decimal
    points_discount: Decimal
    actual_paid: Decimal
    pesos_per_point: int

    def as_dict(self) -> dict:
        return {
            "monetary_refund": self.monetary_refund,
            "points_to_refund": self.points_to_refund,
            "refund_percentage": self.refund_percentage,
            "points_discount": self.points_discount,
            "actual_paid": self.actual_paid,
            "pesos_per_point": self.pesos_per_point,
        }


def exact_cash_paid_ratio(total_amount, points_used: int, pesos_per_point: int) -> Fraction:
    """
    Share of ``total_amount`` paid in cash, as an exact fraction.

    Zero when the total is zero. Clamped to [0, 1] so that a discount larger
    than the total never produces a negative refund.
    """
    total = Fraction(Decimal(total_amount))
    if total <= 0:
        return Fraction(0)
    ratio = (total - points_used * pesos_per_point) / total
    return min(max(ratio, Fraction(0)), Fraction(1))


def cash_paid_ratio(total_amount: Decimal, points_used: int, pesos_per_point: int) -> Decimal:
    """Decimal rendering of :func:`exact_cash_paid_ratio` for display."""
    ratio = exact_cash_paid_ratio(total_amount, points_used, pesos_per_point)
    return Decimal(ratio.numerator) / Decimal(ratio.denominator)


def compute_refund(
    order,
    unit_prices: Iterable[Decimal],
    pesos_per_point: int | None = None,
) -> RefundComputation:
    """
    Compute the refund for returning grants at ``unit_prices`` from ``order``.

    Args:
        order: Anything with ``total_amount`` and ``points_used``
        unit_prices: Unit price of each returned grant
        pesos_per_point: Conversion rate (defaults to POINTS_PESOS_PER_POINT)

    Example:
        total 100000, 500 points used, returning 20000 worth of keys:
        floor(20000 / 10) = 2000, 2000 * 0.95 = 1900 points.
    """
    if pesos_per_point is None:
        pesos_per_point = settings.POINTS_PESOS_PER_POINT
    if pesos_per_point <= 0:
        raise ValueError("pesos_per_point must be positive")

    total_amount = Decimal(order.total_amount)
    points_used = int(order.points_used or 0)
    monetary_refund = sum((Decimal(price) for price in unit_prices), ZERO)
    points_discount = Decimal(points_used) * pesos_per_point
    actual_paid = total_amount - points_discount

    if points_used == 0:
        return RefundComputation(
            monetary_refund=monetary_refund,
            points_to_refund=0,
            refund_percentage=ONE if total_amount > ZERO else ZERO,
            points_discount=points_discount,
            actual_paid=actual_paid,
            pesos_per_point=pesos_per_point,
        )

    ratio = exact_cash_paid_ratio(total_amount, points_used, pesos_per_point)
    base_points = math.floor(Fraction(monetary_refund) / pesos_per_point)
    points_to_refund = math.floor(base_points * ratio)

    return RefundComputation(
        monetary_refund=monetary_refund,
        points_to_refund=max(points_to_refund, 0),
        refund_percentage=Decimal(ratio.numerator) / Decimal(ratio.denominator),
        points_discount=points_discount,
        actual_paid=actual_paid,
        pesos_per_point=pesos_per_point,
    )
