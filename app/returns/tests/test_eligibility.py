"""
Tests for EligibilityChecker.

Covers ownership, order status, the return window and grant claims.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from freezegun import freeze_time

from core.exceptions import NotFoundError, ValidationError
from orders.models import GrantStatus, OrderStatus
from orders.tests.factories import OrderFactory, OrderItemFactory
from returns.eligibility import EligibilityChecker
from returns.tests.conftest import request_return


@pytest.mark.django_db
class TestOwnership:
    """Tests for order ownership checks."""

    def test_owner_sees_all_keys(self, user, order):
        """Should list all three keys of a fresh order."""
        result = EligibilityChecker.check(order.id, user)

        assert result.eligible is True
        assert result.reason == ""
        assert len(result.available_keys) == 3

    def test_other_user_gets_not_found(self, other_user, order):
        """Should hide someone else's order behind NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            EligibilityChecker.check(order.id, other_user)

        assert exc_info.value.error_code == "ORDER_NOT_FOUND"

    def test_operator_may_check_any_order(self, operator, order):
        result = EligibilityChecker.check(order.id, operator)

        assert result.eligible is True

    def test_unknown_order_gets_not_found(self, user):
        with pytest.raises(NotFoundError):
            EligibilityChecker.check(987654321, user)


@pytest.mark.django_db
class TestOrderRules:
    """Tests for order status and the return window."""

    def test_pending_order_is_not_eligible(self, user):
        """Should close returns for orders that were never paid."""
        order = OrderFactory(user=user, status=OrderStatus.PENDING)
        OrderItemFactory(order=order)

        result = EligibilityChecker.check(order.id, user)

        assert result.eligible is False
        assert "pending" in result.reason
        assert result.available_keys == []

    def test_paid_order_is_eligible(self, user):
        order = OrderFactory(user=user, status=OrderStatus.PAID)
        OrderItemFactory(order=order)

        assert EligibilityChecker.check(order.id, user).eligible is True

    def test_window_end_is_fourteen_days_after_purchase(self, user, order):
        result = EligibilityChecker.check(order.id, user)

        assert result.purchase_date == order.created_at
        assert result.window_ends_at == order.created_at + timedelta(days=14)

    def test_last_day_of_window_is_eligible(self, user, order):
        with freeze_time(order.created_at + timedelta(days=14)):
            assert EligibilityChecker.check(order.id, user).eligible is True

    def test_expired_window_is_not_eligible(self, user, order):
        """Should close returns once the window has passed."""
        with freeze_time(order.created_at + timedelta(days=14, seconds=1)):
            result = EligibilityChecker.check(order.id, user)

        assert result.eligible is False
        assert "14-day" in result.reason
        assert result.available_keys == []

    def test_window_follows_setting(self, settings, user):
        settings.RETURNS_WINDOW_DAYS = 30
        order = OrderFactory(user=user, created_at=timezone.now() - timedelta(days=20))
        OrderItemFactory(order=order)

        assert EligibilityChecker.check(order.id, user).eligible is True

    def test_ensure_open_raises_for_expired_window(self, user):
        order = OrderFactory(user=user, created_at=timezone.now() - timedelta(days=15))

        with pytest.raises(ValidationError) as exc_info:
            EligibilityChecker.ensure_open(order)

        assert exc_info.value.error_code == "RETURN_WINDOW_EXPIRED"

    def test_ensure_open_raises_for_cancelled_order(self, user):
        order = OrderFactory(user=user, status=OrderStatus.CANCELLED)

        with pytest.raises(ValidationError) as exc_info:
            EligibilityChecker.ensure_open(order)

        assert exc_info.value.error_code == "ORDER_NOT_RETURNABLE"


@pytest.mark.django_db
class TestGrantClaims:
    """Tests for which keys are still available."""

    def test_key_details(self, user, order, cheap_grant):
        """Should carry the display data and price of each key."""
        keys = EligibilityChecker.get_eligible_grants(order.id, user)
        key = next(k for k in keys if k.grant_id == cheap_grant.id)

        assert key.unit_price == Decimal("20000.00")
        assert key.masked_key.endswith(cheap_grant.license_key[-4:])
        assert cheap_grant.license_key not in key.masked_key
        assert key.product_name == cheap_grant.order_item.product.name
        assert key.purchase_date == order.created_at

    def test_claimed_key_is_not_available(self, user, order, cheap_grant):
        request_return(user, order, [cheap_grant.id])

        keys = EligibilityChecker.get_eligible_grants(order.id, user)

        assert cheap_grant.id not in {k.grant_id for k in keys}
        assert len(keys) == 2

    def test_rejected_return_releases_key(self, user, order, cheap_grant, rejected_return):
        keys = EligibilityChecker.get_eligible_grants(order.id, user)

        assert cheap_grant.id in {k.grant_id for k in keys}

    def test_cancelled_return_releases_key(self, user, order, cheap_grant, cancelled_return):
        keys = EligibilityChecker.get_eligible_grants(order.id, user)

        assert cheap_grant.id in {k.grant_id for k in keys}

    def test_refunded_return_keeps_key(self, user, order, cheap_grant, refunded_return):
        keys = EligibilityChecker.get_eligible_grants(order.id, user)

        assert cheap_grant.id not in {k.grant_id for k in keys}

    def test_revoked_key_is_not_available(self, user, order, cheap_grant):
        cheap_grant.status = GrantStatus.REVOKED
        cheap_grant.save()

        keys = EligibilityChecker.get_eligible_grants(order.id, user)

        assert cheap_grant.id not in {k.grant_id for k in keys}

    def test_all_keys_claimed_is_empty_not_error(self, user, order, grants):
        """Should answer with an empty list and a reason."""
        request_return(user, order, [g.id for g in grants])

        result = EligibilityChecker.check(order.id, user)

        assert result.eligible is False
        assert result.available_keys == []
        assert "already in a return" in result.reason
