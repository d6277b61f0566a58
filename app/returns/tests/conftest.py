"""
Pytest fixtures for return tests.

The standard order is worth 100,000 with 500 points redeemed (5,000 of
discount at 10 pesos per point), so 95% of it was paid in cash. It holds
two 20,000 keys and one 60,000 key.

Usage:
    def test_approve(pending_return, operator):
        ReturnService.decide(pending_return.id, operator, ReturnDecision.APPROVE)
"""

from decimal import Decimal

import pytest

from orders.models import LicenseKeyGrant
from orders.tests.factories import OrderFactory, OrderItemFactory
from returns.services import ReturnService
from returns.states import ReturnDecision
from returns.types import CreateReturnParams

REASON = "The license key was rejected by the activation server"


# =============================================================================
# Orders
# =============================================================================


@pytest.fixture
def order(db, user):
    """Completed order paid partly with points."""
    order = OrderFactory(
        user=user,
        total_amount=Decimal("100000.00"),
        points_used=500,
        discount_amount=Decimal("5000.00"),
    )
    OrderItemFactory(order=order, unit_price=Decimal("20000.00"), quantity=2)
    OrderItemFactory(order=order, unit_price=Decimal("60000.00"), quantity=1)
    return order


@pytest.fixture
def grants(order):
    """The order's grants: two 20,000 keys, then the 60,000 key."""
    return list(
        LicenseKeyGrant.objects.filter(order_item__order=order).order_by(
            "order_item__unit_price", "id"
        )
    )


@pytest.fixture
def cheap_grant(grants):
    return grants[0]


# =============================================================================
# Returns
# =============================================================================


def request_return(user, order, grant_ids, reason=REASON, **kwargs):
    return ReturnService.create(
        user,
        CreateReturnParams(order_id=order.id, grant_ids=grant_ids, reason=reason, **kwargs),
    )


@pytest.fixture
def pending_return(user, order, cheap_grant):
    """Pending return of one 20,000 key."""
    return request_return(user, order, [cheap_grant.id])


@pytest.fixture
def approved_return(pending_return, operator):
    return ReturnService.decide(
        pending_return.id,
        operator,
        ReturnDecision.APPROVE,
        admin_notes="Verified with the vendor",
    )


@pytest.fixture
def refunded_return(approved_return, operator):
    return ReturnService.finalize(approved_return.id, operator)


@pytest.fixture
def rejected_return(pending_return, operator):
    return ReturnService.decide(pending_return.id, operator, ReturnDecision.REJECT)


@pytest.fixture
def cancelled_return(pending_return, user):
    return ReturnService.cancel(pending_return.id, user)


# =============================================================================
# Collaborators
# =============================================================================


@pytest.fixture
def mock_issuer(mocker):
    """Credit issuer mock that fails every call."""
    from core.exceptions import ExternalServiceError

    issuer = mocker.Mock()
    issuer.issue_store_credit.side_effect = ExternalServiceError(
        "Wallet unavailable", error_code="CREDIT_ISSUANCE_FAILED"
    )
    mocker.patch("returns.services.get_credit_issuer", return_value=issuer)
    return issuer


@pytest.fixture
def mock_dispatcher(mocker):
    """Notification dispatcher mock used by the notification task."""
    dispatcher = mocker.Mock()
    dispatcher.notify.return_value = True
    mocker.patch("returns.tasks.get_notification_dispatcher", return_value=dispatcher)
    return dispatcher
