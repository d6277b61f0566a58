"""
Factory Boy factories for return models.

Factories write rows directly and skip the service-level checks, so they
can build returns in any status. Use ReturnService.create when a test
needs the real claim and history behaviour.

Usage:
    from returns.tests.factories import ReturnFactory, ReturnItemFactory

    ret = ReturnFactory(status=ReturnStatus.APPROVED)
    item = ReturnItemFactory(return_request=ret)
"""

from decimal import Decimal

import factory

from orders.tests.factories import LicenseKeyGrantFactory, OrderFactory, OrderItemFactory
from returns.models import Return, ReturnItem, ReturnStatusHistory
from returns.states import ReturnReason, ReturnStatus


class ReturnFactory(factory.django.DjangoModelFactory):
    """
    Factory for Return model.

    The return belongs to the order's buyer.
    """

    class Meta:
        model = Return

    order = factory.SubFactory(OrderFactory)
    user = factory.SelfAttribute("order.user")
    status = ReturnStatus.PENDING
    reason_code = ReturnReason.DEFECTIVE
    reason = "The license key does not activate"
    refund_amount = Decimal("10000.00")
    points_to_refund = 0


class ReturnItemFactory(factory.django.DjangoModelFactory):
    """
    Factory for ReturnItem model.

    Creates a fresh line item and grant on the return's order.
    """

    class Meta:
        model = ReturnItem

    return_request = factory.SubFactory(ReturnFactory)
    order_item = factory.SubFactory(
        OrderItemFactory,
        order=factory.SelfAttribute("..return_request.order"),
        with_grants=False,
    )
    grant = factory.SubFactory(
        LicenseKeyGrantFactory,
        order_item=factory.SelfAttribute("..order_item"),
    )
    unit_price = factory.SelfAttribute("order_item.unit_price")
    claim_active = True


class ReturnStatusHistoryFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ReturnStatusHistory

    return_request = factory.SubFactory(ReturnFactory)
    old_status = ""
    new_status = ReturnStatus.PENDING
