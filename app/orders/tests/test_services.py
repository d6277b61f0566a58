"""
Tests for the OrderCatalog read service.
"""

from decimal import Decimal

import pytest

from core.exceptions import NotFoundError
from orders.services import OrderCatalog
from orders.tests.factories import OrderFactory, OrderItemFactory


@pytest.mark.django_db
class TestOrderCatalog:
    """Tests for catalog lookups."""

    def test_get_order(self):
        """Should return the order by id."""
        order = OrderFactory()

        assert OrderCatalog.get_order(order.pk) == order

    def test_unknown_order_raises_not_found(self):
        """Should raise NotFoundError for an unknown id."""
        with pytest.raises(NotFoundError) as exc_info:
            OrderCatalog.get_order(999999)

        assert exc_info.value.error_code == "ORDER_NOT_FOUND"

    def test_malformed_id_raises_not_found(self):
        """Should treat a non-numeric id as not found."""
        with pytest.raises(NotFoundError):
            OrderCatalog.get_order("not-a-number")

    def test_items_include_one_grant_per_unit(self):
        """Should create and return one grant per unit sold."""
        order = OrderFactory()
        OrderItemFactory(order=order, quantity=3, unit_price=Decimal("5000"))
        OrderItemFactory(order=order, quantity=1)

        items = list(OrderCatalog.get_order_items(order.pk))

        assert [item.grants.count() for item in items] == [3, 1]
        assert OrderCatalog.get_grants(order.pk).count() == 4

    def test_masked_key_hides_all_but_last_four(self):
        """Masked previews should never expose the full key."""
        item = OrderItemFactory()
        grant = item.grants.get()

        assert grant.masked_key.endswith(grant.license_key[-4:])
        assert grant.license_key[:-4] not in grant.masked_key
