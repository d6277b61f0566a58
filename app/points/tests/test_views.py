"""
API tests for points endpoints.

Test Classes:
    TestPointsBalance: GET /api/v1/points/balance/
    TestPointsTransactions: GET /api/v1/points/transactions/
    TestOrderPoints: GET /api/v1/points/order/{id}/
    TestAdminPoints: /api/v1/admin/points/*
"""

from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status

from orders.tests.factories import OrderFactory
from points.models import EntryType
from points.tests.factories import PointsLedgerEntryFactory


@pytest.mark.django_db
class TestPointsBalance:
    def test_returns_derived_balance(self, authenticated_client, user, settings):
        settings.POINTS_PESOS_PER_POINT = 10
        PointsLedgerEntryFactory(user=user, amount=120)

        response = authenticated_client.get(reverse("points:balance"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["balance"] == 120
        assert Decimal(response.data["value_in_pesos"]) == Decimal("1200")
        assert response.data["pesos_per_point"] == 10

    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse("points:balance"))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestPointsTransactions:
    def test_lists_own_entries_with_limit_offset(self, authenticated_client, user, other_user):
        for _ in range(3):
            PointsLedgerEntryFactory(user=user)
        PointsLedgerEntryFactory(user=other_user)

        response = authenticated_client.get(reverse("points:transactions"), {"limit": 2, "offset": 0})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["count"] == 3
        assert len(response.data["results"]) == 2


@pytest.mark.django_db
class TestOrderPoints:
    def test_owner_sees_breakdown(self, authenticated_client, user):
        order = OrderFactory(user=user, points_used=500, discount_amount=Decimal("5000"))

        response = authenticated_client.get(reverse("points:order-points", args=[order.pk]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["points_used"] == 500
        assert response.data["points_refunded"] == 0

    def test_other_users_order_is_not_found(self, other_client, user):
        order = OrderFactory(user=user)

        response = other_client.get(reverse("points:order-points", args=[order.pk]))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "ORDER_NOT_FOUND"


@pytest.mark.django_db
class TestAdminPoints:
    def test_adjust_creates_entry(self, operator_client, user):
        response = operator_client.post(
            reverse("points-admin:adjust"),
            {"user_id": user.id, "amount": 40, "reason": "Support ticket"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["entry_type"] == EntryType.ADJUSTMENT

    def test_adjust_below_zero_returns_422(self, operator_client, user):
        response = operator_client.post(
            reverse("points-admin:adjust"),
            {"user_id": user.id, "amount": -40, "reason": "Clawback"},
            format="json",
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.data["error_code"] == "INSUFFICIENT_POINTS"

    def test_adjust_forbidden_for_customers(self, authenticated_client, user):
        response = authenticated_client.post(
            reverse("points-admin:adjust"),
            {"user_id": user.id, "amount": 40, "reason": "Self-service"},
            format="json",
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_stats(self, operator_client, user):
        PointsLedgerEntryFactory(user=user, amount=10)

        response = operator_client.get(reverse("points-admin:stats"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["total_points_in_circulation"] == 10

    def test_users_sorted_by_total_earned(self, operator_client, user, other_user):
        PointsLedgerEntryFactory(user=user, amount=10)
        PointsLedgerEntryFactory(user=other_user, amount=30)

        response = operator_client.get(reverse("points-admin:users"), {"sort_by": "total_earned"})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["results"][0]["user_id"] == other_user.id

    def test_users_invalid_sort_returns_422(self, operator_client):
        response = operator_client.get(reverse("points-admin:users"), {"sort_by": "nope"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
