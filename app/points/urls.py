"""
URL configuration for the points API.

URL Structure:
    /balance/                  GET
    /transactions/             GET
    /order/{order_id}/         GET

All URLs are prefixed with /api/v1/points/ in the main URL configuration.
"""

from django.urls import path

from points.views import OrderPointsView, PointsBalanceView, PointsTransactionListView

app_name = "points"

urlpatterns = [
    path("balance/", PointsBalanceView.as_view(), name="balance"),
    path("transactions/", PointsTransactionListView.as_view(), name="transactions"),
    path("order/<int:order_id>/", OrderPointsView.as_view(), name="order-points"),
]
