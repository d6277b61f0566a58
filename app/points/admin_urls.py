"""
URL configuration for operator points endpoints.

URL Structure:
    /adjust/                   POST
    /stats/                    GET
    /users/                    GET

All URLs are prefixed with /api/v1/admin/points/ in the main URL configuration.
"""

from django.urls import path

from points.views import PointsAdjustView, PointsStatsView, UserPointsListView

app_name = "points-admin"

urlpatterns = [
    path("adjust/", PointsAdjustView.as_view(), name="adjust"),
    path("stats/", PointsStatsView.as_view(), name="stats"),
    path("users/", UserPointsListView.as_view(), name="users"),
]
