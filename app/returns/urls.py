"""
URL configuration for the returns API.

All URLs are prefixed with /api/v1/returns/ in the main URL configuration.
Fixed paths come before {id} paths.
"""

from django.urls import path

from returns import views

app_name = "returns"

urlpatterns = [
    path("", views.ReturnCreateView.as_view(), name="create"),
    path("my-returns/", views.MyReturnListView.as_view(), name="my-returns"),
    path("store-credits/", views.StoreCreditListView.as_view(), name="store-credits"),
    path(
        "eligibility/<int:order_id>/",
        views.EligibilityView.as_view(),
        name="eligibility",
    ),
    path(
        "eligibility/<int:order_id>/preview/",
        views.RefundPreviewView.as_view(),
        name="refund-preview",
    ),
    # Operator
    path("admin/all/", views.AdminReturnListView.as_view(), name="admin-list"),
    path("admin/summary/", views.AdminReturnSummaryView.as_view(), name="admin-summary"),
    path(
        "admin/<uuid:return_id>/process/",
        views.AdminReturnProcessView.as_view(),
        name="admin-process",
    ),
    path(
        "admin/<uuid:return_id>/finalize/",
        views.AdminReturnFinalizeView.as_view(),
        name="admin-finalize",
    ),
    # Single return
    path("<uuid:return_id>/", views.ReturnDetailView.as_view(), name="detail"),
    path("<uuid:return_id>/cancel/", views.ReturnCancelView.as_view(), name="cancel"),
    path("<uuid:return_id>/history/", views.ReturnHistoryView.as_view(), name="history"),
]
