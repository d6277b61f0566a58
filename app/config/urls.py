"""
URL configuration for the returns and points service.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/auth/token/            - Obtain JWT pair (simplejwt)
    /api/v1/auth/token/refresh/    - Refresh JWT
    /api/v1/returns/               - Return requests
        (POST)                     - Create a return
        my-returns/                - Caller's returns
        store-credits/             - Caller's store credits
        eligibility/{order_id}/    - Eligible grants for an order
        eligibility/{order_id}/preview/ - Refund computation preview
        {id}/                      - Return detail
        {id}/cancel/               - Cancel a return
        {id}/history/              - Status history
        admin/all/                 - Operator listing with filters
        admin/summary/             - Operator aggregates
        admin/{id}/process/        - Approve or reject
        admin/{id}/finalize/       - Issue credit and points refund
    /api/v1/points/                - Loyalty points
        balance/                   - Caller's derived balance
        transactions/              - Caller's ledger entries
        order/{order_id}/          - Points breakdown for an order
    /api/v1/admin/points/          - Operator points tools
        adjust/                    - Append an adjustment entry
        stats/                     - Points in circulation
        users/                     - Per-user balances
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
api_v1_patterns = [
    path("auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("returns/", include("returns.urls")),
    path("points/", include("points.urls")),
    path("admin/points/", include("points.admin_urls")),
]

urlpatterns = [
    # Documentation
    path("", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

admin.site.site_header = "Returns Admin"
admin.site.site_title = "Returns Admin Portal"
admin.site.index_title = "Returns, store credit and points"
