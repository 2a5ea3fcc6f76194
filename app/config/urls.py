"""
URL configuration for the marketplace backend.

The `urlpatterns` list routes URLs to views. This is the root URL configuration
that includes all app-specific routes.

URL Structure:
    /                              - ReDoc API documentation
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /schema/                       - OpenAPI schema (YAML)
    /api/v1/orders/                - Order endpoints
        (root)                     - List own orders (GET) / place order (POST)
        {ref}/                     - Order detail
        {ref}/status/              - Change order status
        {ref}/cancel-request/      - Customer cancellation request
        {ref}/return-eligibility/  - Return eligibility check
        admin/release-funds/       - Run the settlement sweep now (admin)
    /api/v1/wallets/               - Wallet endpoints
        vendor/                    - Vendor wallet balances
        vendor/transactions/       - Vendor ledger history
        vendor/withdrawals/        - List / request withdrawals
        admin/withdrawals/         - Pending withdrawals (admin)
        admin/withdrawals/{id}/approve/ - Approve withdrawal (admin)
        admin/withdrawals/{id}/reject/  - Reject withdrawal (admin)
        admin/stats/               - Platform wallet totals (admin)
        customer/                  - Customer wallet and history
    /api/v1/returns/               - Return endpoints
        (root)                     - List / create return requests
        {ref}/                     - Return detail
        {ref}/status/              - Review a return (vendor, admin)
        {ref}/process-refund/      - Process the refund (vendor, admin)
    /api/v1/notifications/         - In-app notifications

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    path("orders/", include("orders.urls")),
    path("wallets/", include("wallets.urls")),
    path("returns/", include("returns.urls")),
    path("notifications/", include("notifications.urls")),
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

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Marketplace Admin"
admin.site.site_title = "Marketplace Admin Portal"
admin.site.index_title = "Orders, wallets and returns"
