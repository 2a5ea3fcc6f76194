"""
URL configuration for the orders app.

All routes are prefixed with /api/v1/orders/ when included in the main URLconf.
"""

from django.urls import path

from orders import views

app_name = "orders"

urlpatterns = [
    path("", views.OrderListCreateView.as_view(), name="order-list"),
    path(
        "admin/release-funds/",
        views.AdminReleaseFundsView.as_view(),
        name="admin-release-funds",
    ),
    path("<str:order_ref>/", views.OrderDetailView.as_view(), name="order-detail"),
    path(
        "<str:order_ref>/status/",
        views.OrderStatusView.as_view(),
        name="order-status",
    ),
    path(
        "<str:order_ref>/cancel-request/",
        views.OrderCancelRequestView.as_view(),
        name="order-cancel-request",
    ),
    path(
        "<str:order_ref>/return-eligibility/",
        views.OrderReturnEligibilityView.as_view(),
        name="order-return-eligibility",
    ),
]
