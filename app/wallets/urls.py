"""
URL configuration for the wallets app.

All routes are prefixed with /api/v1/wallets/ when included in the main URLconf.
"""

from django.urls import path

from wallets import views

app_name = "wallets"

urlpatterns = [
    # Vendor
    path("vendor/", views.VendorWalletView.as_view(), name="vendor-wallet"),
    path(
        "vendor/transactions/",
        views.VendorTransactionListView.as_view(),
        name="vendor-transactions",
    ),
    path(
        "vendor/withdrawals/",
        views.VendorWithdrawalView.as_view(),
        name="vendor-withdrawals",
    ),
    # Admin
    path(
        "admin/withdrawals/",
        views.AdminWithdrawalListView.as_view(),
        name="admin-withdrawals",
    ),
    path(
        "admin/withdrawals/<uuid:withdrawal_id>/approve/",
        views.AdminWithdrawalApproveView.as_view(),
        name="admin-withdrawal-approve",
    ),
    path(
        "admin/withdrawals/<uuid:withdrawal_id>/reject/",
        views.AdminWithdrawalRejectView.as_view(),
        name="admin-withdrawal-reject",
    ),
    path("admin/stats/", views.AdminWalletStatsView.as_view(), name="admin-stats"),
    # Customer
    path("customer/", views.CustomerWalletView.as_view(), name="customer-wallet"),
]
