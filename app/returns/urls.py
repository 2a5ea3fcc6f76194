"""
URL configuration for the returns app.

All routes are prefixed with /api/v1/returns/ when included in the main URLconf.
"""

from django.urls import path

from returns import views

app_name = "returns"

urlpatterns = [
    path("", views.ReturnListCreateView.as_view(), name="return-list"),
    path("<str:return_ref>/", views.ReturnDetailView.as_view(), name="return-detail"),
    path(
        "<str:return_ref>/status/",
        views.ReturnStatusView.as_view(),
        name="return-status",
    ),
    path(
        "<str:return_ref>/process-refund/",
        views.ReturnProcessRefundView.as_view(),
        name="return-process-refund",
    ),
]
