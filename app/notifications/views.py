"""
Views for notification API.

Endpoints:
    GET  /api/v1/notifications/              - List recipient's notifications
    GET  /api/v1/notifications/{id}/         - Get notification detail
    GET  /api/v1/notifications/unread-count/ - Get unread count
    POST /api/v1/notifications/{id}/read/    - Mark single notification as read
    POST /api/v1/notifications/read-all/     - Mark all notifications as read

The recipient is the authenticated actor (token user id), whatever its role.
"""

from __future__ import annotations

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.actors import Actor
from notifications.models import Notification
from notifications.serializers import (
    MarkAllReadResponseSerializer,
    NotificationSerializer,
    UnreadCountSerializer,
)
from notifications.services import NotificationService


@extend_schema_view(
    list=extend_schema(
        operation_id="list_notifications",
        summary="List notifications",
        parameters=[
            OpenApiParameter(
                name="is_read",
                type=bool,
                location=OpenApiParameter.QUERY,
                description="Filter by read status (true/false)",
                required=False,
            ),
        ],
        tags=["Notifications"],
    ),
    retrieve=extend_schema(
        operation_id="get_notification",
        summary="Get notification",
        tags=["Notifications"],
    ),
)
class NotificationViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for notification operations.

    Filtering:
    - ?is_read=true/false - Filter by read status
    """

    permission_classes = [IsAuthenticated]
    serializer_class = NotificationSerializer

    def get_queryset(self):
        actor = Actor.from_user(self.request.user)
        queryset = Notification.objects.filter(recipient_id=actor.id)

        is_read = self.request.query_params.get("is_read")
        if is_read is not None:
            queryset = queryset.filter(is_read=is_read.lower() == "true")

        return queryset

    @extend_schema(
        operation_id="get_unread_notification_count",
        summary="Get unread notification count",
        responses={200: UnreadCountSerializer},
        tags=["Notifications"],
    )
    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        actor = Actor.from_user(request.user)
        count = Notification.objects.filter(
            recipient_id=actor.id,
            is_read=False,
        ).count()
        return Response(UnreadCountSerializer({"unread_count": count}).data)

    @extend_schema(
        operation_id="mark_notification_read",
        summary="Mark notification as read",
        responses={
            200: NotificationSerializer,
            400: OpenApiResponse(description="Failed to mark notification as read"),
            404: OpenApiResponse(description="Notification not found"),
        },
        tags=["Notifications"],
    )
    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        notification = self.get_object()
        actor = Actor.from_user(request.user)

        result = NotificationService.mark_as_read(notification, actor.id)
        if not result.success:
            return Response(result.to_response(), status=status.HTTP_400_BAD_REQUEST)

        return Response(self.get_serializer(result.data).data)

    @extend_schema(
        operation_id="mark_all_notifications_read",
        summary="Mark all notifications as read",
        responses={200: MarkAllReadResponseSerializer},
        tags=["Notifications"],
    )
    @action(detail=False, methods=["post"], url_path="read-all")
    def read_all(self, request):
        actor = Actor.from_user(request.user)
        result = NotificationService.mark_all_as_read(actor.id)
        return Response(
            MarkAllReadResponseSerializer({"marked_count": result.data}).data,
            status=status.HTTP_200_OK,
        )
