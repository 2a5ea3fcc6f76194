"""
Views for return API.

Endpoints:
    GET  /api/v1/returns/                       - Returns visible to the caller
    POST /api/v1/returns/                       - File a return (customer)
    GET  /api/v1/returns/{ref}/                 - Return detail
    POST /api/v1/returns/{ref}/status/          - Review a return (vendor/admin)
    POST /api/v1/returns/{ref}/process-refund/  - Pay out a return (vendor/admin)

{ref} is the return UUID or its RET-... code.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.actors import Actor, ActorRole
from core.permissions import IsVendorOrAdmin
from returns.serializers import (
    ReturnRequestCreateSerializer,
    ReturnRequestSerializer,
    ReturnStatusUpdateSerializer,
)
from returns.services import ReturnService


class ReturnListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_returns",
        summary="List return requests",
        parameters=[
            OpenApiParameter(
                name="status",
                type=str,
                location=OpenApiParameter.QUERY,
                description="Filter by return status",
                required=False,
            ),
        ],
        responses={200: ReturnRequestSerializer(many=True)},
        tags=["Returns"],
    )
    def get(self, request):
        actor = Actor.from_user(request.user)
        queryset = ReturnService.list_for(actor, request.query_params.get("status"))
        paginator = PageNumberPagination()
        page = paginator.paginate_queryset(queryset, request, view=self)
        return paginator.get_paginated_response(
            ReturnRequestSerializer(page, many=True).data
        )

    @extend_schema(
        operation_id="create_return",
        summary="Request a return",
        request=ReturnRequestCreateSerializer,
        responses={
            201: ReturnRequestSerializer,
            400: OpenApiResponse(description="Order not eligible for return"),
        },
        tags=["Returns"],
    )
    def post(self, request):
        actor = Actor.from_user(request.user)
        actor.require_role(ActorRole.USER)

        serializer = ReturnRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        return_request = ReturnService.create_return_request(
            actor.id,
            data["order"],
            items=data["items"],
            reason=data["reason"],
            description=data["description"],
            refund_method=data.get("refund_method"),
        )
        return Response(
            {
                "success": True,
                "message": "Return request submitted",
                "data": ReturnRequestSerializer(return_request).data,
            },
            status=status.HTTP_201_CREATED,
        )


class ReturnDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_return",
        summary="Get return request",
        responses={200: ReturnRequestSerializer},
        tags=["Returns"],
    )
    def get(self, request, return_ref):
        actor = Actor.from_user(request.user)
        return_request = ReturnService.get_return_request_for(return_ref, actor)
        return Response(
            {
                "success": True,
                "message": "Return request retrieved",
                "data": ReturnRequestSerializer(return_request).data,
            }
        )


class ReturnStatusView(APIView):
    permission_classes = [IsAuthenticated, IsVendorOrAdmin]

    @extend_schema(
        operation_id="update_return_status",
        summary="Review a return request",
        request=ReturnStatusUpdateSerializer,
        responses={200: ReturnRequestSerializer},
        tags=["Returns"],
    )
    def post(self, request, return_ref):
        actor = Actor.from_user(request.user)
        serializer = ReturnStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        return_request = ReturnService.update_status(
            return_ref,
            data["status"],
            actor,
            note=data["note"],
            rejection_reason=data["rejection_reason"],
        )
        return Response(
            {
                "success": True,
                "message": f"Return request {return_request.status}",
                "data": ReturnRequestSerializer(return_request).data,
            }
        )


class ReturnProcessRefundView(APIView):
    permission_classes = [IsAuthenticated, IsVendorOrAdmin]

    @extend_schema(
        operation_id="process_return_refund",
        summary="Process the refund for a return",
        request=None,
        responses={
            200: ReturnRequestSerializer,
            400: OpenApiResponse(description="Refund already processed"),
        },
        tags=["Returns"],
    )
    def post(self, request, return_ref):
        actor = Actor.from_user(request.user)
        return_request = ReturnService.process_refund(return_ref, actor)
        return Response(
            {
                "success": True,
                "message": "Refund processed",
                "data": ReturnRequestSerializer(return_request).data,
            }
        )
