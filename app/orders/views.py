"""
Views for order API.

Endpoints:
    GET  /api/v1/orders/                           - Orders visible to the caller
    POST /api/v1/orders/                           - Place an order (customer)
    GET  /api/v1/orders/{ref}/                     - Order detail
    POST /api/v1/orders/{ref}/status/              - Change status (role-gated)
    POST /api/v1/orders/{ref}/cancel-request/      - Ask for cancellation (customer)
    GET  /api/v1/orders/{ref}/return-eligibility/  - Can this order be returned (customer)
    POST /api/v1/orders/admin/release-funds/       - Run the settlement sweep (admin)

{ref} is the order UUID or its ORD-... code.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.actors import Actor, ActorRole
from core.permissions import IsCustomer, IsPlatformAdmin
from returns.serializers import EligibilitySerializer
from returns.services import ReturnService

from orders.serializers import (
    CancellationRequestCreateSerializer,
    OrderCreateSerializer,
    OrderListSerializer,
    OrderSerializer,
    OrderStatusChangeSerializer,
    SweepResultSerializer,
)
from orders.services import OrderLifecycleService
from orders.settlement import SettlementService


class OrderListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_orders",
        summary="List orders",
        description=(
            "Customers see their own orders, vendors see orders containing "
            "their products, admins see every order."
        ),
        responses={200: OrderListSerializer(many=True)},
        tags=["Orders"],
    )
    def get(self, request):
        actor = Actor.from_user(request.user)
        queryset = OrderLifecycleService.list_for(actor)
        status_filter = request.query_params.get("status")
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        paginator = PageNumberPagination()
        page = paginator.paginate_queryset(queryset, request, view=self)
        return paginator.get_paginated_response(OrderListSerializer(page, many=True).data)

    @extend_schema(
        operation_id="create_order",
        summary="Place an order",
        request=OrderCreateSerializer,
        responses={201: OrderSerializer},
        tags=["Orders"],
    )
    def post(self, request):
        actor = Actor.from_user(request.user)
        actor.require_role(ActorRole.USER)

        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = OrderLifecycleService.create_order(
            customer_id=actor.id,
            items=data["items"],
            payment_status=data["payment_status"],
            payment_method=data["payment_method"],
            coupon_code=data.get("coupon_code") or None,
            shipping_cents=data["shipping_cents"],
            tax_cents=data["tax_cents"],
            discount_cents=data["discount_cents"],
        )
        return Response(
            {
                "success": True,
                "message": "Order placed successfully",
                "data": OrderSerializer(order).data,
            },
            status=status.HTTP_201_CREATED,
        )


class OrderDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_order",
        summary="Get order detail",
        responses={
            200: OrderSerializer,
            404: OpenApiResponse(description="Order not found"),
        },
        tags=["Orders"],
    )
    def get(self, request, order_ref):
        actor = Actor.from_user(request.user)
        order = OrderLifecycleService.get_order_for(order_ref, actor)
        return Response(
            {
                "success": True,
                "message": "Order retrieved",
                "data": OrderSerializer(order).data,
            }
        )


class OrderStatusView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="change_order_status",
        summary="Change order status",
        description="Allowed transitions depend on the caller's role.",
        request=OrderStatusChangeSerializer,
        responses={
            200: OrderSerializer,
            400: OpenApiResponse(description="Transition not allowed"),
        },
        tags=["Orders"],
    )
    def post(self, request, order_ref):
        actor = Actor.from_user(request.user)
        serializer = OrderStatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = OrderLifecycleService.change_status(
            order_ref,
            serializer.validated_data["status"],
            actor,
            serializer.validated_data["note"],
        )
        return Response(
            {
                "success": True,
                "message": "Order status updated",
                "data": OrderSerializer(order).data,
            }
        )


class OrderCancelRequestView(APIView):
    permission_classes = [IsAuthenticated, IsCustomer]

    @extend_schema(
        operation_id="request_order_cancellation",
        summary="Request cancellation",
        request=CancellationRequestCreateSerializer,
        responses={200: OrderSerializer},
        tags=["Orders"],
    )
    def post(self, request, order_ref):
        actor = Actor.from_user(request.user)
        serializer = CancellationRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = OrderLifecycleService.request_cancellation(
            order_ref, actor, serializer.validated_data["reason"]
        )
        return Response(
            {
                "success": True,
                "message": "Cancellation requested",
                "data": OrderSerializer(order).data,
            }
        )


class OrderReturnEligibilityView(APIView):
    permission_classes = [IsAuthenticated, IsCustomer]

    @extend_schema(
        operation_id="check_return_eligibility",
        summary="Check whether an order can be returned",
        responses={200: EligibilitySerializer},
        tags=["Orders"],
    )
    def get(self, request, order_ref):
        actor = Actor.from_user(request.user)
        eligibility = ReturnService.check_eligibility(order_ref, actor.id)
        return Response(
            {
                "success": True,
                "message": "Eligibility checked",
                "data": EligibilitySerializer(eligibility.to_dict()).data,
            }
        )


class AdminReleaseFundsView(APIView):
    permission_classes = [IsAuthenticated, IsPlatformAdmin]

    @extend_schema(
        operation_id="release_pending_funds",
        summary="Settle delivered orders past their return window",
        request=None,
        responses={200: SweepResultSerializer},
        tags=["Orders - Admin"],
    )
    def post(self, request):
        result = SettlementService.release_pending_funds()
        return Response(
            {
                "success": True,
                "message": f"Released funds for {result.processed_count} orders",
                "data": SweepResultSerializer(result.to_dict()).data,
            }
        )
