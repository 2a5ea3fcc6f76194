"""
Views for wallet API.

Endpoints:
    Vendor:
        GET  /api/v1/wallets/vendor/               - Own wallet balances
        GET  /api/v1/wallets/vendor/transactions/  - Own ledger (?type=credit)
        GET  /api/v1/wallets/vendor/withdrawals/   - Own withdrawal history
        POST /api/v1/wallets/vendor/withdrawals/   - Request full-balance withdrawal

    Admin:
        GET  /api/v1/wallets/admin/withdrawals/              - Pending requests
        POST /api/v1/wallets/admin/withdrawals/{id}/approve/ - Approve request
        POST /api/v1/wallets/admin/withdrawals/{id}/reject/  - Reject request
        GET  /api/v1/wallets/admin/stats/                    - Platform totals

    Customer:
        GET  /api/v1/wallets/customer/             - Own personal wallet

Domain errors raised by the services are rendered by
core.exception_handler.api_exception_handler.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.actors import Actor
from core.permissions import IsCustomer, IsPlatformAdmin, IsVendor
from wallets.serializers import (
    CustomerWalletSerializer,
    VendorWalletSerializer,
    VendorWalletTransactionSerializer,
    WalletStatsSerializer,
    WithdrawalApproveSerializer,
    WithdrawalCreateSerializer,
    WithdrawalRejectSerializer,
    WithdrawalRequestSerializer,
)
from wallets.services import CustomerWalletService, VendorWalletService


class VendorWalletView(APIView):
    permission_classes = [IsAuthenticated, IsVendor]

    @extend_schema(
        operation_id="get_vendor_wallet",
        summary="Get vendor wallet",
        responses={200: VendorWalletSerializer},
        tags=["Wallets - Vendor"],
    )
    def get(self, request):
        actor = Actor.from_user(request.user)
        wallet = VendorWalletService.get_or_create_wallet(actor.id)
        return Response(
            {
                "success": True,
                "message": "Wallet retrieved",
                "data": VendorWalletSerializer(wallet).data,
            }
        )


class VendorTransactionListView(APIView):
    permission_classes = [IsAuthenticated, IsVendor]

    @extend_schema(
        operation_id="list_vendor_wallet_transactions",
        summary="List vendor ledger entries",
        parameters=[
            OpenApiParameter(
                name="type",
                type=str,
                location=OpenApiParameter.QUERY,
                description="Filter by transaction type",
                required=False,
            ),
        ],
        responses={200: VendorWalletTransactionSerializer(many=True)},
        tags=["Wallets - Vendor"],
    )
    def get(self, request):
        actor = Actor.from_user(request.user)
        queryset = VendorWalletService.get_transactions(
            actor.id, request.query_params.get("type")
        )
        paginator = PageNumberPagination()
        page = paginator.paginate_queryset(queryset, request, view=self)
        serializer = VendorWalletTransactionSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)


class VendorWithdrawalView(APIView):
    permission_classes = [IsAuthenticated, IsVendor]

    @extend_schema(
        operation_id="list_vendor_withdrawals",
        summary="List own withdrawal requests",
        responses={200: WithdrawalRequestSerializer(many=True)},
        tags=["Wallets - Vendor"],
    )
    def get(self, request):
        actor = Actor.from_user(request.user)
        withdrawals = VendorWalletService.get_withdrawals(
            actor.id, request.query_params.get("status")
        )
        return Response(
            {
                "success": True,
                "message": "Withdrawals retrieved",
                "data": WithdrawalRequestSerializer(withdrawals, many=True).data,
            }
        )

    @extend_schema(
        operation_id="request_withdrawal",
        summary="Request withdrawal of the full balance",
        request=WithdrawalCreateSerializer,
        responses={201: WithdrawalRequestSerializer},
        tags=["Wallets - Vendor"],
    )
    def post(self, request):
        actor = Actor.from_user(request.user)
        serializer = WithdrawalCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        withdrawal = VendorWalletService.request_withdrawal(
            actor.id, serializer.validated_data["payment_method"]
        )
        return Response(
            {
                "success": True,
                "message": "Withdrawal request submitted",
                "data": WithdrawalRequestSerializer(withdrawal).data,
            },
            status=status.HTTP_201_CREATED,
        )


class AdminWithdrawalListView(APIView):
    permission_classes = [IsAuthenticated, IsPlatformAdmin]

    @extend_schema(
        operation_id="list_pending_withdrawals",
        summary="List pending withdrawal requests",
        responses={200: WithdrawalRequestSerializer(many=True)},
        tags=["Wallets - Admin"],
    )
    def get(self, request):
        withdrawals = VendorWalletService.get_pending_withdrawals()
        return Response(
            {
                "success": True,
                "message": "Pending withdrawals retrieved",
                "data": WithdrawalRequestSerializer(withdrawals, many=True).data,
            }
        )


class AdminWithdrawalApproveView(APIView):
    permission_classes = [IsAuthenticated, IsPlatformAdmin]

    @extend_schema(
        operation_id="approve_withdrawal",
        summary="Approve a withdrawal request",
        request=WithdrawalApproveSerializer,
        responses={200: WithdrawalRequestSerializer},
        tags=["Wallets - Admin"],
    )
    def post(self, request, withdrawal_id):
        actor = Actor.from_user(request.user)
        serializer = WithdrawalApproveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        withdrawal = VendorWalletService.approve_withdrawal(
            withdrawal_id,
            actor.id,
            notes=serializer.validated_data["notes"],
            external_transaction_id=serializer.validated_data["transaction_id"],
        )
        return Response(
            {
                "success": True,
                "message": "Withdrawal approved",
                "data": WithdrawalRequestSerializer(withdrawal).data,
            }
        )


class AdminWithdrawalRejectView(APIView):
    permission_classes = [IsAuthenticated, IsPlatformAdmin]

    @extend_schema(
        operation_id="reject_withdrawal",
        summary="Reject a withdrawal request",
        request=WithdrawalRejectSerializer,
        responses={200: WithdrawalRequestSerializer},
        tags=["Wallets - Admin"],
    )
    def post(self, request, withdrawal_id):
        actor = Actor.from_user(request.user)
        serializer = WithdrawalRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        withdrawal = VendorWalletService.reject_withdrawal(
            withdrawal_id, actor.id, serializer.validated_data["reason"]
        )
        return Response(
            {
                "success": True,
                "message": "Withdrawal rejected",
                "data": WithdrawalRequestSerializer(withdrawal).data,
            }
        )


class AdminWalletStatsView(APIView):
    permission_classes = [IsAuthenticated, IsPlatformAdmin]

    @extend_schema(
        operation_id="get_wallet_stats",
        summary="Platform wallet totals",
        responses={200: WalletStatsSerializer},
        tags=["Wallets - Admin"],
    )
    def get(self, request):
        stats = VendorWalletService.get_stats()
        return Response(
            {
                "success": True,
                "message": "Wallet stats retrieved",
                "data": WalletStatsSerializer(stats.to_dict()).data,
            }
        )


class CustomerWalletView(APIView):
    permission_classes = [IsAuthenticated, IsCustomer]

    @extend_schema(
        operation_id="get_customer_wallet",
        summary="Get personal wallet",
        responses={200: CustomerWalletSerializer},
        tags=["Wallets - Customer"],
    )
    def get(self, request):
        actor = Actor.from_user(request.user)
        wallet = CustomerWalletService.get_or_create_wallet(actor.id)
        return Response(
            {
                "success": True,
                "message": "Wallet retrieved",
                "data": CustomerWalletSerializer(wallet).data,
            }
        )
