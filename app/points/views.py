"""
Points API views.

User endpoints:
    GET  /api/v1/points/balance/               Derived balance
    GET  /api/v1/points/transactions/          Ledger entries (limit/offset)
    GET  /api/v1/points/order/{order_id}/      Points breakdown of an order

Operator endpoints:
    POST /api/v1/admin/points/adjust/          Append an adjustment
    GET  /api/v1/admin/points/stats/           Ledger-wide totals
    GET  /api/v1/admin/points/users/           Per-user balances
"""

from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsOperator
from core.exceptions import NotFoundError
from core.pagination import LedgerLimitOffsetPagination
from orders.services import OrderCatalog
from points.serializers import (
    OrderPointsSerializer,
    PointsAdjustmentSerializer,
    PointsBalanceSerializer,
    PointsLedgerEntrySerializer,
    PointsStatsSerializer,
    UserPointsSerializer,
)
from points.services import PointsLedgerService


class PointsBalanceView(APIView):
    """GET /api/v1/points/balance/"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_points_balance",
        summary="Get points balance",
        description="Balance recomputed from the caller's ledger entries.",
        responses={200: PointsBalanceSerializer},
        tags=["Points"],
    )
    def get(self, request):
        balance = PointsLedgerService.get_balance(request.user.id)
        pesos_per_point = PointsLedgerService.pesos_per_point()
        data = {
            "balance": balance.balance,
            "total_earned": balance.total_earned,
            "total_spent": balance.total_spent,
            "value_in_pesos": balance.value_in_pesos(pesos_per_point),
            "pesos_per_point": pesos_per_point,
        }
        return Response(PointsBalanceSerializer(data).data)


@extend_schema(
    operation_id="list_points_transactions",
    summary="List points transactions",
    tags=["Points"],
)
class PointsTransactionListView(generics.ListAPIView):
    """GET /api/v1/points/transactions/?limit=&offset="""

    permission_classes = [IsAuthenticated]
    serializer_class = PointsLedgerEntrySerializer
    pagination_class = LedgerLimitOffsetPagination

    def get_queryset(self):
        return PointsLedgerService.get_entries(self.request.user.id)


class OrderPointsView(APIView):
    """GET /api/v1/points/order/{order_id}/"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_order_points",
        summary="Get points breakdown of an order",
        responses={
            200: OrderPointsSerializer,
            404: OpenApiResponse(description="Order not found or not owned"),
        },
        tags=["Points"],
    )
    def get(self, request, order_id):
        order = OrderCatalog.get_order(order_id)
        if order.user_id != request.user.id and not request.user.is_operator:
            raise NotFoundError(
                f"Order {order_id} not found",
                error_code="ORDER_NOT_FOUND",
                details={"order_id": str(order_id)},
            )
        return Response(OrderPointsSerializer(PointsLedgerService.order_breakdown(order)).data)


class PointsAdjustView(APIView):
    """POST /api/v1/admin/points/adjust/"""

    permission_classes = [IsAuthenticated, IsOperator]

    @extend_schema(
        operation_id="adjust_points",
        summary="Adjust a user's points",
        description=(
            "Append an adjustment entry. Negative adjustments are rejected "
            "when they would make the balance negative."
        ),
        request=PointsAdjustmentSerializer,
        responses={
            201: PointsLedgerEntrySerializer,
            404: OpenApiResponse(description="Unknown user"),
            422: OpenApiResponse(description="Insufficient balance"),
        },
        tags=["Points - Admin"],
    )
    def post(self, request):
        serializer = PointsAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = PointsLedgerService.adjust(
            user_id=serializer.validated_data["user_id"],
            amount=serializer.validated_data["amount"],
            reason=serializer.validated_data["reason"],
            operator=request.user,
        )
        return Response(PointsLedgerEntrySerializer(entry).data, status=status.HTTP_201_CREATED)


class PointsStatsView(APIView):
    """GET /api/v1/admin/points/stats/"""

    permission_classes = [IsAuthenticated, IsOperator]

    @extend_schema(
        operation_id="get_points_stats",
        summary="Points ledger statistics",
        responses={200: PointsStatsSerializer},
        tags=["Points - Admin"],
    )
    def get(self, request):
        return Response(PointsStatsSerializer(PointsLedgerService.stats()).data)


@extend_schema(
    operation_id="list_user_points",
    summary="List users with their points balances",
    parameters=[
        OpenApiParameter(
            name="sort_by",
            type=OpenApiTypes.STR,
            location=OpenApiParameter.QUERY,
            enum=["balance", "total_earned", "total_spent"],
            required=False,
        ),
    ],
    tags=["Points - Admin"],
)
class UserPointsListView(generics.ListAPIView):
    """GET /api/v1/admin/points/users/?sort_by=balance"""

    permission_classes = [IsAuthenticated, IsOperator]
    serializer_class = UserPointsSerializer

    def get_queryset(self):
        return PointsLedgerService.user_balances(
            self.request.query_params.get("sort_by", "balance")
        )
