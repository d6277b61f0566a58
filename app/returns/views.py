"""
Returns API views.

Customer endpoints:
    POST /api/v1/returns/                                Request a return
    GET  /api/v1/returns/my-returns/                     Caller's returns
    GET  /api/v1/returns/{id}/                           Return detail
    POST /api/v1/returns/{id}/cancel/                    Cancel a return
    GET  /api/v1/returns/{id}/history/                   Status history
    GET  /api/v1/returns/eligibility/{order_id}/         Returnable keys
    POST /api/v1/returns/eligibility/{order_id}/preview/ Refund preview
    GET  /api/v1/returns/store-credits/                  Caller's store credit

Operator endpoints:
    GET  /api/v1/returns/admin/all/                      All returns (filters)
    GET  /api/v1/returns/admin/summary/                  Aggregates
    POST /api/v1/returns/admin/{id}/process/             Approve or reject
    POST /api/v1/returns/admin/{id}/finalize/            Issue refund

Request bodies that fail shape validation are answered with 422 in the
application error format, like the service-level validation errors.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from django_filters.utils import translate_validation
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsOperator
from core.exceptions import ValidationError
from core.pagination import PageLimitPagination
from returns.calculator import compute_refund
from returns.eligibility import EligibilityChecker
from returns.filters import MyReturnFilter, ReturnFilter
from returns.queries import ReturnQueryService
from returns.serializers import (
    CreateReturnSerializer,
    EligibilitySerializer,
    ProcessReturnSerializer,
    RefundPreviewRequestSerializer,
    RefundPreviewSerializer,
    ReturnSerializer,
    ReturnStatusHistorySerializer,
    ReturnSummarySerializer,
    StoreCreditSerializer,
)
from returns.services import ReturnService
from returns.states import ReturnDecision, ReturnStatus
from returns.types import CreateReturnParams
from wallet.services import WalletService


def validated(serializer_class, data) -> dict:
    """Run a request serializer, raising a 422 ValidationError on bad input."""
    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        raise ValidationError(
            "Invalid request body",
            error_code="VALIDATION_ERROR",
            details=serializer.errors,
        )
    return serializer.validated_data


def detail_response(ret, status_code=status.HTTP_200_OK) -> Response:
    # Re-read with items prefetched for the response body
    ret = ReturnQueryService.list_all().get(pk=ret.pk)
    return Response(ReturnSerializer(ret).data, status=status_code)


# =============================================================================
# Customer endpoints
# =============================================================================


class ReturnCreateView(APIView):
    """POST /api/v1/returns/"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="create_return",
        summary="Request a return",
        description=(
            "Claim license keys from one of the caller's orders for return. "
            "The refund amount is fixed at request time."
        ),
        request=CreateReturnSerializer,
        responses={
            201: ReturnSerializer,
            404: OpenApiResponse(description="Order or license key not found"),
            409: OpenApiResponse(description="License key already in an active return"),
            422: OpenApiResponse(description="Validation failure or order not returnable"),
        },
        tags=["Returns"],
    )
    def post(self, request):
        data = validated(CreateReturnSerializer, request.data)
        ret = ReturnService.create(
            request.user,
            CreateReturnParams(
                order_id=data["order_id"],
                grant_ids=data["grant_ids"],
                reason=data["reason"],
                reason_code=data["reason_code"],
                notes=data["notes"],
                item_reasons=data["item_reasons"],
            ),
        )
        return detail_response(ret, status.HTTP_201_CREATED)


@extend_schema(
    operation_id="list_my_returns",
    summary="List the caller's returns",
    tags=["Returns"],
)
class MyReturnListView(generics.ListAPIView):
    """GET /api/v1/returns/my-returns/?status=&page=&limit="""

    permission_classes = [IsAuthenticated]
    serializer_class = ReturnSerializer
    pagination_class = PageLimitPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = MyReturnFilter

    def get_queryset(self):
        return ReturnQueryService.list_for_user(self.request.user)


class ReturnDetailView(APIView):
    """GET /api/v1/returns/{id}/"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_return",
        summary="Get a return",
        responses={
            200: ReturnSerializer,
            404: OpenApiResponse(description="Return not found or not owned"),
        },
        tags=["Returns"],
    )
    def get(self, request, return_id):
        ret = ReturnQueryService.get_for_user(return_id, request.user)
        return Response(ReturnSerializer(ret).data)


class ReturnCancelView(APIView):
    """POST /api/v1/returns/{id}/cancel/"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="cancel_return",
        summary="Cancel a return",
        description="Only pending or approved returns can be cancelled.",
        request=None,
        responses={
            200: ReturnSerializer,
            403: OpenApiResponse(description="Not the requester"),
            404: OpenApiResponse(description="Return not found"),
            409: OpenApiResponse(description="Return can no longer be cancelled"),
        },
        tags=["Returns"],
    )
    def post(self, request, return_id):
        ret = ReturnService.cancel(return_id, request.user)
        return detail_response(ret)


@extend_schema(
    operation_id="list_return_history",
    summary="Status history of a return",
    tags=["Returns"],
)
class ReturnHistoryView(generics.ListAPIView):
    """GET /api/v1/returns/{id}/history/"""

    permission_classes = [IsAuthenticated]
    serializer_class = ReturnStatusHistorySerializer
    pagination_class = None

    def get_queryset(self):
        return ReturnQueryService.history(self.kwargs["return_id"], self.request.user)


class EligibilityView(APIView):
    """GET /api/v1/returns/eligibility/{order_id}/"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_return_eligibility",
        summary="License keys that can still be returned",
        responses={
            200: EligibilitySerializer,
            404: OpenApiResponse(description="Order not found or not owned"),
        },
        tags=["Returns"],
    )
    def get(self, request, order_id):
        result = EligibilityChecker.check(order_id, request.user)
        return Response(EligibilitySerializer(result).data)


class RefundPreviewView(APIView):
    """POST /api/v1/returns/eligibility/{order_id}/preview/"""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="preview_refund",
        summary="Preview the refund for a set of license keys",
        description="Computes the refund without claiming anything.",
        request=RefundPreviewRequestSerializer,
        responses={
            200: RefundPreviewSerializer,
            404: OpenApiResponse(description="Order not found or not owned"),
            422: OpenApiResponse(description="Keys not returnable"),
        },
        tags=["Returns"],
    )
    def post(self, request, order_id):
        data = validated(RefundPreviewRequestSerializer, request.data)
        requested = list(dict.fromkeys(data["grant_ids"]))
        if not requested:
            raise ValidationError(
                "Select at least one license key",
                error_code="VALIDATION_ERROR",
                details={"grant_ids": ["At least one value is required."]},
            )

        order = EligibilityChecker.get_owned_order(order_id, request.user)
        result = EligibilityChecker.evaluate(order)
        available = {key.grant_id: key for key in result.available_keys}
        unavailable = [grant_id for grant_id in requested if grant_id not in available]
        if unavailable:
            raise ValidationError(
                result.reason or "Some license keys cannot be returned",
                error_code="GRANT_NOT_RETURNABLE",
                details={"grant_ids": unavailable},
            )

        computation = compute_refund(order, [available[g].unit_price for g in requested])
        return Response(
            RefundPreviewSerializer(
                {"order_id": order.pk, "grant_ids": requested, **computation.as_dict()}
            ).data
        )


@extend_schema(
    operation_id="list_store_credits",
    summary="List the caller's store credit",
    tags=["Returns"],
)
class StoreCreditListView(generics.ListAPIView):
    """GET /api/v1/returns/store-credits/"""

    permission_classes = [IsAuthenticated]
    serializer_class = StoreCreditSerializer
    pagination_class = PageLimitPagination

    def get_queryset(self):
        return WalletService.list_for_user(self.request.user.id)


# =============================================================================
# Operator endpoints
# =============================================================================


@extend_schema(
    operation_id="list_all_returns",
    summary="List all returns",
    tags=["Returns - Admin"],
)
class AdminReturnListView(generics.ListAPIView):
    """GET /api/v1/returns/admin/all/?status=&order_id=&start_date=&end_date=&page=&limit="""

    permission_classes = [IsAuthenticated, IsOperator]
    serializer_class = ReturnSerializer
    pagination_class = PageLimitPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = ReturnFilter

    def get_queryset(self):
        return ReturnQueryService.list_all()


class AdminReturnSummaryView(APIView):
    """GET /api/v1/returns/admin/summary/"""

    permission_classes = [IsAuthenticated, IsOperator]

    @extend_schema(
        operation_id="get_returns_summary",
        summary="Return counts and refund totals",
        responses={
            200: ReturnSummarySerializer,
            400: OpenApiResponse(description="Invalid filter value"),
        },
        tags=["Returns - Admin"],
    )
    def get(self, request):
        filterset = ReturnFilter(request.query_params, queryset=ReturnQueryService.list_all())
        if not filterset.is_valid():
            raise translate_validation(filterset.errors)
        summary = ReturnQueryService.summary(filterset.qs)
        return Response(ReturnSummarySerializer(summary).data)


class AdminReturnProcessView(APIView):
    """POST /api/v1/returns/admin/{id}/process/"""

    permission_classes = [IsAuthenticated, IsOperator]

    @extend_schema(
        operation_id="process_return",
        summary="Approve or reject a return",
        description=(
            "Approving records the decision; pass finalize=true to also issue "
            "the refund in a second step."
        ),
        request=ProcessReturnSerializer,
        responses={
            200: ReturnSerializer,
            404: OpenApiResponse(description="Return not found"),
            409: OpenApiResponse(description="Return already processed"),
            422: OpenApiResponse(description="Invalid decision"),
            502: OpenApiResponse(description="Store credit issuance failed"),
        },
        tags=["Returns - Admin"],
    )
    def post(self, request, return_id):
        data = validated(ProcessReturnSerializer, request.data)
        decision = (
            ReturnDecision.APPROVE
            if data["status"] == ReturnStatus.APPROVED
            else ReturnDecision.REJECT
        )
        ret = ReturnService.process(
            return_id,
            request.user,
            decision,
            admin_notes=data["admin_notes"],
            refund_method=data["refund_method"],
            finalize=data["finalize"],
        )
        return detail_response(ret)


class AdminReturnFinalizeView(APIView):
    """POST /api/v1/returns/admin/{id}/finalize/"""

    permission_classes = [IsAuthenticated, IsOperator]

    @extend_schema(
        operation_id="finalize_return",
        summary="Issue the refund of an approved return",
        description="Idempotent: finalizing a refunded return returns it unchanged.",
        request=None,
        responses={
            200: ReturnSerializer,
            404: OpenApiResponse(description="Return not found"),
            409: OpenApiResponse(description="Return not approved, or being finalized"),
            502: OpenApiResponse(description="Store credit issuance failed"),
        },
        tags=["Returns - Admin"],
    )
    def post(self, request, return_id):
        ret = ReturnService.finalize(return_id, request.user)
        return detail_response(ret)
