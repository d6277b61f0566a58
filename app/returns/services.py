"""
Return state machine service.

ReturnService owns every write to a Return:

    create   -> pending (grants claimed, refund fixed)
    decide   -> approved | rejected (rejected releases grants)
    finalize -> refunded (store credit + points refund, idempotent)
    cancel   -> cancelled (releases grants)

Each operation runs in one transaction with the Return row locked
(SELECT ... FOR UPDATE NOWAIT). A lost race surfaces as
ConcurrencyConflictError and is retried once by @retry_on_conflict.
Status history is written in the same transaction as the change, and the
customer notification is queued with transaction.on_commit so it only
goes out for committed transitions.

Usage:
    from returns.services import ReturnService
    from returns.types import CreateReturnParams

    ret = ReturnService.create(user, CreateReturnParams(order_id=1, grant_ids=[3], reason="..."))
    ReturnService.decide(ret.id, operator, ReturnDecision.APPROVE, admin_notes="ok")
    ReturnService.finalize(ret.id, operator)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.db import IntegrityError, transaction
from django_fsm import TransitionNotAllowed

from core.decorators import retry_on_conflict
from core.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from core.locks import DistributedLock, lock_for_update
from core.services import BaseService
from orders.models import GrantStatus, LicenseKeyGrant
from orders.services import OrderCatalog
from points.models import EntryType
from points.services import PointsLedgerService
from points.types import AppendEntryParams
from returns.adapters import get_credit_issuer
from returns.calculator import compute_refund
from returns.eligibility import EligibilityChecker
from returns.exceptions import GrantAlreadyClaimedError, InvalidTransitionError
from returns.models import Return, ReturnItem, ReturnStatusHistory
from returns.states import RefundMethod, ReturnDecision, ReturnReason, ReturnStatus
from returns.tasks import send_return_notification

if TYPE_CHECKING:
    from returns.types import CreateReturnParams


FINALIZE_REQUIRES_APPROVAL = "Only approved returns can be finalized"

NOTIFY_EVENTS = {
    ReturnStatus.APPROVED: "return_approved",
    ReturnStatus.REJECTED: "return_rejected",
    ReturnStatus.REFUNDED: "return_refunded",
    ReturnStatus.CANCELLED: "return_cancelled",
}


def store_credit_key(return_id) -> str:
    return f"return:{return_id}:store_credit"


def points_refund_key(return_id) -> str:
    return f"return:{return_id}:points_refund"


class ReturnService(BaseService):
    """
    Lifecycle operations on a single Return.

    All methods are classmethods - no instance state is maintained.
    """

    # =========================================================================
    # Create
    # =========================================================================

    @classmethod
    def _validate_create(cls, params: CreateReturnParams) -> tuple[list[int], str]:
        cls.validate_required(
            order_id=params.order_id,
            grant_ids=params.grant_ids,
            reason=params.reason,
        )
        reason = params.reason.strip()
        if len(reason) < settings.RETURNS_REASON_MIN_LENGTH:
            raise ValidationError(
                f"Reason must be at least {settings.RETURNS_REASON_MIN_LENGTH} characters",
                error_code="REASON_TOO_SHORT",
                details={"reason": [f"Minimum length is {settings.RETURNS_REASON_MIN_LENGTH}."]},
            )
        if params.reason_code not in ReturnReason.values:
            raise ValidationError(
                f"Unknown reason code {params.reason_code!r}",
                error_code="INVALID_REASON_CODE",
                details={"reason_code": [f"Must be one of {', '.join(ReturnReason.values)}."]},
            )
        # Keep request order, drop repeats
        grant_ids = list(dict.fromkeys(params.grant_ids))
        return grant_ids, reason

    @classmethod
    def _load_grants(cls, order, grant_ids: list[int]) -> list[LicenseKeyGrant]:
        grants = list(
            LicenseKeyGrant.objects.select_related("order_item")
            .select_for_update(of=("self",))
            .filter(pk__in=grant_ids, order_item__order_id=order.pk)
            .order_by("pk")
        )
        found = {grant.pk for grant in grants}
        missing = [grant_id for grant_id in grant_ids if grant_id not in found]
        if missing:
            raise NotFoundError(
                "Some license keys were not found on this order",
                error_code="GRANT_NOT_FOUND",
                details={"grant_ids": missing, "order_id": order.pk},
            )

        revoked = [grant.pk for grant in grants if grant.status != GrantStatus.ACTIVE]
        if revoked:
            raise ValidationError(
                "Revoked license keys cannot be returned",
                error_code="GRANT_NOT_RETURNABLE",
                details={"grant_ids": revoked},
            )

        claimed = list(
            ReturnItem.objects.filter(grant_id__in=found, claim_active=True)
            .order_by("grant_id")
            .values_list("grant_id", flat=True)
        )
        if claimed:
            raise GrantAlreadyClaimedError(
                "Some license keys are already part of an active return",
                details={"grant_ids": claimed},
            )
        return grants

    @classmethod
    @retry_on_conflict()
    def create(cls, user, params: CreateReturnParams) -> Return:
        """
        Request a return of some of an order's license keys.

        The refund amount and the advisory points refund are computed here
        and stored; finalize re-derives the points against the live order.

        Raises:
            ValidationError: Short reason, no grants, order not returnable
            NotFoundError: Order not the caller's, or grants not on the order
            GrantAlreadyClaimedError: A grant is held by another active return
        """
        grant_ids, reason = cls._validate_create(params)
        logger = cls.get_logger()

        with transaction.atomic():
            order = EligibilityChecker.get_owned_order(params.order_id, user)
            EligibilityChecker.ensure_open(order)
            grants = cls._load_grants(order, grant_ids)

            grant_prices = {grant.pk: grant.order_item.unit_price for grant in grants}
            computation = compute_refund(order, grant_prices.values())

            ret = Return.objects.create(
                order=order,
                user_id=order.user_id,
                reason=reason,
                reason_code=params.reason_code,
                customer_notes=(params.notes or "").strip(),
                refund_amount=computation.monetary_refund,
                points_to_refund=computation.points_to_refund,
                refund_method=RefundMethod.STORE_CREDIT,
            )
            try:
                with transaction.atomic():
                    ReturnItem.objects.bulk_create(
                        [
                            ReturnItem(
                                return_request=ret,
                                order_item_id=grant.order_item_id,
                                grant=grant,
                                unit_price=grant_prices[grant.pk],
                                reason=(params.item_reasons.get(grant.pk) or "").strip(),
                            )
                            for grant in grants
                        ]
                    )
            except IntegrityError as exc:
                # Another request claimed one of the grants after our check
                raise GrantAlreadyClaimedError(
                    "Some license keys are already part of an active return",
                    details={"grant_ids": grant_ids},
                ) from exc

            cls._record_history(ret, "", user, notes="Return requested")

        logger.info(
            "Return requested",
            extra={
                "return_id": str(ret.id),
                "order_id": order.pk,
                "user_id": ret.user_id,
                "grant_count": len(grants),
                "refund_amount": str(ret.refund_amount),
                "points_to_refund": ret.points_to_refund,
            },
        )
        return ret

    # =========================================================================
    # Decide
    # =========================================================================

    @classmethod
    @retry_on_conflict()
    def decide(
        cls,
        return_id,
        operator,
        decision: str,
        admin_notes: str = "",
        refund_method: str | None = None,
    ) -> Return:
        """
        Approve or reject a pending return.

        Approval only records intent; money moves in finalize. Rejection
        releases the return's grants.

        Raises:
            PermissionDeniedError: Caller is not an operator
            ValidationError: Unknown decision or unsupported refund method
            InvalidTransitionError: Return is not pending
        """
        cls._require_operator(operator)
        if decision not in ReturnDecision.values:
            raise ValidationError(
                f"Decision must be one of {', '.join(ReturnDecision.values)}",
                error_code="INVALID_DECISION",
            )
        if refund_method and refund_method != RefundMethod.STORE_CREDIT:
            raise ValidationError(
                "Refunds are currently issued as store credit only",
                error_code="REFUND_METHOD_NOT_SUPPORTED",
                details={"refund_method": refund_method},
            )
        notes = (admin_notes or "").strip()

        with transaction.atomic():
            ret = lock_for_update(Return, return_id)
            old_status = ret.status
            transition = ret.approve if decision == ReturnDecision.APPROVE else ret.reject
            try:
                transition(operator=operator, notes=notes)
            except TransitionNotAllowed as exc:
                cls._reject_transition(ret, decision, "Return has already been processed", exc)

            ret.save()
            if ret.status == ReturnStatus.REJECTED:
                cls._release_claims(ret)
            cls._record_history(ret, old_status, operator, notes=notes)
            cls._notify_on_commit(ret)

        cls.get_logger().info(
            "Return decided",
            extra={
                "return_id": str(ret.id),
                "decision": decision,
                "operator_id": operator.pk,
            },
        )
        return ret

    # =========================================================================
    # Finalize
    # =========================================================================

    @classmethod
    @retry_on_conflict()
    def finalize(cls, return_id, operator=None) -> Return:
        """
        Issue the store credit and points refund of an approved return.

        Idempotent: finalizing a refunded return returns it unchanged. Credit
        and ledger writes are keyed on the return id, so a retry after a
        partial failure can never issue them twice.

        Raises:
            InvalidTransitionError: Return is not approved (or refunded)
            ExternalServiceError: Store credit could not be issued; the
                return stays approved
            ConcurrencyConflictError: Another worker is finalizing it
        """
        logger = cls.get_logger()

        with DistributedLock(
            f"return:{return_id}:finalize",
            ttl=settings.RETURNS_LOCK_TIMEOUT,
            blocking=False,
        ):
            with transaction.atomic():
                ret = lock_for_update(Return, return_id)
                if ret.status == ReturnStatus.REFUNDED:
                    logger.info(
                        "Return already finalized",
                        extra={"return_id": str(ret.id)},
                    )
                    return ret

                if ret.status != ReturnStatus.APPROVED:
                    cls._reject_transition(ret, "finalize", FINALIZE_REQUIRES_APPROVAL)

                order = OrderCatalog.get_order(ret.order_id)
                computation = compute_refund(
                    order,
                    ret.items.values_list("unit_price", flat=True),
                )
                points = computation.points_to_refund
                if points != ret.points_to_refund:
                    logger.warning(
                        "Points refund differs from the amount computed at request time",
                        extra={
                            "return_id": str(ret.id),
                            "requested": ret.points_to_refund,
                            "finalized": points,
                        },
                    )

                credit_reference = ""
                if ret.refund_amount > 0:
                    receipt = get_credit_issuer().issue_store_credit(
                        user_id=ret.user_id,
                        amount=ret.refund_amount,
                        idempotency_key=store_credit_key(ret.id),
                        reference=f"return:{ret.id}",
                    )
                    credit_reference = receipt.reference

                if points > 0:
                    PointsLedgerService.append_entry(
                        AppendEntryParams(
                            user_id=ret.user_id,
                            amount=points,
                            entry_type=EntryType.REFUND,
                            idempotency_key=points_refund_key(ret.id),
                            description=f"Points refund for return {ret.id}",
                            order_id=ret.order_id,
                            return_id=ret.id,
                            created_by=f"operator:{operator.pk}" if operator else "returns",
                        )
                    )

                old_status = ret.status
                ret.mark_refunded(credit_reference=credit_reference, points_refunded=points)
                ret.save()
                cls._record_history(ret, old_status, operator, notes="Refund issued")
                cls._notify_on_commit(ret)

        logger.info(
            "Return finalized",
            extra={
                "return_id": str(ret.id),
                "user_id": ret.user_id,
                "refund_amount": str(ret.refund_amount),
                "points_refunded": ret.points_refunded,
                "credit_reference": ret.credit_reference,
            },
        )
        return ret

    @classmethod
    def process(
        cls,
        return_id,
        operator,
        decision: str,
        admin_notes: str = "",
        refund_method: str | None = None,
        finalize: bool = False,
    ) -> Return:
        """
        Decide a return and, for approvals, optionally finalize it right away.

        The two steps commit separately: if finalize fails, the return is
        left approved and finalize can be retried.
        """
        ret = cls.decide(
            return_id,
            operator,
            decision,
            admin_notes=admin_notes,
            refund_method=refund_method,
        )
        if finalize and ret.status == ReturnStatus.APPROVED:
            ret = cls.finalize(ret.id, operator)
        return ret

    # =========================================================================
    # Cancel
    # =========================================================================

    @classmethod
    @retry_on_conflict()
    def cancel(cls, return_id, requester) -> Return:
        """
        Cancel a pending or approved return and release its grants.

        Raises:
            PermissionDeniedError: Caller is neither the requester nor an operator
            InvalidTransitionError: Return is already rejected, refunded or cancelled
        """
        with transaction.atomic():
            ret = lock_for_update(Return, return_id)
            if ret.user_id != requester.pk and not getattr(requester, "is_operator", False):
                raise PermissionDeniedError(
                    "Only the requester or an operator can cancel this return",
                    details={"return_id": str(ret.id)},
                )

            old_status = ret.status
            try:
                ret.cancel()
            except TransitionNotAllowed as exc:
                cls._reject_transition(
                    ret,
                    "cancel",
                    f"Cannot cancel a return that is already {ret.get_status_display().lower()}",
                    exc,
                )
            ret.save()
            cls._release_claims(ret)
            cls._record_history(ret, old_status, requester, notes="Return cancelled")
            cls._notify_on_commit(ret)

        cls.get_logger().info(
            "Return cancelled",
            extra={"return_id": str(ret.id), "cancelled_by": requester.pk},
        )
        return ret

    # =========================================================================
    # Helpers
    # =========================================================================

    @classmethod
    def _require_operator(cls, user) -> None:
        if user is None or not getattr(user, "is_operator", False):
            raise PermissionDeniedError("Operator role required")

    @classmethod
    def _reject_transition(cls, ret: Return, action: str, message: str, exc=None):
        cls.get_logger().warning(
            "Rejected return transition",
            extra={
                "return_id": str(ret.id),
                "current_status": ret.status,
                "action": action,
            },
        )
        raise InvalidTransitionError(
            message,
            details={"current_status": ret.status, "action": action},
        ) from exc

    @classmethod
    def _release_claims(cls, ret: Return) -> int:
        return ReturnItem.objects.filter(
            return_request=ret,
            claim_active=True,
        ).update(claim_active=False)

    @classmethod
    def _record_history(cls, ret: Return, old_status: str, user, notes: str = "") -> None:
        ReturnStatusHistory.objects.create(
            return_request=ret,
            old_status=old_status,
            new_status=ret.status,
            changed_by=user if user is not None and user.pk else None,
            notes=notes,
        )

    @classmethod
    def _notify_on_commit(cls, ret: Return) -> None:
        event = NOTIFY_EVENTS.get(ret.status)
        if event is None:
            return
        return_id = str(ret.id)
        transaction.on_commit(
            lambda: send_return_notification.delay(return_id, event),
            robust=True,
        )
