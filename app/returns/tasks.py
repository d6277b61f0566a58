"""
Celery tasks for the returns engine.

Tasks:
    send_return_notification: Tell the requester about a decision on their return

Queued by ReturnService through transaction.on_commit, so a task only
exists for a committed transition. Delivery failures are retried by Celery
and never touch the Return.
"""

from __future__ import annotations

import logging

from celery import shared_task

from returns.adapters import get_notification_dispatcher
from returns.models import Return

logger = logging.getLogger(__name__)


def build_payload(ret: Return) -> dict:
    return {
        "return_id": str(ret.id),
        "order_id": ret.order_id,
        "status": ret.status,
        "refund_amount": str(ret.refund_amount),
        "points_refunded": ret.points_refunded,
        "credit_reference": ret.credit_reference,
        "admin_notes": ret.admin_notes,
    }


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def send_return_notification(self, return_id: str, event: str) -> bool:
    """
    Deliver a return notification through the configured dispatcher.

    Returns:
        True if the dispatcher accepted the notification
    """
    ret = Return.objects.filter(pk=return_id).first()
    if ret is None:
        logger.warning(f"Return {return_id} not found, skipping {event} notification")
        return False

    sent = get_notification_dispatcher().notify(ret.user_id, event, build_payload(ret))
    logger.info(
        f"Return notification {event} for {return_id}: {'sent' if sent else 'not sent'}",
        extra={"return_id": return_id, "event": event, "attempt": self.request.retries + 1},
    )
    return sent
