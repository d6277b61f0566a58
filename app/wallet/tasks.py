"""
Celery tasks for the wallet.

Tasks:
    expire_store_credits: Periodic expiry of lapsed store credit
        (scheduled in CELERY_BEAT_SCHEDULE)
"""

from __future__ import annotations

import logging

from celery import shared_task

from wallet.services import WalletService

logger = logging.getLogger(__name__)


@shared_task
def expire_store_credits() -> dict:
    """
    Periodic task to expire store credits past their expiry date.

    Returns:
        Dict with the number of credits expired
    """
    expired = WalletService.expire_due()
    logger.info(f"Store credit expiry run finished: {expired} expired")
    return {"expired": expired}
