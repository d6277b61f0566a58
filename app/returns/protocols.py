"""
Interfaces the returns engine consumes from its collaborators.

Protocols:
    StoreCreditIssuer: Issues store credit for a finalized return
    NotificationDispatcher: Tells a customer about a decision on their return

Any object with matching methods satisfies these, so tests can hand in a
Mock and other transports can be plugged in without subclassing.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from typing import Any

    from wallet.types import CreditReceipt


@runtime_checkable
class StoreCreditIssuer(Protocol):
    """
    Issues store credit.

    Implementations must be idempotent on ``idempotency_key`` and raise
    ExternalServiceError when the credit could not be issued.
    """

    def issue_store_credit(
        self,
        user_id: int,
        amount: Decimal,
        idempotency_key: str,
        reference: str = "",
    ) -> CreditReceipt: ...


@runtime_checkable
class NotificationDispatcher(Protocol):
    """
    Best-effort notification transport.

    Example:
        class SlackDispatcher:
            def notify(self, user_id, event, payload) -> bool:
                ...
                return True
    """

    def notify(self, user_id: int, event: str, payload: dict[str, Any]) -> bool:
        """
        Deliver one notification.

        Returns:
            True if the notification was handed to the transport
        """
        ...
