"""
Data types returned by the wallet service.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class CreditReceipt:
    """
    Proof of a store credit issuance.

    Attributes:
        credit_id: StoreCredit primary key
        user_id: Holder of the credit
        amount: Amount issued
        expires_at: When the credit lapses
        created: False when an earlier issuance with the same key was returned
    """

    credit_id: uuid.UUID
    user_id: int
    amount: Decimal
    expires_at: datetime
    created: bool

    @property
    def reference(self) -> str:
        return f"store_credit:{self.credit_id}"
