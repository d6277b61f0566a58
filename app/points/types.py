"""
Data types for points ledger operations.

Types:
    AppendEntryParams: Parameters for appending a ledger entry
    PointsBalance: Balance derived from a user's entries
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal


@dataclass
class AppendEntryParams:
    """
    Parameters for appending a points ledger entry.

    Attributes:
        user_id: Owner of the points
        amount: Signed points (positive = credit, negative = debit)
        entry_type: EntryType value
        idempotency_key: Unique key; a repeated key returns the stored entry
        description: Human-readable description
        order_id: Optional correlated order
        return_id: Optional correlated return
        created_by: Identifier of the service/operator writing the entry
    """

    user_id: int
    amount: int
    entry_type: str
    idempotency_key: str
    description: str = ""
    order_id: int | None = None
    return_id: uuid.UUID | None = None
    created_by: str = ""


@dataclass(frozen=True)
class PointsBalance:
    """
    A user's points position, derived from the ledger.

    Attributes:
        balance: Sum of all entry amounts
        total_earned: Sum of all positive amounts
        total_spent: Sum of |amount| over spent entries
    """

    balance: int
    total_earned: int
    total_spent: int

    def value_in_pesos(self, pesos_per_point: int) -> Decimal:
        return Decimal(self.balance) * pesos_per_point
