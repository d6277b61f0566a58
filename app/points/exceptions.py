"""
Points ledger exceptions.

Exception Hierarchy:
    ValidationError (core)
    └── InsufficientBalanceError - Append would take the balance below zero
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import ValidationError

if TYPE_CHECKING:
    from typing import Any


class InsufficientBalanceError(ValidationError):
    """
    Raised when a debit would make a user's points balance negative.

    Attributes:
        user_id: The user whose balance is insufficient
        required: Points the debit needs
        available: Points currently available
    """

    default_error_code: str = "INSUFFICIENT_POINTS"

    def __init__(
        self,
        user_id: int,
        required: int,
        available: int,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.user_id = user_id
        self.required = required
        self.available = available

        message = (
            f"Insufficient points balance for user {user_id}: "
            f"required {required}, available {available}"
        )
        merged = {
            "user_id": user_id,
            "required": required,
            "available": available,
            **(details or {}),
        }
        super().__init__(message, error_code=error_code, details=merged)
