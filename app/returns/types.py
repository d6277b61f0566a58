"""
Data types for the returns engine.

Types:
    EligibleGrant: A license key that may still be returned
    EligibilityResult: Eligibility verdict for an order
    CreateReturnParams: Parameters for requesting a return
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class EligibleGrant:
    """
    Denormalized display data for one returnable license key.

    ``unit_price`` is the price the calculator uses for this grant.
    """

    grant_id: int
    order_item_id: int
    masked_key: str
    product_id: int
    product_name: str
    unit_price: Decimal
    purchase_date: datetime


@dataclass(frozen=True)
class EligibilityResult:
    """
    Eligibility of an order for returns.

    Attributes:
        eligible: True when at least one key can be returned
        order_id: The order checked
        purchase_date: Order creation time (start of the window)
        window_ends_at: Last moment a return may be requested
        reason: Why the order is not eligible; empty when it is
        available_keys: Keys not held by an active return
    """

    eligible: bool
    order_id: int
    purchase_date: datetime
    window_ends_at: datetime
    reason: str = ""
    available_keys: list[EligibleGrant] = field(default_factory=list)


@dataclass
class CreateReturnParams:
    """
    Parameters for requesting a return.

    Attributes:
        order_id: Order the keys were bought under
        grant_ids: License key grants to return
        reason: Free-text reason
        reason_code: ReturnReason value
        notes: Optional customer notes
        item_reasons: Optional per-grant reasons keyed by grant id
    """

    order_id: int
    grant_ids: list[int]
    reason: str
    reason_code: str = "other"
    notes: str = ""
    item_reasons: dict[int, str] = field(default_factory=dict)

