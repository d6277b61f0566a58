"""
Loyalty points ledger.

An append-only log of point credits and debits per user. The balance is
never stored: it is recomputed from the entries on every read, and every
write that could take it below zero is rejected under a per-user row lock.

Usage:
    from points.services import PointsLedgerService
    from points.types import AppendEntryParams
    from points.models import EntryType

    PointsLedgerService.append_entry(AppendEntryParams(
        user_id=user.id,
        amount=1900,
        entry_type=EntryType.REFUND,
        description="Refund for return 7",
        idempotency_key="return:7:points_refund",
    ))
    balance = PointsLedgerService.get_balance(user.id)
"""
