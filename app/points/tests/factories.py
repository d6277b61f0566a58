"""
Factory Boy factories for points ledger models.

Ledger entries are written through the ORM directly here, bypassing the
service-level balance check, so tests can build arbitrary histories.
"""

import factory

from accounts.tests.factories import UserFactory
from points.models import EntryType, PointsLedgerEntry


class PointsLedgerEntryFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = PointsLedgerEntry

    user = factory.SubFactory(UserFactory)
    amount = 100
    entry_type = EntryType.EARNED
    description = factory.Sequence(lambda n: f"Entry {n}")
    idempotency_key = factory.Sequence(lambda n: f"test-entry:{n}")
