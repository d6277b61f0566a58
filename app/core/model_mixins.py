"""
Reusable model mixins for common patterns.

Mixins:
    UUIDPrimaryKeyMixin: UUID as primary key
    VersionedMixin: Optimistic locking version, bumped on every update

Usage:
    class Return(UUIDPrimaryKeyMixin, VersionedMixin, BaseModel):
        ...
"""

from __future__ import annotations

import uuid

from django.db import models
from django.db.models import F


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use UUID as primary key instead of auto-increment integer.

    URLs don't reveal record count or order, and ids can be used in
    idempotency keys before the row is visible to other transactions.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True


class VersionedMixin(models.Model):
    """
    Optimistic locking support.

    ``version`` starts at 1 and is incremented in the database on every
    update, so a reader holding an older version can detect that the row
    has moved on.
    """

    version = models.PositiveIntegerField(
        default=1,
        help_text="Version for optimistic locking - incremented on each save",
    )

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        """
        Save with version auto-increment for optimistic locking.
        """
        is_update = not self._state.adding and not kwargs.get("force_insert", False)
        if is_update:
            self.version = F("version") + 1
            update_fields = kwargs.get("update_fields")
            if update_fields is not None:
                kwargs["update_fields"] = {*update_fields, "version"}
        super().save(*args, **kwargs)
        if is_update:
            self.refresh_from_db(fields=["version"])
