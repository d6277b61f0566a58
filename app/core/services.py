"""
Base service layer patterns for business logic encapsulation.

Services encapsulate business logic separate from views and models.
Views handle HTTP concerns, models handle data, services handle logic.
Expected failures are raised as core.exceptions subclasses and translated
to HTTP responses by core.exception_handler.

Usage:
    from core.services import BaseService

    class WalletService(BaseService):
        @classmethod
        def issue(cls, user_id, amount):
            cls.validate_required(user_id=user_id, amount=amount)
            with cls.atomic():
                credit = StoreCredit.objects.create(...)
            cls.get_logger().info("Issued credit", extra={"credit_id": credit.id})
            return credit
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from django.db import transaction

from core.exceptions import ValidationError

if TYPE_CHECKING:
    from collections.abc import Generator


class BaseService:
    """
    Base class for service layer classes.

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Services should be stateless
        - Raise core.exceptions errors for expected failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        Thin wrapper around Django's transaction.atomic() that makes
        transaction boundaries explicit in service code.
        """
        with transaction.atomic():
            yield

    @classmethod
    def validate_required(cls, **kwargs) -> None:
        """
        Validate that required fields are provided.

        Raises:
            ValidationError: If any field is None, an empty collection,
                or a blank string. Field errors are listed in details.
        """
        errors = {}
        for field_name, value in kwargs.items():
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[field_name] = ["This field is required."]
            elif isinstance(value, (list, tuple, set)) and not value:
                errors[field_name] = ["At least one value is required."]

        if errors:
            raise ValidationError(
                "Required fields missing",
                error_code="VALIDATION_ERROR",
                details=errors,
            )
