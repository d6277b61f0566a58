"""
DRF exception handler for application errors.

Converts core.exceptions.BaseApplicationError (and subclasses) raised from
views or services into the standard error body:

    {"error": "...", "error_code": "...", "details": {...}}

with the status code declared on the exception class. Anything else is
left to DRF's default handler.
"""

from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationError

logger = logging.getLogger(__name__)


def application_exception_handler(exc, context):
    if isinstance(exc, BaseApplicationError):
        view = context.get("view")
        logger.info(
            f"{exc.__class__.__name__} in {view.__class__.__name__ if view else 'view'}: {exc.message}",
            extra={"error_code": exc.error_code, "status_code": exc.http_status},
        )
        return Response(exc.to_dict(), status=exc.http_status)

    return exception_handler(exc, context)
