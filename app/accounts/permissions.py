"""
Permission classes shared by the returns and points APIs.

- IsOperator: Caller has the operator role (or is staff)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


class IsOperator(permissions.BasePermission):
    """
    Allows access only to operators.

    Unauthenticated requests are rejected by IsAuthenticated first and get a
    401; authenticated non-operators get a 403.
    """

    message = "Operator role required."

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        return bool(user and user.is_authenticated and user.is_operator)
