"""
Pagination classes shared by the API apps.

- PageLimitPagination: page/limit query parameters (return listings)
- LedgerLimitOffsetPagination: limit/offset query parameters (points history)
"""

from rest_framework.pagination import LimitOffsetPagination, PageNumberPagination


class PageLimitPagination(PageNumberPagination):
    """
    Page-number pagination that takes the page size from ``limit``.

    Default: 20 items per page
    Maximum: 100 items per page

    Query parameters:
        page: 1-based page number
        limit: Number of items (optional override)
    """

    page_size = 20
    max_page_size = 100
    page_size_query_param = "limit"


class LedgerLimitOffsetPagination(LimitOffsetPagination):
    """Limit/offset pagination for ledger history. Default 50, maximum 200."""

    default_limit = 50
    max_limit = 200
