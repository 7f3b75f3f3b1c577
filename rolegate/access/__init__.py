"""Mutation and query engines over a grants store."""

from rolegate.access.models import AccessInfo, Permission, QueryInfo
from rolegate.access.query import Query, resolve_permission
from rolegate.access.builder import Access

__all__ = [
    "Access",
    "AccessInfo",
    "Permission",
    "Query",
    "QueryInfo",
    "resolve_permission",
]
