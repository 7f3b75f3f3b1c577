"""rolegate: role and attribute based access control."""

from rolegate.access import Access, AccessInfo, Permission, Query, QueryInfo
from rolegate.attributes import filter_data
from rolegate.control import AccessControl
from rolegate.enums import Action, Possession
from rolegate.errors import AccessControlError

__version__ = "0.1.0"

__all__ = [
    "Access",
    "AccessControl",
    "AccessControlError",
    "AccessInfo",
    "Action",
    "Permission",
    "Possession",
    "Query",
    "QueryInfo",
    "filter_data",
]
