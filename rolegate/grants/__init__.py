"""Grants model: validation, role hierarchy, and the in-memory store.

``GrantsStore`` lives in ``rolegate.grants.store`` and is imported from there.
"""

from rolegate.grants.hierarchy import (
    cross_extending_role,
    extend_role,
    flatten,
    hierarchy_of,
    inherited_roles_of,
)
from rolegate.grants.validation import (
    is_filled_string_list,
    normalize_action_possession,
    shape_of,
    to_string_list,
    validate_name,
    validate_names,
    validate_resource_shape,
    validate_role_shape,
)

__all__ = [
    "cross_extending_role",
    "extend_role",
    "flatten",
    "hierarchy_of",
    "inherited_roles_of",
    "is_filled_string_list",
    "normalize_action_possession",
    "shape_of",
    "to_string_list",
    "validate_name",
    "validate_names",
    "validate_resource_shape",
    "validate_role_shape",
]
