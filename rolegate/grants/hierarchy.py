"""Role inheritance resolution over ``$extend`` edges."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from rolegate.enums import EXTEND_KEY
from rolegate.errors import (
    CrossInheritanceError,
    InvalidRoleError,
    RoleNotFoundError,
    SelfExtensionError,
)
from rolegate.grants.validation import shape_of, to_string_list, validate_name, validate_names

logger = logging.getLogger(__name__)

Grants = Mapping[str, Any]


def _uniq_concat(base: Iterable[str], extra: Iterable[str]) -> list[str]:
    result = list(base)
    for item in extra:
        if item not in result:
            result.append(item)
    return result


def _get_role(grants: Grants, role: object) -> Mapping[str, Any]:
    record = grants.get(role) if isinstance(role, str) else None
    if record is None:
        raise RoleNotFoundError(role)
    return record


def hierarchy_of(
    grants: Grants,
    role: str,
    root_role: str | None = None,
    _path: tuple[str, ...] = (),
) -> list[str]:
    """Return *role* followed by every role it transitively extends.

    The walk is depth-first in ``$extend`` order and the result carries no
    duplicates. Each target is checked against the original root as well as
    the current path, so indirect cycles (A -> B -> C -> A) and cycles that
    don't pass through the root both fail.
    """
    record = _get_role(grants, role)
    result = [role]
    extends = record.get(EXTEND_KEY) or []
    path = (*_path, role)

    for ext in extends:
        if not isinstance(ext, str) or ext not in grants:
            raise RoleNotFoundError(ext)
        if ext == role:
            raise SelfExtensionError(role)
        if root_role is not None and ext == root_role:
            raise CrossInheritanceError(ext, root_role)
        if ext in path:
            raise CrossInheritanceError(ext, role)
        result = _uniq_concat(result, hierarchy_of(grants, ext, root_role or role, path))
    return result


def inherited_roles_of(grants: Grants, role: str) -> list[str]:
    """Everything *role* inherits from, without the role itself."""
    return hierarchy_of(grants, role)[1:]


def flatten(grants: Grants, roles: object) -> list[str]:
    """Union of the hierarchies of every role in *roles*, query roles first."""
    names = to_string_list(roles)
    if not names:
        raise InvalidRoleError(f"Invalid role(s): {roles!r}")
    result = _uniq_concat([], names)
    for name in names:
        result = _uniq_concat(result, hierarchy_of(grants, name))
    return result


def non_existent_roles(grants: Grants, roles: Iterable[object]) -> list[object]:
    return [r for r in roles if not isinstance(r, str) or r not in grants]


def cross_extending_role(grants: Grants, role: str, extenders: object) -> str | None:
    """Return the first extender that already (transitively) extends *role*."""
    for ext in to_string_list(extenders):
        if ext == role:
            continue
        if role in hierarchy_of(grants, ext):
            return ext
    return None


def extend_role(grants: dict[str, Any], roles: object, extenders: object) -> None:
    """Append *extenders* to the ``$extend`` list of every role in *roles*.

    Every check runs before any role is touched, so a failure leaves *grants*
    exactly as it was.
    """
    targets = to_string_list(roles)
    if not targets:
        raise InvalidRoleError(f"Invalid role(s): {roles!r}")
    if shape_of(extenders) == "sequence" and len(extenders) == 0:  # type: ignore[arg-type]
        return

    ext_roles = to_string_list(extenders)
    if not ext_roles:
        raise InvalidRoleError(f"Cannot inherit invalid role(s): {extenders!r}")
    validate_names(ext_roles)
    missing = non_existent_roles(grants, ext_roles)
    if missing:
        raise RoleNotFoundError(", ".join(str(m) for m in missing))

    for target in targets:
        validate_name(target)
        if target not in grants:
            raise RoleNotFoundError(target)
        if target in ext_roles:
            raise SelfExtensionError(target)
        crossed = cross_extending_role(grants, target, ext_roles)
        if crossed is not None:
            raise CrossInheritanceError(crossed, target)

    for target in targets:
        record = grants[target]
        record[EXTEND_KEY] = _uniq_concat(record.get(EXTEND_KEY) or [], ext_roles)
        logger.debug("Role %s extends %s", target, record[EXTEND_KEY])
