"""The in-memory grants store and its lock."""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from rolegate.access.models import AccessInfo, normalize_access_info
from rolegate.enums import EXTEND_KEY
from rolegate.errors import (
    EmptyGrantsError,
    InvalidGrantsInputError,
    InvalidResourceError,
    InvalidRoleError,
    LockedError,
    RoleNotFoundError,
)
from rolegate.grants.hierarchy import extend_role, inherited_roles_of, non_existent_roles
from rolegate.grants.validation import (
    is_filled_string_list,
    normalize_action_possession,
    permission_key,
    shape_of,
    to_string_list,
    validate_name,
    validate_role_shape,
)

logger = logging.getLogger(__name__)

Grants = dict[str, dict[str, Any]]


def _import_object(value: Mapping[Any, Any]) -> Grants:
    staged: Grants = {}
    extends: list[tuple[str, list[str]]] = []
    for role in value:
        validate_name(role)
        resources, extend = validate_role_shape(value, role)
        staged[role] = copy.deepcopy(resources)
        if extend:
            extends.append((role, extend))
    # Edges go in once every role exists, so forward references resolve.
    for role, extend in extends:
        extend_role(staged, role, extend)
    return staged


def _import_list(value: list[Any] | tuple[Any, ...]) -> Grants:
    staged: Grants = {}
    for item in value:
        if shape_of(item) != "mapping":
            raise InvalidGrantsInputError(f"Invalid grant entry: {item!r}")
        info = AccessInfo.from_value(item)
        if not info.is_fulfilled():
            raise InvalidGrantsInputError(
                f"Grant entry must define role, resource and action: {item!r}"
            )
        commit_access(staged, normalize_access_info(info, require_action=True))
    return staged


def inspect_grants(value: object) -> Grants:
    """Validate bulk grants input and return a fresh, normalized grants dict.

    Accepts the object form (``role -> resource -> action -> attributes``)
    or a flat list of access records. The input is never aliased.
    """
    kind = shape_of(value)
    if kind == "mapping":
        grants = _import_object(value)  # type: ignore[arg-type]
    elif kind == "sequence":
        grants = _import_list(value)  # type: ignore[arg-type]
    else:
        raise InvalidGrantsInputError("Invalid grants object. Expected a mapping or a list.")
    logger.debug("Imported grants for %d role(s)", len(grants))
    return grants


def commit_access(grants: Grants, info: AccessInfo) -> None:
    """Write a normalized access record into *grants*, creating what is missing."""
    key = permission_key(info.action, info.possession)
    for role in info.role:
        validate_name(role)
    for resource in info.resource:
        validate_name(resource)
    for role in info.role:
        record = grants.setdefault(role, {})
        for resource in info.resource:
            record.setdefault(resource, {})[key] = list(info.attributes)
    logger.debug(
        "Committed %s on %s for %s: %s", key, info.resource, info.role, info.attributes
    )


class GrantsStore:
    """Owns the canonical grants dict.

    Mutations are staged on a deep copy and swapped in only when they
    complete, so a failing call never leaves a half-applied change behind.
    """

    def __init__(self, grants: object = None) -> None:
        self._mutex = threading.RLock()
        self._locked = False
        self._grants: Grants = {} if grants is None else inspect_grants(grants)

    # -- Reading --

    @property
    def locked(self) -> bool:
        return self._locked

    @contextmanager
    def reading(self) -> Iterator[Mapping[str, Any]]:
        """Hold the store while a reader walks the live grants."""
        with self._mutex:
            yield self._grants

    def snapshot(self) -> Grants:
        with self._mutex:
            return copy.deepcopy(self._grants)

    def roles(self) -> list[str]:
        with self._mutex:
            return list(self._grants)

    def resources(self) -> list[str]:
        with self._mutex:
            seen: list[str] = []
            for record in self._grants.values():
                for name in record:
                    if name != EXTEND_KEY and name not in seen:
                        seen.append(name)
            return seen

    def has_role(self, role: object) -> bool:
        with self._mutex:
            if shape_of(role) == "sequence":
                names = list(role)  # type: ignore[call-overload]
                return bool(names) and all(
                    isinstance(r, str) and r in self._grants for r in names
                )
            return isinstance(role, str) and role in self._grants

    def has_resource(self, resource: object) -> bool:
        known = self.resources()
        if shape_of(resource) == "sequence":
            names = list(resource)  # type: ignore[call-overload]
            return bool(names) and all(isinstance(r, str) and r in known for r in names)
        return isinstance(resource, str) and resource.strip() != "" and resource in known

    def inherited_roles_of(self, role: str) -> list[str]:
        with self._mutex:
            return inherited_roles_of(self._grants, role)

    # -- Writing --

    def _ensure_unlocked(self) -> None:
        if self._locked:
            raise LockedError()

    @contextmanager
    def mutating(self) -> Iterator[Grants]:
        """Yield a staged copy of the grants; it replaces the live dict on success."""
        with self._mutex:
            self._ensure_unlocked()
            staged = copy.deepcopy(self._grants)
            yield staged
            self._grants = staged

    def replace(self, grants: object) -> None:
        with self._mutex:
            self._ensure_unlocked()
            self._grants = inspect_grants(grants)

    def reset(self) -> None:
        with self._mutex:
            self._ensure_unlocked()
            self._grants = {}
        logger.debug("Grants reset")

    def lock(self) -> None:
        with self._mutex:
            if not self._grants:
                raise EmptyGrantsError()
            if not self._locked:
                self._locked = True
                logger.info("Grants locked with %d role(s)", len(self._grants))

    def commit(self, info: AccessInfo) -> None:
        normalized = normalize_access_info(info, require_action=True)
        with self.mutating() as staged:
            commit_access(staged, normalized)

    def ensure_roles(self, roles: object) -> None:
        """Create empty records for any of *roles* not yet in the store."""
        names = to_string_list(roles)
        if not names or not is_filled_string_list(names):
            raise InvalidRoleError(f"Invalid role(s): {roles!r}")
        for name in names:
            validate_name(name)
        with self.mutating() as staged:
            for name in names:
                staged.setdefault(name, {})

    def extend(self, roles: object, extenders: object) -> None:
        with self.mutating() as staged:
            extend_role(staged, roles, extenders)

    def remove_roles(self, roles: object) -> None:
        names = to_string_list(roles)
        if not names or not is_filled_string_list(names):
            raise InvalidRoleError(f"Invalid role(s): {roles!r}")
        with self.mutating() as staged:
            missing = non_existent_roles(staged, names)
            if missing:
                raise RoleNotFoundError(", ".join(str(m) for m in missing))
            for name in names:
                staged.pop(name, None)
            for record in staged.values():
                extend = record.get(EXTEND_KEY)
                if extend is None:
                    continue
                kept = [r for r in extend if r not in names]
                if kept:
                    record[EXTEND_KEY] = kept
                else:
                    del record[EXTEND_KEY]
        logger.debug("Removed role(s) %s", names)

    def remove_resources(
        self, resources: object, roles: object = None, action: str | None = None
    ) -> None:
        """Delete resource entries, optionally limited to *roles* and one *action*."""
        names = to_string_list(resources)
        if not names or not is_filled_string_list(names):
            raise InvalidResourceError(f"Invalid resource(s): {resources!r}")
        role_names: list[str] | None = None
        if roles is not None:
            role_names = to_string_list(roles)
            if not role_names or not is_filled_string_list(role_names):
                raise InvalidRoleError(f"Invalid role(s): {roles!r}")
        key = permission_key(*normalize_action_possession(action)) if action is not None else None

        with self.mutating() as staged:
            for role in role_names if role_names is not None else list(staged):
                record = staged.get(role)
                if record is None:
                    continue
                for name in names:
                    if name == EXTEND_KEY or name not in record:
                        continue
                    if key is None:
                        del record[name]
                    else:
                        record[name].pop(key, None)
        logger.debug("Removed resource(s) %s (roles=%s, action=%s)", names, role_names, key)
