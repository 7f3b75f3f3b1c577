"""Public facade: ``AccessControl``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from rolegate.access.builder import Access
from rolegate.access.models import Permission, QueryInfo
from rolegate.access.query import Query, resolve_permission
from rolegate.attributes.filter import filter_data
from rolegate.config.loader import load_policy
from rolegate.enums import Action, Possession
from rolegate.errors import AccessControlError, InvalidRoleError, LockedError
from rolegate.grants.store import GrantsStore

logger = logging.getLogger(__name__)

_MISSING: Any = object()


class AccessControl:
    """Role and attribute based access control over an in-memory grants model.

    Usage::

        ac = AccessControl()
        ac.grant("user").create_own("video").read_any("video", ["*", "!id"])
        ac.grant("admin").extend("user").update_any("video")
        ac.can("admin").read_any("video").granted   # True
    """

    Action = Action
    Possession = Possession
    Error = AccessControlError

    def __init__(self, grants: Any = None) -> None:
        self._store = GrantsStore(grants)

    @classmethod
    def from_file(cls, path: str | Path, lock: bool = False, fmt: str = "auto") -> AccessControl:
        """Build an instance from a YAML or JSON policy file."""
        ac = cls(load_policy(path, fmt))
        if lock:
            ac.lock()
        logger.debug("Loaded policy from %s (locked=%s)", path, lock)
        return ac

    # -- Grants model --

    @property
    def is_locked(self) -> bool:
        return self._store.locked

    def get_grants(self) -> dict[str, Any]:
        """A deep copy of the grants; editing it never touches this instance."""
        return self._store.snapshot()

    def set_grants(self, grants: Any) -> AccessControl:
        self._store.replace(grants)
        return self

    def reset(self) -> AccessControl:
        self._store.reset()
        return self

    def lock(self) -> AccessControl:
        self._store.lock()
        return self

    # -- Roles and resources --

    def get_roles(self) -> list[str]:
        return self._store.roles()

    def get_resources(self) -> list[str]:
        return self._store.resources()

    def has_role(self, role: str | list[str]) -> bool:
        return self._store.has_role(role)

    def has_resource(self, resource: str | list[str]) -> bool:
        return self._store.has_resource(resource)

    def get_inherited_roles_of(self, role: str) -> list[str]:
        return self._store.inherited_roles_of(role)

    get_extended_roles_of = get_inherited_roles_of

    def extend_role(self, roles: str | list[str], extenders: str | list[str]) -> AccessControl:
        self._store.extend(roles, extenders)
        return self

    def remove_roles(self, roles: str | list[str]) -> AccessControl:
        self._store.remove_roles(roles)
        return self

    def remove_resources(
        self,
        resources: str | list[str],
        roles: str | list[str] | None = None,
        action: str | None = None,
    ) -> AccessControl:
        self._store.remove_resources(resources, roles, action)
        return self

    # -- Mutation --

    def _access(self, role_or_info: Any, denied: bool) -> Access:
        if self._store.locked:
            raise LockedError()
        if role_or_info is None:
            raise InvalidRoleError("Invalid role(s): None")
        return Access(self._store, None if role_or_info is _MISSING else role_or_info, denied)

    def grant(self, role_or_info: Any = _MISSING) -> Access:
        return self._access(role_or_info, denied=False)

    def deny(self, role_or_info: Any = _MISSING) -> Access:
        return self._access(role_or_info, denied=True)

    allow = grant
    reject = deny

    # -- Query --

    def can(self, role: Any = _MISSING) -> Query:
        if role is None:
            raise InvalidRoleError("Invalid role(s): None")
        return Query(self._store, None if role is _MISSING else role)

    query = can

    def permission(self, query_info: QueryInfo | dict[str, Any]) -> Permission:
        with self._store.reading() as grants:
            return resolve_permission(grants, query_info)

    # -- Helpers --

    @staticmethod
    def filter(data: Any, attributes: Any) -> Any:
        return filter_data(data, attributes)

    @staticmethod
    def is_access_control_error(obj: object) -> bool:
        return isinstance(obj, AccessControlError)
