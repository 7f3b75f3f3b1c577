"""Fluent builder that writes grants and denials into a store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rolegate.access.models import AccessInfo
from rolegate.errors import InvalidRoleError
from rolegate.grants.validation import shape_of, validate_names

if TYPE_CHECKING:
    from rolegate.grants.store import GrantsStore


class Access:
    """Accumulates an ``AccessInfo`` draft and commits it on each terminal call.

    ``ac.grant("user").read_own("video").update_own("video", ["title"])``
    commits two permissions. Attributes given to a terminal, or set with
    ``attributes()``, apply to that terminal only.
    """

    def __init__(self, store: GrantsStore, role_or_info: object = None, denied: bool = False) -> None:
        self._store = store
        self._info = AccessInfo(denied=denied)

        kind = shape_of(role_or_info)
        if kind in ("string", "sequence"):
            self.role(role_or_info)
        elif kind == "mapping" or isinstance(role_or_info, AccessInfo):
            info = AccessInfo.from_value(role_or_info)  # type: ignore[arg-type]
            if info == AccessInfo():
                raise InvalidRoleError("Invalid access info: no fields given.")
            self._info = info.model_copy(update={"denied": denied})
            if self._info.is_fulfilled():
                self._store.commit(self._info)
                self._info.attributes = None
        elif role_or_info is not None:
            raise InvalidRoleError(
                "Invalid role(s), expected a valid string, list or AccessInfo."
            )

    @property
    def denied(self) -> bool:
        return self._info.denied

    def role(self, value: str | list[str]) -> Access:
        # An unterminated chain such as grant("user") still registers the role.
        self._store.ensure_roles(value)
        self._info.role = value
        return self

    def resource(self, value: str | list[str]) -> Access:
        validate_names(value)
        self._info.resource = value
        return self

    def attributes(self, value: str | list[str]) -> Access:
        self._info.attributes = value
        return self

    def extend(self, roles: str | list[str]) -> Access:
        self._store.extend(self._info.role, roles)
        return self

    def grant(self, role_or_info: object = None) -> Access:
        return Access(self._store, role_or_info, denied=False)

    def deny(self, role_or_info: object = None) -> Access:
        return Access(self._store, role_or_info, denied=True)

    allow = grant
    reject = deny

    def lock(self) -> Access:
        self._store.lock()
        return self

    def _prepare_and_commit(
        self, action: str, possession: str, resource: Any, attributes: Any
    ) -> Access:
        self._info.action = action
        self._info.possession = possession
        if resource:
            self._info.resource = resource
        if attributes is not None:
            self._info.attributes = attributes
        try:
            self._store.commit(self._info)
        finally:
            self._info.attributes = None
        return self

    def create_own(self, resource: Any = None, attributes: Any = None) -> Access:
        return self._prepare_and_commit("create", "own", resource, attributes)

    def create_any(self, resource: Any = None, attributes: Any = None) -> Access:
        return self._prepare_and_commit("create", "any", resource, attributes)

    create = create_any

    def read_own(self, resource: Any = None, attributes: Any = None) -> Access:
        return self._prepare_and_commit("read", "own", resource, attributes)

    def read_any(self, resource: Any = None, attributes: Any = None) -> Access:
        return self._prepare_and_commit("read", "any", resource, attributes)

    read = read_any

    def update_own(self, resource: Any = None, attributes: Any = None) -> Access:
        return self._prepare_and_commit("update", "own", resource, attributes)

    def update_any(self, resource: Any = None, attributes: Any = None) -> Access:
        return self._prepare_and_commit("update", "any", resource, attributes)

    update = update_any

    def delete_own(self, resource: Any = None, attributes: Any = None) -> Access:
        return self._prepare_and_commit("delete", "own", resource, attributes)

    def delete_any(self, resource: Any = None, attributes: Any = None) -> Access:
        return self._prepare_and_commit("delete", "any", resource, attributes)

    delete = delete_any
