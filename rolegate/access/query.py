"""Permission resolution and the chainable ``Query`` handle."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from rolegate.access.models import Permission, QueryInfo, normalize_query_info
from rolegate.attributes.glob import union_all
from rolegate.enums import Action, Possession
from rolegate.errors import InvalidRoleError
from rolegate.grants.hierarchy import flatten
from rolegate.grants.validation import permission_key, shape_of

if TYPE_CHECKING:
    from rolegate.grants.store import GrantsStore


def resolve_permission(grants: Mapping[str, Any], query: QueryInfo | Mapping[str, Any]) -> Permission:
    """Collect the attribute lists every (inherited) role holds and union them.

    ``action:own`` falls back to ``action:any`` on a role that has no own
    entry; an ``any`` query never looks at ``own``.
    """
    info = normalize_query_info(QueryInfo.from_value(query))
    wanted = permission_key(info.action, info.possession)
    fallback = permission_key(info.action, Possession.any.value)

    collected: list[list[str]] = []
    for role in flatten(grants, info.role):
        record = grants[role].get(info.resource)
        if not record:
            continue
        attrs = record.get(wanted)
        if attrs is None:
            attrs = record.get(fallback)
        if attrs is not None:
            collected.append(attrs)

    return Permission(
        roles=info.role,
        resource=info.resource,
        action=Action(info.action),
        possession=Possession(info.possession),
        attributes=union_all(collected),
    )


class Query:
    """Chainable permission question bound to a store.

    >>> ac.can("user").read_own("video").granted
    """

    def __init__(self, store: GrantsStore, role_or_info: object = None) -> None:
        self._store = store
        kind = shape_of(role_or_info)
        if kind == "mapping":
            self._info = QueryInfo.from_value(role_or_info)  # type: ignore[arg-type]
        elif kind in ("string", "sequence"):
            self._info = QueryInfo(role=role_or_info)
        elif isinstance(role_or_info, QueryInfo):
            self._info = role_or_info.model_copy()
        elif role_or_info is None:
            self._info = QueryInfo()
        else:
            raise InvalidRoleError(
                "Invalid role(s), expected a valid string, list or QueryInfo."
            )

    def role(self, role: object) -> Query:
        self._info.role = role
        return self

    def resource(self, resource: str) -> Query:
        self._info.resource = resource
        return self

    def _get_permission(self, action: str, possession: str, resource: str | None) -> Permission:
        info = self._info.model_copy(update={"action": action, "possession": possession})
        if resource is not None:
            info.resource = resource
        with self._store.reading() as grants:
            return resolve_permission(grants, info)

    def create_own(self, resource: str | None = None) -> Permission:
        return self._get_permission("create", "own", resource)

    def create_any(self, resource: str | None = None) -> Permission:
        return self._get_permission("create", "any", resource)

    create = create_any

    def read_own(self, resource: str | None = None) -> Permission:
        return self._get_permission("read", "own", resource)

    def read_any(self, resource: str | None = None) -> Permission:
        return self._get_permission("read", "any", resource)

    read = read_any

    def update_own(self, resource: str | None = None) -> Permission:
        return self._get_permission("update", "own", resource)

    def update_any(self, resource: str | None = None) -> Permission:
        return self._get_permission("update", "any", resource)

    update = update_any

    def delete_own(self, resource: str | None = None) -> Permission:
        return self._get_permission("delete", "own", resource)

    def delete_any(self, resource: str | None = None) -> Permission:
        return self._get_permission("delete", "any", resource)

    delete = delete_any
