"""Pydantic models for access drafts, queries, and resolved permissions."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, computed_field

from rolegate.attributes.filter import filter_data
from rolegate.enums import Action, Possession
from rolegate.errors import InvalidResourceError, InvalidRoleError
from rolegate.grants.validation import (
    is_filled_string_list,
    normalize_action_possession,
    shape_of,
    to_string_list,
)

_ALL_ATTRIBUTES = ["*"]


class AccessInfo(BaseModel):
    """Draft of a grant or deny, accumulated by the ``Access`` builder.

    Fields stay loosely typed: raw caller input lands here first and is only
    checked by ``normalize_access_info``, which raises the engine's own errors
    rather than pydantic's.
    """

    role: Any = None
    resource: Any = None
    action: Any = None
    possession: Any = None
    attributes: Any = None
    denied: bool = False

    @classmethod
    def from_value(cls, value: AccessInfo | Mapping[str, Any]) -> AccessInfo:
        if isinstance(value, AccessInfo):
            return value.model_copy()
        fields = {k: v for k, v in value.items() if k in cls.model_fields}
        return cls(**fields)

    def is_fulfilled(self) -> bool:
        """True once role, resource and action are all set."""
        return self.role is not None and self.resource is not None and self.action is not None


class QueryInfo(BaseModel):
    """A permission question: may *role* do *action* on *resource*?"""

    role: Any = None
    resource: Any = None
    action: Any = None
    possession: Any = None

    @classmethod
    def from_value(cls, value: QueryInfo | Mapping[str, Any]) -> QueryInfo:
        if isinstance(value, QueryInfo):
            return value.model_copy()
        fields = {k: v for k, v in value.items() if k in cls.model_fields}
        return cls(**fields)


class Permission(BaseModel):
    """Outcome of a query. Immutable once produced."""

    model_config = ConfigDict(frozen=True)

    roles: tuple[str, ...]
    resource: str
    action: Action
    possession: Possession
    attributes: tuple[str, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def granted(self) -> bool:
        return len(self.attributes) > 0

    def filter(self, data: Any) -> Any:
        """Redact *data* down to the attributes this permission grants."""
        return filter_data(data, self.attributes)


def _names(value: object, error: type[InvalidRoleError | InvalidResourceError], label: str) -> list[str]:
    names = to_string_list(value)
    if not names or not is_filled_string_list(names):
        raise error(f"Invalid {label}(s): {value!r}")
    return [n.strip() for n in names]


def normalize_access_info(info: AccessInfo, require_action: bool = False) -> AccessInfo:
    """Return a copy of *info* with list-valued role/resource and final attributes.

    Denied access always ends up with ``[]``; granted access without
    attributes gets ``["*"]``.
    """
    roles = _names(info.role, InvalidRoleError, "role")
    resources = _names(info.resource, InvalidResourceError, "resource")

    attrs = info.attributes
    if info.denied or (shape_of(attrs) == "sequence" and len(attrs) == 0):
        attributes: list[str] = []
    elif not attrs:
        attributes = list(_ALL_ATTRIBUTES)
    else:
        attributes = to_string_list(attrs)
        if not attributes or not is_filled_string_list(attributes):
            raise InvalidResourceError(f"Invalid resource attributes: {attrs!r}")

    action, possession = info.action, info.possession
    if require_action or action is not None:
        action, possession = normalize_action_possession(action, possession)

    return AccessInfo(
        role=roles,
        resource=resources,
        action=action,
        possession=possession,
        attributes=attributes,
        denied=info.denied,
    )


def normalize_query_info(info: QueryInfo) -> QueryInfo:
    roles = _names(info.role, InvalidRoleError, "role")
    if not isinstance(info.resource, str) or info.resource.strip() == "":
        raise InvalidResourceError(f'Invalid resource: "{info.resource}"')
    action, possession = normalize_action_possession(info.action, info.possession)
    return QueryInfo(
        role=roles,
        resource=info.resource.strip(),
        action=action,
        possession=possession,
    )
