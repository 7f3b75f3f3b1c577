"""Name and shape validation for grants input.

These helpers sit at the input boundary: anything that reaches the store has
already been classified with ``shape_of`` and checked here.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Literal

from rolegate.enums import ACTIONS, EXTEND_KEY, POSSESSIONS, RESERVED_KEYWORDS, Possession
from rolegate.errors import (
    InvalidActionError,
    InvalidNameError,
    InvalidPossessionError,
    InvalidResourceError,
    InvalidRoleError,
)

Shape = Literal["mapping", "sequence", "string", "none", "other"]

_SPLIT_RE = re.compile(r"\s*[;,]\s*")


def shape_of(value: object) -> Shape:
    """Classify a value into one of a small, closed set of shapes."""
    if value is None:
        return "none"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "mapping"
    if isinstance(value, (list, tuple)):
        return "sequence"
    return "other"


def to_string_list(value: object) -> list[Any]:
    """Split a comma/semicolon delimited string, or copy a list.

    Anything else yields an empty list. Items of a list are not checked here;
    use ``is_filled_string_list`` for that.
    """
    kind = shape_of(value)
    if kind == "sequence":
        return list(value)  # type: ignore[arg-type]
    if kind == "string":
        return _SPLIT_RE.split(value.strip())  # type: ignore[union-attr]
    return []


def is_filled_string_list(value: object) -> bool:
    """True for a list whose items are all non-blank strings (``[]`` included)."""
    if shape_of(value) != "sequence":
        return False
    return all(isinstance(s, str) and s.strip() != "" for s in value)  # type: ignore[union-attr]


def validate_name(name: object, throw_on_invalid: bool = True) -> bool:
    """Check a role or resource name against the reserved keywords."""
    if not isinstance(name, str) or name.strip() == "":
        if not throw_on_invalid:
            return False
        raise InvalidNameError("Invalid name, expected a valid string.")
    if name in RESERVED_KEYWORDS:
        if not throw_on_invalid:
            return False
        raise InvalidNameError(f'Cannot use reserved name: "{name}"')
    return True


def validate_names(names: object, throw_on_invalid: bool = True) -> bool:
    for name in to_string_list(names):
        if not validate_name(name, throw_on_invalid):
            return False
    return True


def normalize_action_possession(
    action: object, possession: object = None
) -> tuple[str, str]:
    """Parse ``"read"``, ``"read:own"`` or ``("read", "own")`` into canonical tokens.

    A missing possession defaults to ``any``. An explicit *possession*
    argument wins over one embedded in *action*.
    """
    if not isinstance(action, str):
        raise InvalidActionError(f"Invalid action: {action!r}")
    parts = action.split(":")
    name = parts[0].strip().lower()
    if len(parts) > 2 or name not in ACTIONS:
        raise InvalidActionError(f"Invalid action: {action}")

    poss = possession if possession is not None else (parts[1] if len(parts) == 2 else None)
    if poss is None or poss == "":
        return name, Possession.any.value
    if not isinstance(poss, str) or poss.strip().lower() not in POSSESSIONS:
        raise InvalidPossessionError(f"Invalid action possession: {poss}")
    return name, poss.strip().lower()


def permission_key(action: str, possession: str) -> str:
    return f"{action}:{possession}"


def validate_resource_shape(record: object) -> dict[str, list[str]]:
    """Validate a resource's action map and return it with normalized keys.

    Keys must read ``action`` or ``action:possession`` using the canonical
    tokens exactly; a key without a possession is stored as ``action:any``.
    """
    if shape_of(record) != "mapping":
        raise InvalidResourceError("Invalid resource definition.")

    normalized: dict[str, list[str]] = {}
    for key, attrs in record.items():  # type: ignore[union-attr]
        if not isinstance(key, str):
            raise InvalidResourceError(f"Invalid action: {key!r}")
        parts = key.split(":")
        if len(parts) > 2 or parts[0] not in ACTIONS:
            raise InvalidResourceError(f'Invalid action: "{key}"')
        if len(parts) == 2 and parts[1] not in POSSESSIONS:
            raise InvalidResourceError(f'Invalid action possession: "{key}"')
        if not is_filled_string_list(attrs):
            raise InvalidResourceError(f'Invalid resource attributes for action "{key}".')
        possession = parts[1] if len(parts) == 2 else Possession.any.value
        normalized[permission_key(parts[0], possession)] = list(attrs)
    return normalized


def validate_role_shape(
    grants: Mapping[str, Any], role_name: str
) -> tuple[dict[str, dict[str, list[str]]], list[str]]:
    """Validate one role record of a bulk grants mapping.

    Returns the normalized resources and the ``$extend`` list (possibly
    empty). Registering the extension edges is left to the caller, since
    that needs the rest of the roles in place.
    """
    record = grants.get(role_name)
    if shape_of(record) != "mapping":
        raise InvalidRoleError("Invalid role definition.")

    resources: dict[str, dict[str, list[str]]] = {}
    extend: list[str] = []
    for key, value in record.items():  # type: ignore[union-attr]
        if validate_name(key, throw_on_invalid=False):
            resources[key] = validate_resource_shape(value)
        elif key == EXTEND_KEY:
            if not is_filled_string_list(value):
                raise InvalidRoleError(
                    f'Invalid extend value for role "{role_name}": {value!r}'
                )
            extend = list(value)
        else:
            raise InvalidRoleError(f'Cannot use reserved name "{key}" for a resource.')
    return resources, extend
