"""Field-level redaction of data by attribute globs."""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from typing import Any

from rolegate.attributes.glob import Glob, decide, normalize
from rolegate.grants.validation import shape_of


def _filter_mapping(
    obj: Mapping[Any, Any], ordered: Sequence[Glob], prefix: tuple[str, ...]
) -> dict[Any, Any]:
    out: dict[Any, Any] = {}
    for key, value in obj.items():
        path = (*prefix, str(key))
        allowed = decide(ordered, path)
        if isinstance(value, Mapping):
            # Keep a nested mapping when it is granted itself (even if it ends
            # up empty) or when any of its descendants is granted.
            sub = _filter_mapping(value, ordered, path)
            if allowed or sub:
                out[key] = sub
        elif allowed:
            out[key] = copy.deepcopy(value)
    return out


def _filter_one(obj: Any, ordered: Sequence[Glob]) -> dict[Any, Any]:
    if not isinstance(obj, Mapping):
        return {}
    return _filter_mapping(obj, ordered, ())


def filter_data(data: Any, attributes: Any) -> Any:
    """Return a redacted deep copy of *data* keeping only granted paths.

    A mapping yields a mapping, a list yields a list with every element
    filtered. Lists nested inside a mapping are treated as leaf values.
    An empty or non-list *attributes* grants nothing. *data* is never
    mutated.
    """
    is_list = shape_of(data) == "sequence"
    if shape_of(attributes) != "sequence" or len(attributes) == 0:
        return [{} for _ in data] if is_list else {}

    ordered = normalize(a for a in attributes if isinstance(a, str))
    if is_list:
        return [_filter_one(item, ordered) for item in data]
    return _filter_one(data, ordered)
