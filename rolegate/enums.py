"""Canonical actions and possessions."""

from __future__ import annotations

from enum import Enum


class Action(str, Enum):
    """CRUD actions a role can be granted on a resource."""

    create = "create"
    read = "read"
    update = "update"
    delete = "delete"


class Possession(str, Enum):
    """Scope qualifier: the caller's own records, or any record."""

    own = "own"
    any = "any"


ACTIONS: tuple[str, ...] = tuple(a.value for a in Action)
POSSESSIONS: tuple[str, ...] = tuple(p.value for p in Possession)

RESERVED_KEYWORDS: tuple[str, ...] = ("*", "!", "$", "$extend")
EXTEND_KEY = "$extend"
