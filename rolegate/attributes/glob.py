"""Glob algebra over attribute lists.

An attribute list such as ``["*", "!account.id"]`` describes a set of dotted
paths. A glob covers the path it names and everything below it, ``*`` stands
for exactly one segment, and a leading ``!`` turns the glob into an
exclusion. Globs are applied in a fixed order (loose first, specific last,
exclusions after inclusions of the same weight) and the last glob covering a
path decides whether it is allowed.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

WILDCARD = "*"
NEGATION = "!"


@dataclass(frozen=True)
class Glob:
    """A parsed attribute glob."""

    segments: tuple[str, ...]
    negated: bool = False

    @classmethod
    def parse(cls, text: str) -> Glob:
        text = text.strip()
        negated = text.startswith(NEGATION)
        body = text[1:].strip() if negated else text
        return cls(tuple(body.split(".")), negated)

    @property
    def text(self) -> str:
        return (NEGATION if self.negated else "") + ".".join(self.segments)

    @property
    def sort_key(self) -> tuple[int, int, bool]:
        literals = sum(1 for s in self.segments if s != WILDCARD)
        return (len(self.segments), literals, self.negated)

    def covers(self, path: Sequence[str]) -> bool:
        """True when *path* is the path this glob names or lies below it."""
        if len(self.segments) > len(path):
            return False
        return all(g == WILDCARD or g == p for g, p in zip(self.segments, path))

    def overlaps(self, other: Glob) -> bool:
        """True when some path is covered by both globs."""
        return all(
            a == WILDCARD or b == WILDCARD or a == b
            for a, b in zip(self.segments, other.segments)
        )

    def meet(self, other: Glob) -> tuple[str, ...] | None:
        """The most general path covered by both globs, if any."""
        if not self.overlaps(other):
            return None
        merged = [b if a == WILDCARD else a for a, b in zip(self.segments, other.segments)]
        longer = self.segments if len(self.segments) > len(other.segments) else other.segments
        return tuple(merged) + longer[len(merged):]


def _split_path(path: str | Sequence[str]) -> tuple[str, ...]:
    if isinstance(path, str):
        return tuple(path.split("."))
    return tuple(path)


def normalize(globs: Iterable[str | Glob]) -> list[Glob]:
    """Parse, de-duplicate, and sort globs into application order."""
    seen: set[Glob] = set()
    parsed: list[Glob] = []
    for g in globs:
        if isinstance(g, str):
            if not g.strip():
                continue
            g = Glob.parse(g)
        if g not in seen:
            seen.add(g)
            parsed.append(g)
    return sorted(parsed, key=lambda g: g.sort_key)


def decide(ordered: Sequence[Glob], path: Sequence[str]) -> bool:
    """Apply already-normalized globs to a path; the last covering glob wins."""
    allowed = False
    for g in ordered:
        if g.covers(path):
            allowed = not g.negated
    return allowed


def is_allowed(globs: Iterable[str | Glob], path: str | Sequence[str]) -> bool:
    return decide(normalize(globs), _split_path(path))


def _is_redundant(g: Glob, kept: Sequence[Glob]) -> bool:
    # Walking back from g: a same-polarity glob covering g makes it redundant,
    # unless an opposite-polarity glob overlapping g sits in between.
    for k in reversed(kept):
        if k.negated == g.negated and k.covers(g.segments):
            return True
        if k.negated != g.negated and k.overlaps(g):
            return False
    # Nothing before it: an exclusion excludes nothing, an inclusion is needed.
    return g.negated


def simplify(ordered: Sequence[Glob]) -> list[Glob]:
    """Drop globs that don't change the outcome of ``decide`` for any path."""
    kept: list[Glob] = []
    for g in ordered:
        if not _is_redundant(g, kept):
            kept.append(g)
    return kept


def _cells(globs: Iterable[Glob]) -> list[tuple[str, ...]]:
    """Paths of *globs* closed under ``meet``, in first-seen order.

    Any path is decided by the most specific cell covering it, so fixing the
    outcome of every cell fixes the outcome of every path.
    """
    cells: list[tuple[str, ...]] = []
    seen: set[tuple[str, ...]] = set()
    for g in globs:
        if g.segments not in seen:
            seen.add(g.segments)
            cells.append(g.segments)
    i = 0
    while i < len(cells):
        current = Glob(cells[i])
        for j in range(i):
            shared = current.meet(Glob(cells[j]))
            if shared is not None and shared not in seen:
                seen.add(shared)
                cells.append(shared)
        i += 1
    return cells


def union(globs_a: Sequence[str], globs_b: Sequence[str]) -> list[str]:
    """Glob-aware union: a path is allowed by the result iff either list allows it."""
    a, b = list(globs_a), list(globs_b)
    if not a:
        return b
    if not b or a == b:
        return a

    ordered_a, ordered_b = normalize(a), normalize(b)
    merged = [
        Glob(cell, not (decide(ordered_a, cell) or decide(ordered_b, cell)))
        for cell in _cells(ordered_a + ordered_b)
    ]
    return [g.text for g in simplify(normalize(merged))]


def union_all(lists: Iterable[Sequence[str]]) -> list[str]:
    """Fold ``union`` left to right over any number of attribute lists."""
    result: list[str] = []
    for i, attrs in enumerate(lists):
        result = list(attrs) if i == 0 else union(result, attrs)
    return result
