"""Filter descriptors consumed by the WHERE-clause compiler.

A filter is an ordered list of entries.  Each entry is either a raw SQL
predicate (trusted, emitted verbatim) or a key/value pair whose key is a
column reference optionally followed by a comparison operator::

    [
        "zip_code IS NOT NULL",        # raw predicate
        ("id >", 10),                  # keyed, explicit operator
        {"last_name LIKE": "%Ge%"},    # keyed, from a mapping
        {"country": "Indonesia"},      # keyed, implicit "="
    ]

A plain mapping is accepted as a whole filter too.  Entries whose value is
falsy (``None``, ``0``, ``""``, ``False``, empty containers) are dropped by
:func:`normalize_filter`; use a raw predicate such as ``"active = 0"`` when
such a value has to reach the query.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class RawPredicate:
    """A trusted SQL predicate emitted as-is."""

    sql: str


@dataclass(frozen=True)
class KeyedPredicate:
    """A ``column [operator]`` key bound to a value."""

    key: str
    value: Any


FilterEntry = Union[RawPredicate, KeyedPredicate]

#: Everything :func:`normalize_filter` accepts.
FilterInput = Union[
    str,
    Mapping[str, Any],
    Iterable[Union[str, tuple[str, Any], Mapping[str, Any], RawPredicate, KeyedPredicate]],
    None,
]


def normalize_filter(where: FilterInput) -> list[FilterEntry]:
    """Flatten ``where`` into an ordered list of non-empty entries.

    A whole-string filter becomes a single :class:`RawPredicate`.  Unknown
    entry shapes are ignored rather than rejected.
    """
    if not where:
        return []
    if isinstance(where, str):
        return [RawPredicate(where.strip())]
    if isinstance(where, Mapping):
        return [KeyedPredicate(k, v) for k, v in where.items() if v]

    entries: list[FilterEntry] = []
    for item in where:
        if isinstance(item, (RawPredicate, KeyedPredicate)):
            if (item.sql if isinstance(item, RawPredicate) else item.value):
                entries.append(item)
        elif isinstance(item, str):
            if item:
                entries.append(RawPredicate(item))
        elif isinstance(item, Mapping):
            entries.extend(KeyedPredicate(k, v) for k, v in item.items() if v)
        elif isinstance(item, tuple) and len(item) == 2 and isinstance(item[0], str):
            if item[1]:
                entries.append(KeyedPredicate(item[0], item[1]))
    return entries
