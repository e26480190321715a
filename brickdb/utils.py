"""Small helpers for working with query results and form values."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


def convert_query_to_simple_array(
    rows: Iterable[Mapping[str, Any]],
    value_field: str,
    key_field: str | None = None,
) -> list[Any] | dict[Any, Any]:
    """Reduce result rows to the values of a single field.

    Args:
        rows: Rows as mappings (``Database.fetch_all(as_dict=True)``).
        value_field: Field whose values are collected.
        key_field: When given, return ``{row[key_field]: row[value_field]}``
            instead of a list.

    Returns:
        A list of values, or a dict keyed by ``key_field``.
    """
    if key_field is None:
        return [row[value_field] for row in rows]
    return {row[key_field]: row[value_field] for row in rows}


def empty_to_null(
    value: Any,
    include_zero: bool = True,
    include_false: bool = True,
    include_blank_string: bool = True,
) -> Any:
    """Return ``None`` for "empty" values, ``value`` otherwise.

    ``None`` and empty containers are always empty.  Zero, ``False`` and
    whitespace-only strings count as empty unless the matching flag is off.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None if (not value and include_false) else value
    if isinstance(value, (int, float)):
        return None if (value == 0 and include_zero) else value
    if isinstance(value, str):
        if value == "":
            return None
        return None if (include_blank_string and not value.strip()) else value
    if isinstance(value, (list, tuple, dict, set, frozenset)) and not value:
        return None
    return value
