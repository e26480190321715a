"""Pydantic model for LIMIT / pagination descriptors.

A :class:`LimitSpec` is either a single row cap (``LimitSpec(count=10)``) or
an offset/count pair (``LimitSpec(offset=5, count=20)``).  The two shapes are
kept distinct (``offset=None`` versus ``offset=0``) because they compile to
different (but equivalent) SQL.

Callers rarely build one by hand; :meth:`LimitSpec.coerce` accepts the loose
forms the statement builder takes::

    LimitSpec.coerce(10)          # LimitSpec(count=10)
    LimitSpec.coerce("5, 20")     # LimitSpec(offset=5, count=20)
    LimitSpec.coerce((5, 20))     # LimitSpec(offset=5, count=20)
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LimitSpec(BaseModel):
    """Row cap with an optional offset.

    Attributes:
        count: Maximum number of rows to return.
        offset: Number of rows to skip, or ``None`` for the single form.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    count: int = Field(ge=0)
    offset: int | None = Field(default=None, ge=0)

    @property
    def is_pair(self) -> bool:
        """True when the limit was given as an ``(offset, count)`` pair."""
        return self.offset is not None

    @classmethod
    def for_page(cls, page: int, per_page: int) -> LimitSpec:
        """Return the pair limit selecting 1-based ``page`` of ``per_page`` rows."""
        return cls(offset=(max(page, 1) - 1) * per_page, count=per_page)

    @classmethod
    def coerce(cls, value: Any) -> LimitSpec:
        """Build a :class:`LimitSpec` from an int, a string or a pair.

        Strings may be a single number (``"10"``) or ``"offset, count"``
        (``"5, 20"``); whitespace is ignored.

        Raises:
            ValueError: If ``value`` cannot be read as a limit.
        """
        if isinstance(value, LimitSpec):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Not a limit: {value!r}")
        if isinstance(value, int):
            return cls(count=value)
        if isinstance(value, (tuple, list)) and len(value) == 2:
            offset, count = (_to_int(v) for v in value)
            return cls(offset=offset, count=count)
        if isinstance(value, str):
            parts = value.replace(" ", "").split(",")
            if len(parts) == 1:
                return cls(count=_to_int(parts[0]))
            if len(parts) == 2:
                return cls(offset=_to_int(parts[0]), count=_to_int(parts[1]))
        raise ValueError(f"Not a limit: {value!r}")


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Not an integer: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    raise ValueError(f"Not an integer: {value!r}")
