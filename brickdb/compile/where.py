"""WHERE-clause compiler.

Turns a filter (see :mod:`brickdb.schema.filters`) into
``" WHERE <predicate> AND <predicate> …"`` plus the values to bind::

    clause = WhereClauseBuilder(SQLiteCompiler()).build([
        "zip_code IS NOT NULL",
        ("id >", 10),
        ("last_name LIKE", "%Ge%"),
    ])
    clause.sql     # ' WHERE zip_code IS NOT NULL AND id > :a_id AND last_name LIKE :a_last_name'
    clause.params  # {'a_id': 10, 'a_last_name': '%Ge%'}

Placeholder names are ``<letter>_<column>``.  The letter is the first one not
yet taken for that column, so ``("price >", 10)`` and ``("price <", 99)`` bind
``a_price`` and ``b_price``.  The prefix also keeps WHERE placeholders apart
from the ``:column`` placeholders of an UPDATE's SET list.

The compiler never raises on odd input: keys it cannot parse are used whole
as the column name with an implicit ``=``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from string import ascii_lowercase
from typing import Any

from brickdb.compile.base import CompiledClause, SQLCompiler
from brickdb.schema.filters import FilterInput, KeyedPredicate, RawPredicate, normalize_filter

_KEY_COLUMN = re.compile(r"^(\s*)([^\s=<>]*)(.*)", re.DOTALL)
_NON_WORD = re.compile(r"\W")


def placeholder_letter(index: int) -> str:
    """Return the alias letter for ``index``: ``a`` … ``z``, ``aa``, ``ab`` …"""
    letters = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        letters = ascii_lowercase[rem] + letters
    return letters


def split_key(key: str) -> tuple[str, bool]:
    """Return ``(column, has_operator)`` for a filter key.

    ``"id >"`` → ``("id", True)``; ``"c.name"`` → ``("c.name", False)``.
    A key with no extractable column yields the whole stripped key and
    ``False``.
    """
    stripped = key.strip()
    column = _KEY_COLUMN.match(key).group(2)
    if not column:
        return stripped, False
    return column, column != stripped


@dataclass
class PlaceholderContext:
    """Accumulates bound values during one WHERE compilation.

    A fresh instance is created per :meth:`WhereClauseBuilder.build` call, so
    placeholder maps are never shared between statements.
    """

    params: dict[str, Any] = field(default_factory=dict)
    expanding: set[str] = field(default_factory=set)

    def add_value(self, column: str, value: Any) -> str:
        """Store ``value`` under a fresh ``<letter>_<column>`` name and return it."""
        base = _NON_WORD.sub("_", column.replace(".", "_"))
        index = 0
        name = f"{placeholder_letter(index)}_{base}"
        while name in self.params:
            index += 1
            name = f"{placeholder_letter(index)}_{base}"
        if isinstance(value, (set, frozenset)):
            value = list(value)
        self.params[name] = value
        if isinstance(value, (list, tuple)):
            self.expanding.add(name)
        return name


class WhereClauseBuilder:
    """Builds the ``WHERE`` fragment for a filter.

    Args:
        compiler: Dialect compiler (supplies the placeholder syntax).
    """

    def __init__(self, compiler: SQLCompiler) -> None:
        self._compiler = compiler

    def build(self, where: FilterInput) -> CompiledClause:
        """Compile ``where``; an empty or all-falsy filter yields an empty clause."""
        entries = normalize_filter(where)
        if not entries:
            return CompiledClause()

        ctx = PlaceholderContext()
        predicates: list[str] = []
        for entry in entries:
            if isinstance(entry, RawPredicate):
                predicates.append(entry.sql)
            elif isinstance(entry, KeyedPredicate):
                predicates.append(self._build_keyed(entry, ctx))

        return CompiledClause(
            sql=" WHERE " + " AND ".join(predicates),
            params=ctx.params,
            expanding=frozenset(ctx.expanding),
        )

    def _build_keyed(self, entry: KeyedPredicate, ctx: PlaceholderContext) -> str:
        column, has_operator = split_key(entry.key)
        name = ctx.add_value(column, entry.value)
        placeholder = self._compiler.param_placeholder(name)
        key = entry.key.strip()
        if has_operator:
            return f"{key} {placeholder}"
        return f"{key} = {placeholder}"
