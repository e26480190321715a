"""Row-count rewrite for SELECT statements.

To learn how many rows a SELECT yields without fetching them all, the
statement is rewritten into::

    SELECT COUNT(*) AS row_count FROM <rest>

with any trailing ``ORDER BY`` removed.  A ``DISTINCT <expr>`` count target
counts the rows of ``SELECT DISTINCT <expr> FROM <rest>`` in a derived
table instead, so a NULL value is counted as one row.

The rewrite is skipped, and :func:`build_count_query` returns ``None``,
when it would not preserve the statement's cardinality: a row limit is
already applied, the select list is ``DISTINCT`` without an explicit count
target or holds aggregates, rows are grouped, or several selects are
combined.  The caller then runs the statement and counts the fetched rows.

Known gap: ``SELECT (.*) FROM (.*)`` is matched greedily, so the *last*
``" FROM "`` in the statement splits it.  Statements with a subquery in the
WHERE clause, or a column literally containing ``" FROM "``, are rewritten
incorrectly.
"""
from __future__ import annotations

import re

_LIMIT_TOKENS = re.compile(
    r"LIMIT[\s0-9]+|FIRST[\s0-9]+|SKIP[\s0-9]+|OFFSET[\s0-9]+|NEXT[\s0-9]+|HAVING SUM",
    re.IGNORECASE,
)
_SELECT_FROM = re.compile(r"SELECT (.*) FROM (.*)", re.IGNORECASE)
_TRAILING_ORDER_BY = re.compile(r"(.*) ORDER BY (?:.*)$", re.IGNORECASE)
_UNCOUNTABLE = re.compile(r"\bGROUP\s+BY\b|\bUNION\b|\bINTERSECT\b|\bEXCEPT\b", re.IGNORECASE)
_DISTINCT_LIST = re.compile(r"^\s*DISTINCT\b", re.IGNORECASE)
_AGGREGATE_LIST = re.compile(r"\b(?:COUNT|SUM|AVG|MIN|MAX)\s*\(", re.IGNORECASE)

#: Count target used when the caller gives none.
DEFAULT_COUNT_TARGET = "*"


def flatten_sql(sql: str) -> str:
    """Replace line breaks with spaces so single-line patterns see the whole statement."""
    return sql.replace("\r\n", " ").replace("\r", " ").replace("\n", " ")


def has_limit_tokens(sql: str) -> bool:
    """True if ``sql`` already limits its rows (any dialect's syntax)."""
    return _LIMIT_TOKENS.search(flatten_sql(sql)) is not None


def build_count_query(sql: str, count_target: str = DEFAULT_COUNT_TARGET) -> str | None:
    """Rewrite ``sql`` into a ``COUNT`` query, or return ``None`` to fall back.

    Args:
        sql: The SELECT statement whose rows should be counted.
        count_target: ``"*"`` or ``"DISTINCT <expr>"``.

    Returns:
        The count statement (same placeholders as ``sql``), or ``None`` when
        the rows must be fetched and counted instead.
    """
    flat = flatten_sql(sql).strip()
    if has_limit_tokens(flat) or _UNCOUNTABLE.search(flat):
        return None

    match = _SELECT_FROM.match(flat)
    if match is None:
        return None

    select_list, rest = match.groups()
    if count_target == DEFAULT_COUNT_TARGET and _DISTINCT_LIST.match(select_list):
        return None
    if _AGGREGATE_LIST.search(select_list):
        return None

    ordered = _TRAILING_ORDER_BY.match(rest)
    if ordered:
        rest = ordered.group(1)
    if count_target and count_target != DEFAULT_COUNT_TARGET:
        # COUNT(DISTINCT x) skips NULLs, SELECT DISTINCT x does not.
        return (
            f"SELECT COUNT(*) AS row_count FROM (SELECT {count_target} FROM {rest}) distinct_rows"
        )
    return f"SELECT COUNT(*) AS row_count FROM {rest}"
