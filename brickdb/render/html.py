"""Render result rows as an HTML table."""
from __future__ import annotations

import html
import re
from collections.abc import Mapping, Sequence
from typing import Any

_EQUALS = re.compile(r"\s*=\s*")


def linearize_attributes(attr: str | None) -> str:
    """Turn ``"class=my-class, required"`` into ``'class="my-class" required'``.

    Commas and equal signs that belong to a value are escaped with a
    backslash: ``"style=font-family:a\\, b"``.
    """
    if not attr:
        return ""
    attr = attr.replace("\\,", "[comma]").replace("\\=", "[equal]")
    parts: list[str] = []
    for item in attr.split(","):
        item = item.strip()
        if not item:
            continue
        if "=" in item:
            parts.append(_EQUALS.sub('="', item, count=1) + '"')
        else:
            parts.append(item)
    return " ".join(parts).replace("[comma]", ",").replace("[equal]", "=")


def _as_mapping(record: Any) -> Mapping[str, Any]:
    # SQLAlchemy Row
    mapping = getattr(record, "_mapping", None)
    return mapping if mapping is not None else record


def _open_tag(tag: str, attrs: str) -> str:
    return f"<{tag} {attrs}>" if attrs else f"<{tag}>"


def records_to_html(
    records: Sequence[Any],
    show_count: bool = True,
    table_attr: str | None = None,
    th_attr: str | None = None,
    td_attr: str | None = None,
) -> str:
    """Return ``records`` as an HTML table, header row taken from the first record.

    Args:
        records: Rows as mappings or SQLAlchemy ``Row`` objects.
        show_count: Prefix the table with a "Total Count" paragraph.
        table_attr: Attributes for ``<table>``, e.g. ``"class=table, id=customers"``.
        th_attr: Attributes for each ``<th>``.
        td_attr: Attributes for each ``<td>``.

    Returns:
        The table markup, or ``"No records were returned."``.
    """
    if not records:
        return "No records were returned."

    rows = [_as_mapping(record) for record in records]
    th = _open_tag("th", linearize_attributes(th_attr))
    td = _open_tag("td", linearize_attributes(td_attr))

    out: list[str] = []
    if show_count:
        out.append(f"<p>Total Count: {len(rows)}</p>\n")
    out.append(_open_tag("table", linearize_attributes(table_attr)) + "\n")
    out.append("\t<tr>\n")
    for key in rows[0]:
        out.append(f"\t\t{th}{html.escape(str(key))}</th>\n")
    out.append("\t</tr>\n")
    for row in rows:
        out.append("\t<tr>\n")
        for value in row.values():
            text = "" if value is None else str(value)
            out.append(f"\t\t{td}{html.escape(text)}</td>\n")
        out.append("\t</tr>\n")
    out.append("</table>")
    return "".join(out)
