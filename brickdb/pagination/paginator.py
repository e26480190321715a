"""Page through a record source.

:meth:`Paginator.paginate` runs the source once to learn the total row
count, clamps the requested page, then runs it again with the dialect's
limit for that page::

    page = Paginator(db).paginate(
        SelectSource(from_="customers", order_by="name"), page=3, per_page=20
    )
    page.start, page.end, page.total   # 41, 60, 312
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

from brickdb.db.database import Database
from brickdb.pagination.sources import QuerySource, SelectSource
from brickdb.schema.limits import LimitSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Page:
    """One page of records plus the numbers needed to render navigation.

    Attributes:
        total: Rows yielded by the unlimited source.
        per_page: Maximum rows per page.
        page_count: Number of pages (0 when there are no rows).
        current: The page shown, clamped to ``1..page_count``.
        window_start: First page number listed in the navigation.
        window_end: Last page number listed in the navigation.
        start: 1-based index of the first row shown (0 when empty).
        end: 1-based index of the last row shown (0 when empty).
        rows: The rows of the current page, as dicts.
    """

    total: int
    per_page: int
    page_count: int
    current: int
    window_start: int
    window_end: int
    start: int
    end: int
    rows: list[dict[str, Any]] = field(default_factory=list)

    @property
    def has_previous(self) -> bool:
        return self.current > 1

    @property
    def has_next(self) -> bool:
        return self.current < self.page_count

    @property
    def pages(self) -> range:
        """Page numbers in the navigation window."""
        return range(self.window_start, self.window_end + 1)

    @classmethod
    def empty(cls, per_page: int) -> Page:
        return cls(
            total=0,
            per_page=per_page,
            page_count=0,
            current=1,
            window_start=1,
            window_end=0,
            start=0,
            end=0,
        )


class Paginator:
    """Splits the rows of a record source into pages.

    Args:
        db: The database the sources run against.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    def paginate(
        self,
        source: SelectSource | QuerySource,
        page: int = 1,
        per_page: int = 20,
        window: int = 5,
    ) -> Page:
        """Return page ``page`` of ``source``.

        Args:
            source: What to page through.
            page: Requested 1-based page; out-of-range values are clamped.
            per_page: Rows per page.
            window: Pages listed before and after the current one.

        Raises:
            ValueError: If ``per_page`` is less than 1 or ``window`` is negative.
        """
        if per_page < 1:
            raise ValueError(f"per_page must be at least 1, got {per_page}.")
        if window < 0:
            raise ValueError(f"window cannot be negative, got {window}.")

        if not source.run(self._db):
            return Page.empty(per_page)
        total = self._db.row_count
        if total < 1:
            return Page.empty(per_page)

        page_count = math.ceil(total / per_page)
        current = min(max(page, 1), page_count)
        if page_count == 1:
            rows = self._db.fetch_all(as_dict=True)
            start, end = 1, total
        else:
            if not source.run(self._db, LimitSpec.for_page(current, per_page)):
                logger.warning("Could not load page %d of %d.", current, page_count)
                rows = []
            else:
                rows = self._db.fetch_all(as_dict=True)
            start = per_page * (current - 1) + 1
            end = start + len(rows) - 1

        return Page(
            total=total,
            per_page=per_page,
            page_count=page_count,
            current=current,
            window_start=max(1, current - window),
            window_end=min(page_count, current + window),
            start=start,
            end=end,
            rows=rows,
        )
