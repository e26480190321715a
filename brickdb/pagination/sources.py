"""Record sources a :class:`~brickdb.pagination.paginator.Paginator` can page through.

A source is either a structured SELECT (run through ``Database.select``) or
a raw SQL statement with its params (run through ``Database.query``).  The
``kind`` field discriminates the two, so a source can be loaded from plain
data::

    source = TypeAdapter(RecordSource).validate_python(
        {"kind": "select", "from_": "customers", "order_by": "name"}
    )
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from brickdb.db.database import Database
from brickdb.db.result import ExecutionResult
from brickdb.schema.limits import LimitSpec


class SelectSource(BaseModel):
    """Arguments for :meth:`Database.select`, minus the limit."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["select"] = "select"
    from_: str
    values: str | list[str] = "*"
    where: Any = None
    distinct: bool | str = False
    order_by: str | list[str] | None = None
    group_by: str | list[str] | None = None
    params: dict[str, Any] = Field(default_factory=dict)
    debug: bool = False

    def run(self, db: Database, limit: LimitSpec | None = None) -> ExecutionResult:
        return db.select(
            self.from_,
            self.values,
            self.where,
            distinct=self.distinct,
            order_by=self.order_by,
            group_by=self.group_by,
            limit=limit,
            params=self.params,
            debug=self.debug,
        )


class QuerySource(BaseModel):
    """A raw SELECT and its params; any row limit it carries is replaced per page."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["query"] = "query"
    sql: str
    params: dict[str, Any] = Field(default_factory=dict)
    debug: bool = False

    def run(self, db: Database, limit: LimitSpec | None = None) -> ExecutionResult:
        sql = self.sql if limit is None else db.builder.apply_limit(self.sql, limit)
        return db.query(sql, self.params, debug=self.debug)


RecordSource = Annotated[Union[SelectSource, QuerySource], Field(discriminator="kind")]
