"""brickdb pagination: page a record source and render its navigation."""
from brickdb.pagination.links import (
    PaginationOptions,
    remove_previous_querystring,
    render_pagination,
)
from brickdb.pagination.paginator import Page, Paginator
from brickdb.pagination.sources import QuerySource, RecordSource, SelectSource

__all__ = [
    "Page",
    "PaginationOptions",
    "Paginator",
    "QuerySource",
    "RecordSource",
    "SelectSource",
    "remove_previous_querystring",
    "render_pagination",
]
