"""Bootstrap-style pagination markup for a :class:`~brickdb.pagination.paginator.Page`.

Links are built either as rewritten URLs (``/customers-p3.html``) or with a
query string (``/customers?p=3``).  Page 1 always links to the bare URL.
"""
from __future__ import annotations

import html
import re

from pydantic import BaseModel, ConfigDict

from brickdb.pagination.paginator import Page


class PaginationOptions(BaseModel):
    """Markup classes and labels used by :func:`render_pagination`.

    ``results_template`` is formatted with ``start``, ``end`` and ``total``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    active_class: str = "active"
    disabled_class: str = "disabled"
    pagination_class: str = "pagination pagination-flat"
    first_markup: str = '<i class="fas fa-angle-double-left"></i>'
    previous_markup: str = '<i class="fas fa-angle-left"></i>'
    next_markup: str = '<i class="fas fa-angle-right"></i>'
    last_markup: str = '<i class="fas fa-angle-double-right"></i>'
    page_label: str = "Page"
    results_template: str = "results {start} to {end} of {total}"
    rewrite_transition: str = "-"
    rewrite_extension: str = ".html"


def remove_previous_querystring(
    url: str,
    querystring: str,
    rewrite_links: bool = True,
    options: PaginationOptions | None = None,
) -> str:
    """Strip an existing page marker for ``querystring`` from ``url``."""
    options = options or PaginationOptions()
    qs = re.escape(querystring)
    if rewrite_links:
        url = re.sub(re.escape(options.rewrite_transition) + qs + r"[0-9]+", "", url)
        if options.rewrite_extension:
            url = url.replace(options.rewrite_extension, "")
        return url
    url = re.sub(rf"\?{qs}=[0-9]+&(amp;)?", "?", url)
    url = re.sub(rf"\?{qs}=[0-9]+", "", url)
    return re.sub(rf"&(amp;)?{qs}=[0-9]+", "", url)


class _LinkBuilder:
    def __init__(self, url: str, querystring: str, rewrite_links: bool, options: PaginationOptions) -> None:
        self.url = remove_previous_querystring(url, querystring, rewrite_links, options)
        self.querystring = querystring
        self.rewrite_links = rewrite_links
        self.options = options

    def href(self, number: int) -> str:
        if self.rewrite_links:
            ext = self.options.rewrite_extension
            if number == 1:
                return f"{self.url}{ext}"
            return f"{self.url}{self.options.rewrite_transition}{self.querystring}{number}{ext}"
        if number == 1:
            return self.url
        separator = "&amp;" if "?" in self.url else "?"
        return f"{self.url}{separator}{self.querystring}={number}"

    def item(self, number: int, label: str) -> str:
        return f'<li class="page-item"><a class="page-link" href="{self.href(number)}">{label}</a></li>'


def _static_item(css_class: str, label: str) -> str:
    return f'<li class="page-item {css_class}"><a class="page-link" href="#">{label}</a></li>'


def render_pagination(
    page: Page,
    url: str,
    querystring: str = "p",
    rewrite_links: bool = True,
    options: PaginationOptions | None = None,
) -> str:
    """Return the navigation list and the "results n to m of x" line for ``page``.

    Args:
        page: The page to describe.
        url: URL of the paginated listing; an existing page marker is removed.
        querystring: Name of the page parameter.
        rewrite_links: Build ``<url><transition><querystring><n><extension>``
            links instead of ``?querystring=n``.
        options: Markup overrides.

    Returns:
        HTML markup, or ``""`` when the page holds no records.
    """
    if page.total < 1:
        return ""
    options = options or PaginationOptions()
    links = _LinkBuilder(url, querystring, rewrite_links, options)

    items: list[str] = []
    if page.page_count > 1:
        if page.has_previous:
            items.append(links.item(1, options.first_markup))
            items.append(links.item(page.current - 1, options.previous_markup))
        items.append(_static_item(options.disabled_class, html.escape(options.page_label)))
        for number in page.pages:
            if number == page.current:
                items.append(_static_item(options.active_class, str(number)))
            else:
                items.append(links.item(number, str(number)))
        if page.has_next:
            items.append(links.item(page.current + 1, options.next_markup))
            items.append(links.item(page.page_count, options.last_markup))

    results = options.results_template.format(start=page.start, end=page.end, total=page.total)
    return (
        f'<ul class="{options.pagination_class}">\n'
        + "".join(f"{item}\n" for item in items)
        + "</ul>\n"
        + '<div class="heading-elements pt-2 pr-3">\n'
        + f'<p class="text-right text-semibold">{html.escape(results)}</p>\n'
        + "</div>\n"
    )
