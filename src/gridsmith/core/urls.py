"""Query-string URLs for grid actions (sorting, paging, limits, reset, export)."""

from __future__ import annotations

from enum import Enum
from typing import Any

from .exceptions import UnsupportedSectionError
from .grid import (
    REQUEST_QUERY_EXPORT,
    REQUEST_QUERY_LIMIT,
    REQUEST_QUERY_ORDER,
    REQUEST_QUERY_PAGE,
    REQUEST_QUERY_RESET,
    Grid,
)


class UrlSection(str, Enum):
    """Grid URL sections understood by ``build_grid_url``."""

    ORDER = "order"
    PAGE = "page"
    LIMIT = "limit"
    RESET = "reset"
    EXPORT = "export"


_QUERY_KEYS = {
    UrlSection.ORDER: REQUEST_QUERY_ORDER,
    UrlSection.PAGE: REQUEST_QUERY_PAGE,
    UrlSection.LIMIT: REQUEST_QUERY_LIMIT,
    UrlSection.RESET: REQUEST_QUERY_RESET,
    UrlSection.EXPORT: REQUEST_QUERY_EXPORT,
}


def _coerce_section(section: UrlSection | str) -> UrlSection:
    try:
        return UrlSection(section)
    except ValueError as exc:
        raise UnsupportedSectionError(section) from exc


def grid_url_prefix(grid: Grid) -> str:
    """Return ``<route>?<hash>[`` (or ``&`` when the route already has a query)."""
    route = grid.route_url or ""
    separator = "&" if route.find("?") > 0 else "?"
    return f"{route}{separator}{grid.hash}["


def build_grid_url(section: UrlSection | str, grid: Grid, param: Any = None) -> str:
    """Build the URL triggering ``section`` on ``grid``."""
    resolved = _coerce_section(section)
    prefix = f"{grid_url_prefix(grid)}{_QUERY_KEYS[resolved]}]="

    if resolved is UrlSection.ORDER:
        if param is None:
            raise ValueError("Sorting URLs require a column.")
        direction = "desc" if param.is_sorted and param.order == "asc" else "asc"
        return f"{prefix}{param.id}|{direction}"
    if resolved in {UrlSection.PAGE, UrlSection.EXPORT}:
        return f"{prefix}{'' if param is None else param}"
    return prefix


__all__ = ["UrlSection", "build_grid_url", "grid_url_prefix"]
