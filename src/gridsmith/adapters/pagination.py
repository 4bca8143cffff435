"""Pagination views used to render grid pagers."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
import importlib
from typing import Any, Protocol, runtime_checkable

from markupsafe import Markup, escape

from gridsmith.core.exceptions import GridConfigError


RouteGenerator = Callable[[int], str]


@dataclass(slots=True)
class Pagination:
    """Page arithmetic for a result set (pages are 1-based)."""

    nb_results: int
    max_per_page: int
    current_page: int = 1

    def __post_init__(self) -> None:
        if self.max_per_page < 1:
            raise ValueError("max_per_page must be a positive integer.")
        self.current_page = min(max(1, self.current_page), self.nb_pages)

    @property
    def nb_pages(self) -> int:
        return max(1, -(-self.nb_results // self.max_per_page))

    @property
    def has_previous_page(self) -> bool:
        return self.current_page > 1

    @property
    def has_next_page(self) -> bool:
        return self.current_page < self.nb_pages

    @property
    def previous_page(self) -> int:
        if not self.has_previous_page:
            raise LookupError("There is no previous page.")
        return self.current_page - 1

    @property
    def next_page(self) -> int:
        if not self.has_next_page:
            raise LookupError("There is no next page.")
        return self.current_page + 1


@runtime_checkable
class PaginationView(Protocol):
    """Render a pager for ``pagination`` using ``route_generator`` for links."""

    def render(
        self,
        pagination: Pagination,
        route_generator: RouteGenerator,
        options: Mapping[str, Any] | None = None,
    ) -> str: ...


class DefaultView:
    """Render a ``<nav>`` list with previous/next links and a page window."""

    def render(
        self,
        pagination: Pagination,
        route_generator: RouteGenerator,
        options: Mapping[str, Any] | None = None,
    ) -> str:
        options = dict(options or {})
        proximity = int(options.get("proximity", 2))
        prev_message = options.get("prev_message", Markup("&larr; Previous"))
        next_message = options.get("next_message", Markup("Next &rarr;"))
        css_container = options.get("css_container_class", "pagination")

        items: list[Markup] = []
        if pagination.has_previous_page:
            items.append(self._link(route_generator(pagination.previous_page), prev_message, "prev"))
        else:
            items.append(self._span(prev_message, "prev disabled"))

        start = max(1, pagination.current_page - proximity)
        end = min(pagination.nb_pages, pagination.current_page + proximity)
        if start > 1:
            items.append(self._link(route_generator(1), 1))
            if start > 2:
                items.append(self._span("&hellip;", "dots", safe=True))
        for page in range(start, end + 1):
            if page == pagination.current_page:
                items.append(self._span(page, "current"))
            else:
                items.append(self._link(route_generator(page), page))
        if end < pagination.nb_pages:
            if end < pagination.nb_pages - 1:
                items.append(self._span("&hellip;", "dots", safe=True))
            items.append(self._link(route_generator(pagination.nb_pages), pagination.nb_pages))

        if pagination.has_next_page:
            items.append(self._link(route_generator(pagination.next_page), next_message, "next"))
        else:
            items.append(self._span(next_message, "next disabled"))

        return Markup('<nav class="{}">{}</nav>').format(css_container, Markup("").join(items))

    @staticmethod
    def _link(url: str, label: Any, css_class: str | None = None) -> Markup:
        if css_class:
            return Markup('<a class="{}" href="{}">{}</a>').format(css_class, url, label)
        return Markup('<a href="{}">{}</a>').format(url, label)

    @staticmethod
    def _span(label: Any, css_class: str, *, safe: bool = False) -> Markup:
        content = Markup(label) if safe else escape(label)
        return Markup('<span class="{}">{}</span>').format(css_class, content)


def load_view_class(path: str) -> type[PaginationView]:
    """Import a pagination view class given as ``module:Class`` or ``module.Class``."""
    module_name, sep, attribute = path.partition(":")
    if not sep:
        module_name, _, attribute = path.rpartition(".")
    if not module_name or not attribute:
        raise GridConfigError(f"Invalid pagination view path '{path}'.")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise GridConfigError(f"Unable to import pagination view module '{module_name}'.") from exc
    view_class = getattr(module, attribute, None)
    if view_class is None or not callable(getattr(view_class, "render", None)):
        raise GridConfigError(f"'{path}' does not provide a pagination view with a render method.")
    return view_class


__all__ = ["DefaultView", "Pagination", "PaginationView", "RouteGenerator", "load_view_class"]
