"""Resolve and render grid blocks across a theme override chain.

A ``BlockResolver`` is the state of one render pass. It remembers, per grid
hash, the instance id used to scope block names and the parameters forced onto
every block render. Blocks are looked up in the theme first and in the default
block template last.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from jinja2 import Environment

from gridsmith.adapters.pagination import Pagination, load_view_class

from .blocks import (
    CELL_FALLBACK_BLOCK,
    COLUMN_OPERATOR_BLOCK,
    BlockCategory,
    block_candidates,
    first_defined,
)
from .config import PagerConfig
from .diagnostics import DiagnosticEmitter, NullEmitter
from .exceptions import BlockNotFoundError
from .grid import Column, Grid, Router, Row
from .templates.sources import DEFAULT_TEMPLATE, RenderTarget, TemplateStore, ThemeReference
from .urls import UrlSection, build_grid_url


logger = logging.getLogger(__name__)

RESOLVER_CONTEXT_KEY = "_grid_resolver"


class BlockResolver:
    """Per-render context resolving which block renders each grid element."""

    def __init__(
        self,
        environment: Environment,
        *,
        default_template: str = DEFAULT_TEMPLATE,
        router: Router | None = None,
        pager: PagerConfig | None = None,
        emitter: DiagnosticEmitter | None = None,
        store: TemplateStore | None = None,
    ) -> None:
        self.environment = environment
        self.default_template = default_template
        self.router = router
        self.pager = pager or PagerConfig()
        self.emitter: DiagnosticEmitter = emitter or NullEmitter()
        self.store = store or TemplateStore(environment)
        self.theme: ThemeReference | None = None
        self.names: dict[str, str] = {}
        self.params: dict[str, Any] = {}
        self._sources: list[RenderTarget] = []

    def init_grid(
        self,
        grid: Grid,
        theme: Any = None,
        instance_id: str = "",
        params: Mapping[str, Any] | None = None,
    ) -> None:
        """Register ``grid`` and select the theme for the following renders."""
        self.set_theme(theme)
        self.names[grid.hash] = instance_id or grid.id
        self.params = dict(params or {})

    def set_theme(self, theme: Any) -> None:
        """Select the override theme, dropping the cached template chain."""
        self.theme = ThemeReference.coerce(theme)
        self._sources = []

    def instance_id(self, grid: Grid) -> str:
        """Return the id scoping block names for ``grid``, registering it when unknown."""
        if grid.hash not in self.names:
            self.names[grid.hash] = grid.id
        return self.names[grid.hash]

    def resolve_sources(self) -> list[RenderTarget]:
        """Return the template chain, theme first, default template last."""
        if self._sources:
            return self._sources
        sources = [self.store.load(self.default_template)]
        if self.theme is not None:
            theme = self.store.load(self.theme)
            self._check_theme(theme)
            sources.insert(0, theme)
        logger.debug("Grid template chain: %s", [source.name for source in sources])
        self.emitter.event(
            "sources_loaded",
            {"sources": [source.name or "<string>" for source in sources]},
        )
        self._sources = sources
        return sources

    def _check_theme(self, theme: RenderTarget) -> None:
        if theme.name is None:
            self.emitter.warning(
                "Grid theme has no template name; blocks it inherits through "
                "{% extends %} are not visible."
            )
        elif not any(name.startswith("grid") for name in theme.block_names):
            self.emitter.warning(f"Grid theme '{theme.name}' defines no grid blocks.")

    def has_block(self, name: str) -> bool:
        return any(source.has_block(name) for source in self.resolve_sources())

    def render_block(self, name: str, parameters: Mapping[str, Any] | None = None) -> str:
        """Render ``name`` from the first source defining it.

        Parameters are merged with increasing precedence: environment globals,
        ``parameters``, then the parameters registered by ``init_grid``.
        """
        for source in self.resolve_sources():
            if source.has_block(name):
                context = {**self.environment.globals, **(parameters or {}), **self.params}
                context[RESOLVER_CONTEXT_KEY] = self
                return source.render_block(name, context)
        raise BlockNotFoundError(name, self.theme.label if self.theme else None)

    def resolve(self, category: BlockCategory | str, grid: Grid, column: Column) -> str | None:
        """Return the most specific block defined for ``column``, or ``None``."""
        category = BlockCategory(category)
        candidates = block_candidates(category, self.instance_id(grid), column)
        tried: list[str] = []

        def _check(name: str) -> bool:
            tried.append(name)
            return self.has_block(name)

        block = first_defined(candidates, _check)
        if block is not None:
            self.emitter.event(
                "block_resolved", {"category": category.value, "block": block, "tried": tried}
            )
        return block

    def resolve_cell_block(self, grid: Grid, column: Column) -> str:
        block = self.resolve(BlockCategory.CELL, grid, column)
        if block is None:
            self.emitter.event("block_fallback", {"category": "cell", "block": CELL_FALLBACK_BLOCK})
            return CELL_FALLBACK_BLOCK
        return block

    def resolve_filter_block(self, grid: Grid, column: Column) -> str | None:
        block = self.resolve(BlockCategory.FILTER, grid, column)
        if block is None:
            self.emitter.event("block_fallback", {"category": "filter", "block": None})
        return block

    def render_grid(
        self,
        grid: Grid,
        theme: Any = None,
        instance_id: str = "",
        params: Mapping[str, Any] | None = None,
        withjs: bool = True,
    ) -> str:
        self.init_grid(grid, theme, instance_id, params)
        grid.set_template(theme)
        return self.render_block("grid", {"grid": grid, "withjs": withjs})

    def render_grid_html(
        self,
        grid: Grid,
        theme: Any = None,
        instance_id: str = "",
        params: Mapping[str, Any] | None = None,
    ) -> str:
        """Render the grid without its JavaScript."""
        return self.render_grid(grid, theme, instance_id, params, withjs=False)

    def render_grid_block(self, name: str, grid: Grid) -> str:
        """Render the ``grid_<name>`` block (titles, rows, filters...)."""
        return self.render_block(f"grid_{name}", {"grid": grid})

    def render_pager(self, grid: Grid) -> str:
        return self.render_block("grid_pager", {"grid": grid, "pagerfanta": self.pager.enable})

    def render_cell(self, column: Column, row: Row, grid: Grid) -> str:
        value = column.render_cell(row.get_field(column.id), row, self.router)
        block = self.resolve_cell_block(grid, column)
        return self.render_block(
            block, {"grid": grid, "column": column, "row": row, "value": value}
        )

    def render_filter(self, column: Column, grid: Grid, submit_on_change: bool = True) -> str:
        """Render the filter widget of ``column``, or nothing when no block matches."""
        block = self.resolve_filter_block(grid, column)
        if block is None:
            return ""
        return self.render_block(
            block,
            {
                "grid": grid,
                "column": column,
                "submitOnChange": submit_on_change and column.filter_submit_on_change,
            },
        )

    def render_column_operator(
        self, column: Column, grid: Grid, operator: str, submit_on_change: bool = True
    ) -> str:
        return self.render_block(
            COLUMN_OPERATOR_BLOCK,
            {"grid": grid, "column": column, "submitOnChange": submit_on_change, "op": operator},
        )

    def render_search(
        self,
        grid: Grid,
        theme: Any = None,
        instance_id: str = "",
        params: Mapping[str, Any] | None = None,
    ) -> str:
        self.init_grid(grid, theme, instance_id, params)
        return self.render_block("grid_search", {"grid": grid})

    def render_pagination(self, grid: Grid) -> str:
        """Render the pager through the configured pagination view."""
        pagination = Pagination(grid.total_count, grid.limit, grid.page + 1)
        url = build_grid_url(UrlSection.PAGE, grid, "")

        def route_generator(page: int) -> str:
            return f"{url}{page - 1}"

        view = load_view_class(self.pager.view_class)()
        return view.render(pagination, route_generator, self.pager.options)

    def grid_url(self, section: UrlSection | str, grid: Grid, param: Any = None) -> str:
        return build_grid_url(section, grid, param)


__all__ = ["RESOLVER_CONTEXT_KEY", "BlockResolver"]
