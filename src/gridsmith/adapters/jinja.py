"""Jinja2 integration exposing grid rendering functions to templates.

Templates call ``grid_render(grid)`` (or ``grid_html``/``grid_search``) to start
rendering a grid. Every block rendered from there receives the active
``BlockResolver`` in its context, so nested calls such as
``grid_cell(column, row, grid)`` reuse the same theme chain and grid
registrations. Calls made directly from a page share one resolver per page
render, keyed on the page's evaluation context.

Jinja keeps variables and functions in one namespace: since blocks receive the
grid as ``grid``, the full-grid function is exposed as ``grid_render``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any
from weakref import WeakKeyDictionary

from jinja2 import (
    BaseLoader,
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    PrefixLoader,
    pass_context,
    select_autoescape,
)
from jinja2.ext import Extension
from jinja2.nodes import EvalContext
from jinja2.runtime import Context
from markupsafe import Markup

from gridsmith.core.config import GridConfig, PagerConfig
from gridsmith.core.diagnostics import DiagnosticEmitter
from gridsmith.core.grid import Column, Grid, Router, Row
from gridsmith.core.resolver import RESOLVER_CONTEXT_KEY, BlockResolver
from gridsmith.core.templates import DEFAULT_TEMPLATE
from gridsmith.core.urls import build_grid_url


GRID_GLOBALS: dict[str, Any] = {
    "grid": None,
    "column": None,
    "row": None,
    "value": None,
    "submitOnChange": None,
    "withjs": True,
    "pagerfanta": False,
    "op": "eq",
}

PACKAGE_PREFIX = "gridsmith"


class GridExtension(Extension):
    """Register the grid globals and rendering functions on an environment."""

    def __init__(self, environment: Environment) -> None:
        super().__init__(environment)
        self._page_resolvers: WeakKeyDictionary[EvalContext, BlockResolver] = WeakKeyDictionary()
        environment.extend(
            grid_default_template=DEFAULT_TEMPLATE,
            grid_router=None,
            grid_pager=PagerConfig(),
            grid_emitter=None,
        )
        for key, value in GRID_GLOBALS.items():
            environment.globals.setdefault(key, value)
        environment.globals.update(
            {
                "grid_render": self.grid_render,
                "grid_html": self.grid_html,
                "grid_url": self.grid_url,
                "grid_filter": self.grid_filter,
                "grid_column_operator": self.grid_column_operator,
                "grid_cell": self.grid_cell,
                "grid_search": self.grid_search,
                "grid_pager": self.grid_pager,
                "grid_pagerfanta": self.grid_pagerfanta,
                "grid_block": self.grid_block,
            }
        )

    def resolver(self, context: Context | None = None) -> BlockResolver:
        """Return the resolver of the current render pass, starting one if needed.

        Blocks rendered by a resolver carry it in their context. Top-level calls
        of a page share the resolver stored for the page's evaluation context,
        so a ``grid_pager`` after ``grid_render`` keeps its theme and instance id.
        """
        if context is None:
            return self._new_resolver()
        active = context.get(RESOLVER_CONTEXT_KEY)
        if isinstance(active, BlockResolver):
            return active
        resolver = self._page_resolvers.get(context.eval_ctx)
        if resolver is None:
            resolver = self._new_resolver()
            self._page_resolvers[context.eval_ctx] = resolver
        return resolver

    def _new_resolver(self) -> BlockResolver:
        env = self.environment
        return BlockResolver(
            env,
            default_template=env.grid_default_template,  # type: ignore[attr-defined]
            router=env.grid_router,  # type: ignore[attr-defined]
            pager=env.grid_pager,  # type: ignore[attr-defined]
            emitter=env.grid_emitter,  # type: ignore[attr-defined]
        )

    @pass_context
    def grid_render(
        self,
        context: Context,
        grid: Grid,
        theme: Any = None,
        id: str = "",
        params: Mapping[str, Any] | None = None,
        withjs: bool = True,
    ) -> Markup:
        return Markup(self.resolver(context).render_grid(grid, theme, id, params, withjs))

    @pass_context
    def grid_html(
        self,
        context: Context,
        grid: Grid,
        theme: Any = None,
        id: str = "",
        params: Mapping[str, Any] | None = None,
    ) -> Markup:
        return Markup(self.resolver(context).render_grid_html(grid, theme, id, params))

    def grid_url(self, section: str, grid: Grid, param: Any = None) -> str:
        return build_grid_url(section, grid, param)

    @pass_context
    def grid_filter(
        self, context: Context, column: Column, grid: Grid, submit_on_change: bool = True
    ) -> Markup:
        return Markup(self.resolver(context).render_filter(column, grid, submit_on_change))

    @pass_context
    def grid_column_operator(
        self,
        context: Context,
        column: Column,
        grid: Grid,
        operator: str,
        submit_on_change: bool = True,
    ) -> Markup:
        return Markup(
            self.resolver(context).render_column_operator(column, grid, operator, submit_on_change)
        )

    @pass_context
    def grid_cell(self, context: Context, column: Column, row: Row, grid: Grid) -> Markup:
        return Markup(self.resolver(context).render_cell(column, row, grid))

    @pass_context
    def grid_search(
        self,
        context: Context,
        grid: Grid,
        theme: Any = None,
        id: str = "",
        params: Mapping[str, Any] | None = None,
    ) -> Markup:
        return Markup(self.resolver(context).render_search(grid, theme, id, params))

    @pass_context
    def grid_pager(self, context: Context, grid: Grid) -> Markup:
        return Markup(self.resolver(context).render_pager(grid))

    @pass_context
    def grid_pagerfanta(self, context: Context, grid: Grid) -> Markup:
        return Markup(self.resolver(context).render_pagination(grid))

    @pass_context
    def grid_block(self, context: Context, name: str, grid: Grid) -> Markup:
        """Render ``grid_<name>``, e.g. ``grid_block('titles', grid)``."""
        return Markup(self.resolver(context).render_grid_block(name, grid))


def configure_environment(
    environment: Environment,
    config: GridConfig | None = None,
    *,
    router: Router | None = None,
    emitter: DiagnosticEmitter | None = None,
) -> Environment:
    """Install the grid extension on an existing environment and apply settings."""
    config = config or GridConfig()
    if GridExtension.identifier not in environment.extensions:
        environment.add_extension(GridExtension)
    environment.grid_default_template = config.default_template  # type: ignore[attr-defined]
    environment.grid_pager = config.pager  # type: ignore[attr-defined]
    environment.grid_router = router  # type: ignore[attr-defined]
    environment.grid_emitter = emitter  # type: ignore[attr-defined]
    return environment


def build_loader(template_dirs: Iterable[Path | str] = ()) -> BaseLoader:
    """Return a loader searching user directories before the packaged blocks."""
    loaders: list[BaseLoader] = []
    directories = [str(path) for path in template_dirs]
    if directories:
        loaders.append(FileSystemLoader(directories))
    loaders.append(PrefixLoader({PACKAGE_PREFIX: PackageLoader("gridsmith", "templates")}))
    return ChoiceLoader(loaders)


def build_environment(
    config: GridConfig | None = None,
    *,
    router: Router | None = None,
    emitter: DiagnosticEmitter | None = None,
    **options: Any,
) -> Environment:
    """Build an HTML environment with the grid extension installed."""
    config = config or GridConfig()
    options.setdefault("autoescape", select_autoescape(("html", "htm", "xml", "j2")))
    options.setdefault("trim_blocks", True)
    options.setdefault("lstrip_blocks", True)
    environment = Environment(loader=build_loader(config.template_dirs), **options)
    return configure_environment(environment, config, router=router, emitter=emitter)


def extension_of(environment: Environment) -> GridExtension:
    """Return the grid extension installed on ``environment``."""
    try:
        extension = environment.extensions[GridExtension.identifier]
    except KeyError:
        raise LookupError("The grid extension is not installed on this environment.") from None
    return extension  # type: ignore[return-value]


__all__ = [
    "GRID_GLOBALS",
    "GridExtension",
    "build_environment",
    "build_loader",
    "configure_environment",
    "extension_of",
]
