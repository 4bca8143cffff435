"""Primary public API for gridsmith."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from gridsmith.adapters.jinja import (
    GRID_GLOBALS,
    GridExtension,
    build_environment,
    configure_environment,
    extension_of,
)
from gridsmith.adapters.pagination import DefaultView, Pagination, PaginationView
from gridsmith.core.blocks import (
    BlockCategory,
    block_candidates,
    cell_block_candidates,
    filter_block_candidates,
)
from gridsmith.core.config import GridConfig, GridDocument, PagerConfig, load_config
from gridsmith.core.diagnostics import LoggingEmitter, NullEmitter, RecordingEmitter
from gridsmith.core.exceptions import (
    BlockNotFoundError,
    GridConfigError,
    GridRenderingError,
    TemplateLoadError,
    UnsupportedSectionError,
)
from gridsmith.core.grid import Column, ColumnMeta, Grid, Row
from gridsmith.core.resolver import BlockResolver
from gridsmith.core.templates import DEFAULT_TEMPLATE, RenderTarget, TemplateStore, ThemeReference
from gridsmith.core.urls import UrlSection, build_grid_url


try:
    __version__ = _pkg_version("gridsmith")
except PackageNotFoundError:  # pragma: no cover - local checkout
    __version__ = "0.0.0"


def get_version() -> str:
    """Return the installed gridsmith version."""
    return __version__


__all__ = [
    "DEFAULT_TEMPLATE",
    "GRID_GLOBALS",
    "BlockCategory",
    "BlockNotFoundError",
    "BlockResolver",
    "Column",
    "ColumnMeta",
    "DefaultView",
    "Grid",
    "GridConfig",
    "GridConfigError",
    "GridDocument",
    "GridExtension",
    "GridRenderingError",
    "LoggingEmitter",
    "NullEmitter",
    "PagerConfig",
    "Pagination",
    "PaginationView",
    "RecordingEmitter",
    "RenderTarget",
    "Row",
    "TemplateLoadError",
    "TemplateStore",
    "ThemeReference",
    "UnsupportedSectionError",
    "UrlSection",
    "__version__",
    "block_candidates",
    "build_environment",
    "build_grid_url",
    "cell_block_candidates",
    "configure_environment",
    "extension_of",
    "filter_block_candidates",
    "get_version",
    "load_config",
]
