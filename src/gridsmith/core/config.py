"""Configuration models used by the grid renderer.

PagerConfig

`enable` (`bool`)
: Render the pager through a pagination view instead of the plain
  ``grid_pager`` markup. Exposed to templates as ``pagerfanta``.

`view_class` (`str`)
: Import path of the pagination view (``module:Class`` or ``module.Class``).

`options` (`dict[str, Any]`)
: Options forwarded verbatim to the pagination view.

GridConfig

`default_template` (`str`)
: Template holding the base blocks. Always consulted last.

`theme` (`str | None`)
: Template consulted before the default one, overriding its blocks.

`template_dirs` (`list[Path]`)
: Directories searched for themes, ahead of the packaged templates.

`pager` (`PagerConfig`)
: Pagination view settings.

GridDocument

A grid description (columns, rows, paging state) loaded from YAML or JSON by
the command line interface.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
import yaml

from .exceptions import GridConfigError
from .grid import Column, Grid, rows_from_mappings
from .templates.sources import DEFAULT_TEMPLATE


class PagerConfig(BaseModel):
    """Pagination view settings."""

    model_config = ConfigDict(extra="forbid")

    enable: bool = False
    view_class: str = "gridsmith.adapters.pagination:DefaultView"
    options: dict[str, Any] = Field(default_factory=dict)


class GridConfig(BaseModel):
    """Rendering settings shared by every grid of an environment."""

    model_config = ConfigDict(extra="forbid")

    default_template: str = DEFAULT_TEMPLATE
    theme: str | None = None
    template_dirs: list[Path] = Field(default_factory=list)
    pager: PagerConfig = Field(default_factory=PagerConfig)

    def resolve_paths(self, base: Path) -> GridConfig:
        """Return a copy whose relative template directories are anchored on ``base``."""
        dirs = [path if path.is_absolute() else (base / path) for path in self.template_dirs]
        return self.model_copy(update={"template_dirs": dirs})


class ColumnSpec(BaseModel):
    """Column entry of a grid document."""

    model_config = ConfigDict(extra="forbid")

    id: str
    title: str | None = None
    type: str = "text"
    parent_type: str | None = None
    filter_type: str | None = "input"
    sortable: bool = True
    filterable: bool = True
    visible: bool = True
    order: str | None = None
    filter_submit_on_change: bool = True
    align: str = "left"
    values: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_order(self) -> ColumnSpec:
        """Reject sort directions other than ``asc`` and ``desc``."""
        if self.order is not None and self.order not in {"asc", "desc"}:
            raise ValueError(f"Column '{self.id}' has invalid order '{self.order}'.")
        return self

    def to_column(self) -> Column:
        data = self.model_dump()
        data["title"] = self.title if self.title is not None else self.id
        return Column(**data)


class GridDocument(BaseModel):
    """Grid description loaded by the command line interface."""

    model_config = ConfigDict(extra="forbid")

    id: str = ""
    title: str = ""
    route_url: str = ""
    primary_field: str = "id"
    columns: list[ColumnSpec] = Field(default_factory=list)
    rows: list[dict[str, Any]] = Field(default_factory=list)
    total_count: int | None = None
    limit: int = Field(default=20, ge=1)
    page: int = Field(default=0, ge=0)
    limits: dict[int, str] = Field(default_factory=dict)

    def to_grid(self) -> Grid:
        return Grid(
            id=self.id,
            title=self.title,
            route_url=self.route_url,
            columns=[entry.to_column() for entry in self.columns],
            rows=rows_from_mappings(self.rows, self.primary_field),
            total_count=len(self.rows) if self.total_count is None else self.total_count,
            limit=self.limit,
            page=self.page,
            limits=dict(self.limits),
        )


def _read_mapping(path: Path) -> dict[str, Any]:
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise GridConfigError(f"Unable to read '{path}': {exc}") from exc
    except yaml.YAMLError as exc:
        raise GridConfigError(f"Invalid YAML in '{path}': {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise GridConfigError(f"Expected a mapping at the top of '{path}'.")
    return payload


def load_config(path: Path) -> GridConfig:
    """Load a ``GridConfig`` from a YAML file, anchoring relative directories on it."""
    data = _read_mapping(path)
    try:
        config = GridConfig.model_validate(data)
    except ValidationError as exc:
        raise GridConfigError(f"Invalid grid configuration in '{path}': {exc}") from exc
    return config.resolve_paths(path.parent)


def load_grid_document(path: Path) -> GridDocument:
    """Load a grid document from YAML (JSON is accepted as a YAML subset)."""
    data = _read_mapping(path)
    try:
        return GridDocument.model_validate(data)
    except ValidationError as exc:
        raise GridConfigError(f"Invalid grid document '{path}': {exc}") from exc


__all__ = [
    "ColumnSpec",
    "GridConfig",
    "GridDocument",
    "PagerConfig",
    "load_config",
    "load_grid_document",
]
