"""In-memory grid model consumed by the block resolver.

The resolver only reads from these objects. Data fetching, filtering and
sorting happen upstream; a ``Grid`` carries the already-computed page of rows
along with the state needed to build pager and sorting URLs.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
import hashlib
from typing import Any, Protocol, runtime_checkable


REQUEST_QUERY_ORDER = "_order"
REQUEST_QUERY_PAGE = "_page"
REQUEST_QUERY_LIMIT = "_limit"
REQUEST_QUERY_RESET = "_reset"
REQUEST_QUERY_EXPORT = "__export_id"

Router = Callable[..., str]


@runtime_checkable
class ColumnMeta(Protocol):
    """Column facade used to derive candidate block names."""

    @property
    def render_block_id(self) -> str: ...

    @property
    def type(self) -> str: ...

    @property
    def parent_type(self) -> str | None: ...

    @property
    def filter_type(self) -> str | None: ...


@dataclass(slots=True)
class Column:
    """Grid column description."""

    id: str
    title: str = ""
    type: str = "text"
    parent_type: str | None = None
    filter_type: str | None = "input"
    sortable: bool = True
    filterable: bool = True
    visible: bool = True
    order: str | None = None
    filter_submit_on_change: bool = True
    align: str = "left"
    values: dict[str, Any] = field(default_factory=dict)

    @property
    def render_block_id(self) -> str:
        """Return the column identifier usable inside a block name."""
        return self.id.replace(".", "_")

    @property
    def is_sorted(self) -> bool:
        return self.order in {"asc", "desc"}

    def render_cell(self, value: Any, row: Row, router: Router | None = None) -> Any:
        """Return the display value of a cell, mapped through ``values`` when declared."""
        _ = row, router
        if self.values and value is not None:
            key = str(value).lower() if isinstance(value, bool) else str(value)
            return self.values.get(key, value)
        return value


@dataclass(slots=True)
class Row:
    """Single grid row holding field values keyed by column id."""

    fields: dict[str, Any] = field(default_factory=dict)
    primary_field: str = "id"

    def get_field(self, column_id: str) -> Any:
        return self.fields.get(column_id)

    @property
    def primary_value(self) -> Any:
        return self.fields.get(self.primary_field)


def _derive_hash(grid_id: str, route_url: str, columns: Sequence[Column]) -> str:
    if grid_id:
        return f"grid_{grid_id}"
    digest = hashlib.md5(usedforsecurity=False)
    digest.update(route_url.encode("utf-8"))
    for column in columns:
        digest.update(column.id.encode("utf-8"))
    return f"grid_{digest.hexdigest()}"


@dataclass(slots=True)
class Grid:
    """A page of grid data plus its rendering state."""

    id: str = ""
    route_url: str = ""
    columns: list[Column] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)
    total_count: int = 0
    limit: int = 20
    page: int = 0
    limits: dict[int, str] = field(default_factory=dict)
    title: str = ""
    no_data_message: str = "No data"
    no_result_message: str = "No result"
    template: Any = None
    hash: str = ""

    def __post_init__(self) -> None:
        if not self.hash:
            self.hash = _derive_hash(self.id, self.route_url, self.columns)
        if not self.limits:
            self.limits = {self.limit: str(self.limit)}

    @property
    def visible_columns(self) -> list[Column]:
        return [column for column in self.columns if column.visible]

    @property
    def is_filtered(self) -> bool:
        return any(column.filterable for column in self.visible_columns)

    @property
    def is_paged(self) -> bool:
        return self.total_count > self.limit > 0

    @property
    def page_count(self) -> int:
        if self.limit <= 0:
            return 1
        return max(1, -(-self.total_count // self.limit))

    def get_column(self, column_id: str) -> Column:
        for column in self.columns:
            if column.id == column_id:
                return column
        raise KeyError(column_id)

    def set_template(self, template: Any) -> None:
        """Record the theme used to render the grid (reused by exports)."""
        self.template = template


def rows_from_mappings(entries: Sequence[Mapping[str, Any]], primary_field: str = "id") -> list[Row]:
    """Build rows from plain mappings."""
    return [Row(fields=dict(entry), primary_field=primary_field) for entry in entries]


__all__ = [
    "REQUEST_QUERY_EXPORT",
    "REQUEST_QUERY_LIMIT",
    "REQUEST_QUERY_ORDER",
    "REQUEST_QUERY_PAGE",
    "REQUEST_QUERY_RESET",
    "Column",
    "ColumnMeta",
    "Grid",
    "Router",
    "Row",
    "rows_from_mappings",
]
