"""Candidate block names for per-column overrides.

Cells and filters are rendered by the most specific block a theme defines.
Candidates are produced most specific first: every instance-scoped name
(``grid_<id>_...``) precedes every generic name (``grid_column_...``), so a
matching instance-scoped block always wins over a generic one. Names whose
variable part is empty (no parent type, no filter type) are skipped.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from enum import Enum

from .grid import ColumnMeta


CELL_FALLBACK_BLOCK = "grid_column_cell"
COLUMN_OPERATOR_BLOCK = "grid_column_operator"


class BlockCategory(str, Enum):
    """Render block categories resolved against column metadata."""

    CELL = "cell"
    FILTER = "filter"


def _cell_names(prefix: str, column: ColumnMeta) -> list[str]:
    return [
        name
        for part, name in (
            (column.render_block_id, f"{prefix}_column_{column.render_block_id}_cell"),
            (column.type, f"{prefix}_column_{column.type}_cell"),
            (column.parent_type, f"{prefix}_column_{column.parent_type}_cell"),
            (column.render_block_id, f"{prefix}_column_id_{column.render_block_id}_cell"),
            (column.type, f"{prefix}_column_type_{column.type}_cell"),
            (column.parent_type, f"{prefix}_column_type_{column.parent_type}_cell"),
        )
        if part
    ]


def _filter_names(prefix: str, column: ColumnMeta) -> list[str]:
    return [
        name
        for part, name in (
            (column.render_block_id, f"{prefix}_column_{column.render_block_id}_filter"),
            (column.render_block_id, f"{prefix}_column_id_{column.render_block_id}_filter"),
            (column.type, f"{prefix}_column_type_{column.type}_filter"),
            (column.parent_type, f"{prefix}_column_type_{column.parent_type}_filter"),
            (column.filter_type, f"{prefix}_column_filter_type_{column.filter_type}"),
        )
        if part
    ]


_BUILDERS: dict[BlockCategory, Callable[[str, ColumnMeta], list[str]]] = {
    BlockCategory.CELL: _cell_names,
    BlockCategory.FILTER: _filter_names,
}


def block_candidates(category: BlockCategory | str, instance_id: str, column: ColumnMeta) -> list[str]:
    """Return candidate block names for ``column``, most specific first."""
    builder = _BUILDERS[BlockCategory(category)]
    candidates: list[str] = []
    if instance_id:
        candidates.extend(builder(f"grid_{instance_id}", column))
    candidates.extend(builder("grid", column))
    return candidates


def cell_block_candidates(instance_id: str, column: ColumnMeta) -> list[str]:
    return block_candidates(BlockCategory.CELL, instance_id, column)


def filter_block_candidates(instance_id: str, column: ColumnMeta) -> list[str]:
    return block_candidates(BlockCategory.FILTER, instance_id, column)


def first_defined(candidates: Iterable[str], has_block: Callable[[str], bool]) -> str | None:
    """Return the first candidate accepted by ``has_block``, stopping at the first hit."""
    for candidate in candidates:
        if has_block(candidate):
            return candidate
    return None


__all__ = [
    "CELL_FALLBACK_BLOCK",
    "COLUMN_OPERATOR_BLOCK",
    "BlockCategory",
    "block_candidates",
    "cell_block_candidates",
    "filter_block_candidates",
    "first_defined",
]
