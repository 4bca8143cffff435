"""CLI helpers for inspecting the block chain and per-column resolution."""

from __future__ import annotations

from enum import Enum
from typing import Annotated

import typer

from gridsmith.adapters.jinja import extension_of
from gridsmith.core.blocks import CELL_FALLBACK_BLOCK, BlockCategory, block_candidates
from gridsmith.core.config import load_grid_document
from gridsmith.core.exceptions import GridRenderingError

from .._options import (
    ConfigOption,
    GridFileArgument,
    InstanceIdOption,
    TemplateDirOption,
    ThemeOption,
)
from ..diagnostics import CliEmitter
from ..state import get_cli_state
from ..utils import environment_for, resolve_settings


class CategoryChoice(str, Enum):
    cell = "cell"
    filter = "filter"


def resolve(
    grid_file: GridFileArgument,
    column_id: Annotated[str, typer.Argument(help="Identifier of the column to resolve.")],
    category: Annotated[
        CategoryChoice,
        typer.Option("--category", help="Kind of block to resolve."),
    ] = CategoryChoice.cell,
    theme: ThemeOption = None,
    instance_id: InstanceIdOption = "",
    config: ConfigOption = None,
    template_dir: TemplateDirOption = None,
) -> None:
    """Show the candidate blocks tried for a column and the one selected."""
    from rich import box
    from rich.table import Table

    state = get_cli_state()
    console = state.console
    emitter = CliEmitter(state)
    try:
        settings = resolve_settings(config, template_dir, theme)
        environment = environment_for(settings, emitter)
        grid = load_grid_document(grid_file).to_grid()
        try:
            column = grid.get_column(column_id)
        except KeyError:
            raise typer.BadParameter(f"Unknown column '{column_id}'.") from None

        resolver = extension_of(environment).resolver()
        resolver.init_grid(grid, settings.theme, instance_id)
        kind = BlockCategory(category.value)
        selected = resolver.resolve(kind, grid, column)
        candidates = block_candidates(kind, resolver.instance_id(grid), column)
        defined = {name: resolver.has_block(name) for name in candidates}
        resolved = emitter.named("block_resolved")
        tried = set(resolved[-1]["tried"]) if resolved else set(candidates)
    except GridRenderingError as exc:
        emitter.error(str(exc), exc)
        raise typer.Exit(code=1) from exc

    table = Table(
        title=f"{kind.value.capitalize()} blocks for '{column_id}'",
        box=box.SQUARE,
        header_style="bold cyan",
    )
    table.add_column("#", justify="right")
    table.add_column("Candidate", style="magenta")
    table.add_column("Tried")
    table.add_column("Defined")
    table.add_column("Selected")
    for index, name in enumerate(candidates, start=1):
        table.add_row(
            str(index),
            name,
            "yes" if name in tried else "-",
            "yes" if defined[name] else "-",
            "*" if name == selected else "",
        )
    console.print(table)

    if selected is None and kind is BlockCategory.CELL:
        selected = CELL_FALLBACK_BLOCK
    typer.echo(f"selected: {selected if selected is not None else '<none>'}")


def blocks(
    theme: ThemeOption = None,
    config: ConfigOption = None,
    template_dir: TemplateDirOption = None,
) -> None:
    """List the blocks provided by each template of the chain, theme first."""
    from rich import box
    from rich.table import Table

    state = get_cli_state()
    console = state.console
    emitter = CliEmitter(state)
    try:
        settings = resolve_settings(config, template_dir, theme)
        environment = environment_for(settings, emitter)
        resolver = extension_of(environment).resolver()
        resolver.set_theme(settings.theme)
        sources = resolver.resolve_sources()
    except GridRenderingError as exc:
        emitter.error(str(exc), exc)
        raise typer.Exit(code=1) from exc

    table = Table(title="Grid Blocks", box=box.SQUARE, header_style="bold cyan")
    table.add_column("Template", style="green")
    table.add_column("Blocks", style="magenta")
    for source in sources:
        table.add_row(source.name or "<string>", ", ".join(source.block_names) or "-")
    console.print(table)


__all__ = ["blocks", "resolve"]
