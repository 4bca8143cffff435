"""Render a grid document to HTML."""

from __future__ import annotations

from typing import Annotated

import typer

from gridsmith.adapters.jinja import extension_of
from gridsmith.core.config import load_grid_document
from gridsmith.core.exceptions import GridRenderingError

from .._options import (
    ConfigOption,
    GridFileArgument,
    InstanceIdOption,
    OUTPUT_PANEL,
    OutputOption,
    TemplateDirOption,
    ThemeOption,
)
from ..diagnostics import CliEmitter
from ..state import get_cli_state
from ..utils import environment_for, resolve_settings


def render(
    grid_file: GridFileArgument,
    theme: ThemeOption = None,
    instance_id: InstanceIdOption = "",
    config: ConfigOption = None,
    template_dir: TemplateDirOption = None,
    html_only: Annotated[
        bool,
        typer.Option(
            "--html-only",
            help="Omit the grid JavaScript block.",
            rich_help_panel=OUTPUT_PANEL,
        ),
    ] = False,
    search: Annotated[
        bool,
        typer.Option(
            "--search",
            help="Render the search form instead of the grid.",
            rich_help_panel=OUTPUT_PANEL,
        ),
    ] = False,
    output: OutputOption = None,
) -> None:
    """Render GRID_FILE with the default blocks and an optional theme."""
    state = get_cli_state()
    emitter = CliEmitter(state)
    try:
        settings = resolve_settings(config, template_dir, theme)
        environment = environment_for(settings, emitter=emitter)
        grid = load_grid_document(grid_file).to_grid()
        resolver = extension_of(environment).resolver()
        if search:
            html = resolver.render_search(grid, settings.theme, instance_id)
        else:
            html = resolver.render_grid(grid, settings.theme, instance_id, withjs=not html_only)
    except GridRenderingError as exc:
        emitter.error(str(exc), exc)
        raise typer.Exit(code=1) from exc

    if output is None:
        typer.echo(html)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(html, encoding="utf-8")
    if state.verbosity >= 1:
        typer.echo(f"Grid written to {output}")


__all__ = ["render"]
