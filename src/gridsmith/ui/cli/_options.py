"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


INPUTS_PANEL = "Input Handling"
TEMPLATE_PANEL = "Template"
OUTPUT_PANEL = "Output"

GridFileArgument = Annotated[
    Path,
    typer.Argument(
        metavar="GRID_FILE",
        help="Grid document (YAML or JSON) describing columns, rows and paging state.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
    ),
]

ThemeOption = Annotated[
    str | None,
    typer.Option(
        "--theme",
        "-t",
        help="Template whose blocks override the default grid blocks.",
        rich_help_panel=TEMPLATE_PANEL,
    ),
]

InstanceIdOption = Annotated[
    str,
    typer.Option(
        "--id",
        help="Grid instance id scoping block names (defaults to the grid id).",
        rich_help_panel=TEMPLATE_PANEL,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="YAML configuration (default template, theme, template directories, pager).",
        exists=True,
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

TemplateDirOption = Annotated[
    list[Path] | None,
    typer.Option(
        "--template-dir",
        "-I",
        help="Directory searched for themes (repeatable, searched in order).",
        exists=True,
        file_okay=False,
        resolve_path=True,
        rich_help_panel=TEMPLATE_PANEL,
    ),
]

OutputOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Write the rendered HTML to this file instead of stdout.",
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=OUTPUT_PANEL,
    ),
]


__all__ = [
    "ConfigOption",
    "GridFileArgument",
    "InstanceIdOption",
    "OutputOption",
    "TemplateDirOption",
    "ThemeOption",
]
