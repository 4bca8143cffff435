"""Helpers shared by CLI commands."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from jinja2 import Environment

from gridsmith.adapters.jinja import build_environment
from gridsmith.core.config import GridConfig, load_config
from gridsmith.core.diagnostics import DiagnosticEmitter


def resolve_settings(
    config_path: Path | None,
    template_dirs: Sequence[Path] | None,
    theme: str | None,
) -> GridConfig:
    """Merge the configuration file with command line overrides.

    A theme given as an existing file path is turned into a template name by
    searching its parent directory first.
    """
    settings = load_config(config_path) if config_path is not None else GridConfig()
    dirs = list(template_dirs or []) + list(settings.template_dirs)

    if theme:
        candidate = Path(theme).expanduser()
        if candidate.is_file():
            dirs.insert(0, candidate.resolve().parent)
            theme = candidate.name
        settings = settings.model_copy(update={"theme": theme})

    return settings.model_copy(update={"template_dirs": dirs})


def environment_for(settings: GridConfig, emitter: DiagnosticEmitter | None = None) -> Environment:
    return build_environment(settings, emitter=emitter)


__all__ = ["environment_for", "resolve_settings"]
