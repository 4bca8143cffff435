"""Public CLI exports for gridsmith."""

from __future__ import annotations

from .app import app, main
from .commands import blocks, render, resolve
from .state import debug_enabled, emit_error, emit_warning, get_cli_state


__all__ = [
    "app",
    "blocks",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "get_cli_state",
    "main",
    "render",
    "resolve",
]
