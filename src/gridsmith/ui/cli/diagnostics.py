"""Diagnostic emitter bridging the block resolver with the CLI console."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from gridsmith.core.diagnostics import LoggingEmitter, RecordingEmitter

from .state import CLIState, emit_error, emit_warning, get_cli_state


class CliEmitter(RecordingEmitter):
    """Print warnings and errors on the console, log and record resolution events."""

    def __init__(self, state: CLIState | None = None) -> None:
        super().__init__()
        self._state = state or get_cli_state()
        self.debug_enabled = self._state.verbosity >= 1
        self._logging = LoggingEmitter(debug_enabled=self.debug_enabled)

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        super().warning(message, exc)
        emit_warning(message, exception=exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        emit_error(message, exception=exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        super().event(name, payload)
        self._logging.event(name, payload)


__all__ = ["CliEmitter"]
