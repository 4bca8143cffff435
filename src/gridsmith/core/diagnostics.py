"""Diagnostic abstractions shared by the resolver and the CLI."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any, Protocol, runtime_checkable


logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Interface used to surface warnings, errors, and structured events."""

    debug_enabled: bool

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...

    def event(self, name: str, payload: Mapping[str, Any]) -> None: ...


class NullEmitter:
    """Emitter that ignores every diagnostic."""

    debug_enabled: bool = False

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        return

    def error(self, message: str, exc: BaseException | None = None) -> None:
        return

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        return


class LoggingEmitter:
    """Emitter that forwards diagnostics to the standard logging module."""

    def __init__(
        self, *, logger_obj: logging.Logger | None = None, debug_enabled: bool = False
    ) -> None:
        self._logger = logger_obj or logger
        self.debug_enabled = debug_enabled

    def _log(self, level: int, message: str, exc: BaseException | None) -> None:
        self._logger.log(level, message, exc_info=exc)

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self._log(logging.WARNING, message, exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self._log(logging.ERROR, message, exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        message = format_event_message(name, payload)
        if message and self.debug_enabled:
            self._logger.info(message)
            return
        self._logger.debug("diagnostic event %s: %s", name, dict(payload))


class RecordingEmitter(NullEmitter):
    """Emitter that keeps events in memory for later inspection."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []
        self.warnings: list[str] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((name, dict(payload)))

    def named(self, name: str) -> list[dict[str, Any]]:
        return [payload for event, payload in self.events if event == name]


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return a human-friendly summary for block resolution events."""
    data = dict(payload)

    if name == "block_resolved":
        block = data.get("block") or "<unknown>"
        category = data.get("category") or "block"
        tried = data.get("tried") or []
        return f"Resolved {category} block '{block}' after {len(tried)} candidate(s)"

    if name == "block_fallback":
        category = data.get("category") or "block"
        fallback = data.get("block")
        if fallback is None:
            return f"No {category} block matched, rendering nothing"
        return f"No {category} block matched, falling back to '{fallback}'"

    if name == "sources_loaded":
        sources = data.get("sources") or []
        return f"Grid template chain: {' > '.join(str(source) for source in sources)}"

    return None


__all__ = [
    "DiagnosticEmitter",
    "LoggingEmitter",
    "NullEmitter",
    "RecordingEmitter",
    "format_event_message",
]
