"""Console and verbosity state shared by the CLI commands."""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
import logging
import sys
from typing import TYPE_CHECKING, TextIO

import click
import typer

from gridsmith.core.exceptions import exception_hint, exception_messages


if TYPE_CHECKING:
    from rich.console import Console

__all__ = [
    "CLIState",
    "configure_logging",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "get_cli_state",
    "render_message",
    "set_cli_state",
]

_LEVELS = {0: logging.WARNING, 1: logging.INFO}


@dataclass(slots=True)
class CLIState:
    """Verbosity flags plus the Rich consoles bound to the current streams."""

    verbosity: int = 0
    show_tracebacks: bool = False
    _consoles: dict[str, Console] = field(default_factory=dict, init=False, repr=False)

    def _console_for(self, key: str, stream: TextIO, **options: object) -> Console:
        from rich.console import Console

        # Streams are swapped by test runners, rebind when they change.
        console = self._consoles.get(key)
        if console is None or console.file is not stream:
            console = Console(file=stream, **options)
            self._consoles[key] = console
        return console

    @property
    def console(self) -> Console:
        return self._console_for("out", sys.stdout)

    @property
    def err_console(self) -> Console:
        return self._console_for("err", sys.stderr, highlight=False)


_STATE_VAR: ContextVar[CLIState | None] = ContextVar("gridsmith_cli_state", default=None)


def get_cli_state(
    ctx: typer.Context | click.Context | None = None,
    *,
    create: bool = True,
) -> CLIState:
    """Return the state attached to the active click context (or the last one seen)."""
    ctx = ctx or click.get_current_context(silent=True)
    state = ctx.find_object(CLIState) if ctx is not None else None

    if state is None:
        state = _STATE_VAR.get()
        if state is None:
            if not create:
                raise RuntimeError("CLI state is not initialised for this context.")
            state = CLIState()
        if ctx is not None and create:
            ctx.obj = state

    _STATE_VAR.set(state)
    return state


def set_cli_state(
    *,
    ctx: typer.Context | None = None,
    verbosity: int | None = None,
    debug: bool | None = None,
) -> CLIState:
    state = get_cli_state(ctx)
    if verbosity is not None:
        state.verbosity = max(0, verbosity)
    if debug is not None:
        state.show_tracebacks = debug
    return state


def configure_logging(verbosity: int) -> None:
    """Send ``gridsmith`` log records to stderr through a single Rich handler."""
    from rich.logging import RichHandler

    package_logger = logging.getLogger("gridsmith")
    package_logger.setLevel(_LEVELS.get(verbosity, logging.DEBUG))
    for handler in [h for h in package_logger.handlers if isinstance(h, RichHandler)]:
        package_logger.removeHandler(handler)
    package_logger.addHandler(RichHandler(console=get_cli_state().err_console, show_path=False))


def render_message(
    level: str,
    message: str,
    *,
    exception: BaseException | None = None,
) -> None:
    """Print ``level: message`` on stderr, with the cause chain when verbose."""
    from rich.text import Text

    state = get_cli_state()
    style = "red" if level == "error" else "yellow"
    text = Text.assemble((f"{level}: ", f"bold {style}"), (message, style))

    if exception is not None and state.verbosity == 0:
        hint = exception_hint(exception)
        if hint and hint not in message:
            text.append(f" ({hint})", style=style)
    elif exception is not None:
        details = [f"type: {type(exception).__name__}"]
        causes = [entry for entry in exception_messages(exception) if entry not in message]
        if state.verbosity >= 2 and causes:
            details.append("caused by:")
            details.extend(f"  {entry}" for entry in causes)
        text.append("\n" + "\n".join(details), style=style)

    state.err_console.print(text)


def emit_warning(message: str, *, exception: BaseException | None = None) -> None:
    render_message("warning", message, exception=exception)


def emit_error(message: str, *, exception: BaseException | None = None) -> None:
    render_message("error", message, exception=exception)


def debug_enabled() -> bool:
    """Return whether full tracebacks were requested with ``--debug``."""
    try:
        return get_cli_state(create=False).show_tracebacks
    except RuntimeError:
        return False
