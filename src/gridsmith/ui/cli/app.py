"""Typer application wiring for the gridsmith CLI."""

from __future__ import annotations

from typing import Annotated

import typer

from gridsmith.ui.cli.commands import blocks, render, resolve

from .state import configure_logging, debug_enabled, emit_error, get_cli_state, set_cli_state


app = typer.Typer(
    help="Render data grids from Jinja block themes.",
    context_settings={"help_option_names": ["--help"]},
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        from gridsmith import get_version

        typer.echo(get_version())
        raise typer.Exit()


@app.callback()
def configure(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase diagnostic output (repeat for more detail).",
        ),
    ] = 0,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Show full tracebacks on failure."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Print the gridsmith version and exit.",
        ),
    ] = False,
) -> None:
    """Configure diagnostics shared by every command."""
    _ = version
    state = set_cli_state(ctx=ctx, verbosity=verbose, debug=debug)
    configure_logging(state.verbosity)


app.command()(render)
app.command()(resolve)
app.command()(blocks)


def main() -> None:
    """Entry point compatible with console scripts."""
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt as exc:
        if debug_enabled():
            raise
        emit_error("Operation cancelled by user.", exception=exc)
        raise typer.Exit(code=1) from exc
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover
        state = get_cli_state()
        if state.show_tracebacks:
            from rich.traceback import Traceback

            tb = Traceback.from_exception(
                type(exc),
                exc,
                exc.__traceback__,
                show_locals=state.verbosity >= 2,
            )
            state.err_console.print(tb)
        else:
            emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["app", "main"]
