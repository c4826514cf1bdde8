"""Typer application and CLI entry point for sprest.

This module wires together the top-level Typer application and registers
the built-in sub-commands (``query``, ``settings``, ``profile``,
``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers, registers commands, and
invokes the Typer app. A :class:`~sprest.exceptions.SprestError` escaping a
command is printed and turned into its ``exit_code``.

See Also:
    :mod:`sprest.config`: Profile and global configuration resolution.
    :mod:`sprest.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
from typing import Any, Optional

import typer

from sprest import __version__
from sprest.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="sprest",
    help="Query SharePoint REST resources and list-backed configuration.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"sprest {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Profile name to use."
    ),
    site_url: Optional[str] = typer.Option(
        None, "--site-url", help="Site URL (overrides the profile's)."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Print requests without sending them."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~sprest.output.OutputManager` and the
    ``sprest`` logger from CLI flags, and stores shared options in the
    Typer context so that sub-commands can read them via ``ctx.obj``.
    """
    from sprest.output import OutputFormat, OutputManager, configure_logging, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)
    configure_logging(output)

    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile
    ctx.obj["site_url"] = site_url
    ctx.obj["dry_run"] = dry_run
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def register_commands() -> None:
    """Attach the built-in sub-commands to :data:`app`. Safe to call more than once."""
    if getattr(register_commands, "_done", False):
        return
    from sprest.commands.config import config_app
    from sprest.commands.profile import profile_app
    from sprest.commands.query import query_command, settings_command

    app.command("query")(query_command)
    app.command("settings")(settings_command)
    app.add_typer(profile_app, name="profile", help="Connection profile management.")
    app.add_typer(config_app, name="config", help="Global configuration management.")
    register_commands._done = True  # type: ignore[attr-defined]


def main() -> None:
    """CLI entry point invoked by the ``sprest`` console script.

    :class:`~sprest.exceptions.SprestError` instances cause a clean exit
    with the error's ``exit_code``; anything else exits with a generic
    failure after printing the message.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        register_commands()
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from sprest.exceptions import SprestError
        from sprest.output import error

        if isinstance(exc, SprestError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
