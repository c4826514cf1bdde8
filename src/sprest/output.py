"""Terminal output for the sprest CLI.

Data (REST payloads, settings, profile tables) goes to stdout and
everything else (progress, warnings, errors, debug) goes to stderr, so
``sprest --json settings | jq`` always sees clean JSON.

Three data formats are supported:

* ``json``: payloads exactly as the server returned them, unwrapped from
  the OData envelope.
* ``plain``: tab-separated lines for shell pipelines, with OData
  bookkeeping (``__metadata``, deferred navigation links, ``odata.*``
  annotations) removed.
* ``rich``: tables for entity lists and settings, highlighted JSON for
  anything else. ``auto`` picks ``rich`` on a colour TTY and ``plain``
  otherwise; ``NO_COLOR`` and ``TERM=dumb`` count as no colour.

Library modules log under the ``sprest`` logger; :func:`configure_logging`
sends those records to the manager's stderr console.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Any, Mapping, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


# level -> (plain prefix, rich markup around the prefix and message)
_DIAGNOSTICS = {
    "info": ("", "{}"),
    "success": ("", "[green]{}[/green]"),
    "warning": ("Warning: ", "[yellow]Warning:[/yellow] {}"),
    "error": ("Error: ", "[bold red]Error:[/bold red] {}"),
    "debug": ("[debug] ", "[dim]\\[debug] {}[/dim]"),
}


def strip_odata_annotations(data: Any) -> Any:
    """Return *data* without OData bookkeeping, for human-facing output.

    Removes ``__metadata``, ``odata.*`` annotations and properties whose
    value is a ``{"__deferred": ...}`` navigation link, recursively.
    """
    if isinstance(data, list):
        return [strip_odata_annotations(item) for item in data]
    if isinstance(data, dict):
        return {
            key: strip_odata_annotations(value)
            for key, value in data.items()
            if key != "__metadata"
            and not key.startswith("odata.")
            and not (isinstance(value, dict) and "__deferred" in value)
        }
    return data


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def _columns(records: list[dict[str, Any]]) -> list[str]:
    columns: list[str] = []
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)
    return columns


class OutputManager:
    """Writes CLI data to stdout and diagnostics to stderr in one format.

    Args:
        format: Desired data format; ``AUTO`` is resolved from the TTY.
        no_color: Disable colour and Rich markup.
        quiet: Drop ``info`` and ``success`` messages.
        verbose: Show ``debug`` messages and DEBUG log records.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        if format == OutputFormat.AUTO:
            format = OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
        self._format = format
        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data (stdout)
    # ------------------------------------------------------------------ #

    def format_response(self, data: Any) -> None:
        """Print a REST payload in the active format.

        Args:
            data: An unwrapped OData payload: an entity dict, a list of
                entities, a scalar, or a raw response string.
        """
        if self._format == OutputFormat.JSON:
            self._emit_json(data)
            return
        data = strip_odata_annotations(data)
        if data is None:
            return
        if self._format == OutputFormat.PLAIN:
            self._emit_plain(data)
        elif isinstance(data, list) and data and all(isinstance(item, dict) for item in data):
            self.print_table(_columns(data), [[_cell(item.get(c)) for c in _columns(data)] for item in data])
        elif isinstance(data, (dict, list)):
            text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(str(data))

    def print_settings(self, values: Mapping[str, str], list_title: Optional[str] = None) -> None:
        """Print a configuration mapping read from a SharePoint list.

        JSON mode prints one object, plain mode prints ``Title<TAB>Value``
        lines, and Rich mode prints a two-column table titled after the list.

        Args:
            values: Setting names mapped to their values.
            list_title: Title of the list the values came from.
        """
        if self._format == OutputFormat.JSON:
            self._emit_json(dict(values))
        elif self._format == OutputFormat.PLAIN:
            for key, value in values.items():
                self.print_data(f"{key}\t{value}")
        else:
            title = f"Settings from '{list_title}'" if list_title else None
            self.print_table(["Setting", "Value"], [[k, v] for k, v in values.items()], title=title)

    def print_data(self, text: str) -> None:
        """Print raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows under *headers* in the active format.

        JSON mode prints an array of objects keyed by header, plain mode a
        header line and one tab-separated line per row. *title* is only
        shown in Rich mode.
        """
        if self._format == OutputFormat.JSON:
            self._emit_json([dict(zip(headers, row)) for row in rows])
        elif self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    def _emit_json(self, data: Any) -> None:
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError:
                self.print_data(data)
                return
        self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))

    def _emit_plain(self, data: Any) -> None:
        if isinstance(data, dict):
            for key, value in data.items():
                self.print_data(f"{key}\t{_cell(value)}")
        elif isinstance(data, list):
            for item in data:
                if isinstance(item, dict):
                    self.print_data("\t".join(_cell(v) for v in item.values()))
                else:
                    self.print_data(_cell(item))
        else:
            self.print_data(str(data))

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def _diagnostic(self, level: str, message: str) -> None:
        prefix, markup = _DIAGNOSTICS[level]
        if self._no_color:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup.format(message))

    def info(self, message: str) -> None:
        """Progress message; dropped with ``--quiet``."""
        if not self._quiet:
            self._diagnostic("info", message)

    def success(self, message: str) -> None:
        """Completion message in green; dropped with ``--quiet``."""
        if not self._quiet:
            self._diagnostic("success", message)

    def warning(self, message: str) -> None:
        """Warning, shown even with ``--quiet``."""
        self._diagnostic("warning", message)

    def error(self, message: str) -> None:
        """Error, always shown."""
        self._diagnostic("error", message)

    def debug(self, message: str) -> None:
        """Debug detail, shown only with ``--verbose``."""
        if self._verbose:
            self._diagnostic("debug", message)

    def logging_handler(self) -> logging.Handler:
        """Build a handler that writes log records to this manager's stderr."""
        if self._no_color:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
            return handler
        return RichHandler(console=self._stderr, show_path=False, show_time=False)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set to anything or ``TERM`` is ``dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Process-wide manager and logging
# ------------------------------------------------------------------ #

_LOGGER_NAME = "sprest"
_output: Optional[OutputManager] = None
_handler: Optional[logging.Handler] = None


def configure_logging(output: OutputManager) -> None:
    """Attach *output*'s stderr handler to the ``sprest`` logger.

    The level is DEBUG with ``--verbose`` and WARNING otherwise. A handler
    installed by an earlier call is replaced.
    """
    global _handler
    logger = logging.getLogger(_LOGGER_NAME)
    if _handler is not None:
        logger.removeHandler(_handler)
    _handler = output.logging_handler()
    logger.addHandler(_handler)
    logger.setLevel(logging.DEBUG if output.is_verbose else logging.WARNING)


def get_output() -> OutputManager:
    """Return the process-wide :class:`OutputManager`, creating a default one."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the process-wide manager and detach its logging handler.

    Rich consoles keep a reference to the streams they were created with;
    test runners that swap ``sys.stdout`` call this between invocations.
    """
    global _output, _handler
    _output = None
    if _handler is not None:
        logging.getLogger(_LOGGER_NAME).removeHandler(_handler)
        _handler = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_settings(values: Mapping[str, str], list_title: Optional[str] = None) -> None:
    get_output().print_settings(values, list_title)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)
