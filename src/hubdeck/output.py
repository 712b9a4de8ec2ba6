"""Terminal output for hubdeck, and its logging layer.

Data goes to stdout, diagnostics to stderr (see `clig.dev
<https://clig.dev/>`_). Nothing else in hubdeck writes to the terminal: the
profile store, the identity verifier, persistence and the platform all
report through the module-level :func:`debug` and :func:`error`, so the
``--verbose`` and ``--quiet`` flags govern every message the process prints.

Data renderers:

* ``json`` -- indented JSON, for scripts.
* ``plain`` -- one ``key<TAB>value`` line per field. Nested settings are
  flattened to dotted keys (``connection.host``), the same keys
  ``hubdeck profiles set`` accepts. Lists are comma separated.
* ``rich`` -- syntax-highlighted JSON and boxed tables.

``auto`` picks ``rich`` on an interactive, colour-capable stdout and
``plain`` otherwise. Colour is off when ``--no-color`` is passed, ``NO_COLOR``
is set, or ``TERM=dumb``.

:class:`OutputManager` holds the resolved settings. The root command
installs one with :func:`set_output`; everything else uses the module-level
helpers, which fall back to a default manager when none is installed.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Iterator, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Data rendering formats accepted by ``--json``/``--plain`` and ``output.format``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class _Level(str, Enum):
    """Diagnostic levels: plain-text prefix and Rich markup for each."""

    DEBUG = "debug"
    INFO = "info"
    SUCCESS = "success"
    SUGGEST = "suggest"
    WARNING = "warning"
    ERROR = "error"


# level -> (plain prefix, rich template, shown when quiet)
_LEVELS: dict[_Level, tuple[str, str, bool]] = {
    _Level.DEBUG: ("[debug] ", "[dim]\\[debug] {}[/dim]", True),
    _Level.INFO: ("", "{}", False),
    _Level.SUCCESS: ("", "[green]{}[/green]", False),
    _Level.SUGGEST: ("→ ", "[dim]→ {}[/dim]", False),
    _Level.WARNING: ("Warning: ", "[yellow]Warning:[/yellow] {}", True),
    _Level.ERROR: ("Error: ", "[bold red]Error:[/bold red] {}", True),
}


class OutputManager:
    """Resolved output settings and the consoles that honour them.

    Args:
        format: Data format; ``AUTO`` is resolved here, once.
        no_color: Disable colour and Rich markup.
        quiet: Hide info, success and suggestion messages. Warnings and
            errors are always shown.
        verbose: Show debug messages.
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
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
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
        """Render a dict, list or scalar in the resolved format."""
        if self._format == OutputFormat.JSON:
            self.print_data(data if isinstance(data, str) else _to_json(data))
        elif self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
        elif isinstance(data, (dict, list)):
            self._stdout.print(Syntax(_to_json(data), "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(str(data))

    def print_data(self, text: str) -> None:
        """Write one line of raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Render rows under *headers*.

        JSON mode emits an array of objects keyed by header; plain mode emits
        tab-separated lines, header first; Rich mode draws a table with
        *title* above it.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json([dict(zip(headers, row)) for row in rows]))
            return
        if self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        self._emit(_Level.INFO, message)

    def success(self, message: str) -> None:
        self._emit(_Level.SUCCESS, message)

    def suggest(self, message: str) -> None:
        """Print a next step for the user, e.g. the command that fixes a failure."""
        self._emit(_Level.SUGGEST, message)

    def warning(self, message: str) -> None:
        self._emit(_Level.WARNING, message)

    def error(self, message: str) -> None:
        self._emit(_Level.ERROR, message)

    def debug(self, message: str) -> None:
        """Print a trace message. Only shown with ``--verbose``."""
        if self._verbose:
            self._emit(_Level.DEBUG, message)

    def _emit(self, level: _Level, message: str) -> None:
        prefix, template, shown_when_quiet = _LEVELS[level]
        if self._quiet and not shown_when_quiet:
            return
        if self._no_color:
            print(prefix + message, file=sys.stderr, flush=True)
        else:
            self._stderr.print(template.format(message))


# ------------------------------------------------------------------ #
# Rendering helpers
# ------------------------------------------------------------------ #


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _plain_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, list):
        return ",".join(_plain_value(item) for item in value)
    return str(value)


def _flatten(data: dict[str, Any], prefix: str = "") -> Iterator[tuple[str, Any]]:
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            yield from _flatten(value, f"{name}.")
        else:
            yield name, value


def _plain_lines(data: Any) -> Iterator[str]:
    """Yield the plain-text lines for *data*."""
    if isinstance(data, dict):
        for key, value in _flatten(data):
            yield f"{key}\t{_plain_value(value)}"
    elif isinstance(data, list):
        for item in data:
            if isinstance(item, dict):
                yield "\t".join(_plain_value(v) for _, v in _flatten(item))
            else:
                yield _plain_value(item)
    else:
        yield _plain_value(data)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` (any value) or ``TERM=dumb`` turns colour off."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Process-wide manager
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Drop the installed manager. Tests call this between cases."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
