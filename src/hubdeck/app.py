"""Typer application, composition root and CLI entry point for hubdeck.

The root callback resolves the effective :class:`~hubdeck.models.AppConfig`,
installs the :class:`~hubdeck.output.OutputManager`, and builds the single
:class:`~hubdeck.profiles.store.ProfileStore` for this process with
:func:`create_store`. The store and its platform are handed to sub-commands
through ``ctx.obj``; nothing holds the store globally.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under the
data directory.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from hubdeck import __version__
from hubdeck.exit_codes import EXIT_GENERIC_FAILURE
from hubdeck.identity.verifier import IdentityVerifier
from hubdeck.models import AppConfig
from hubdeck.platform import CliPlatform
from hubdeck.profiles.persistence import FilePersistence
from hubdeck.profiles.store import ProfileStore


app = typer.Typer(
    name="hubdeck",
    help="Manage and verify GitHub connection profiles.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def create_store(config: AppConfig) -> tuple[ProfileStore, CliPlatform]:
    """Build the profile store and its platform for one CLI invocation."""
    platform = CliPlatform(dark_mode=config.dark_mode)
    store = ProfileStore(
        persistence=FilePersistence(),
        verifier=IdentityVerifier(request=config.request),
        platform=platform,
    )
    return store, platform


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"hubdeck {__version__}")
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
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    dark_mode: Optional[bool] = typer.Option(
        None, "--dark/--light", help="Report the system as dark or light."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmations."),
) -> None:
    """Root callback executed before every sub-command.

    Resolves configuration, installs the global output manager and stores the
    profile store, its platform and the shared flags in ``ctx.obj``.

    Raises:
        typer.Exit: With the error's exit code if the config is invalid.
    """
    from hubdeck.config import resolve_config
    from hubdeck.exceptions import ConfigError
    from hubdeck.output import OutputFormat, OutputManager, error, set_output, warning

    fmt: Optional[str] = None
    if json_output:
        fmt = OutputFormat.JSON.value
    elif plain_output:
        fmt = OutputFormat.PLAIN.value

    try:
        config = resolve_config(cli_format=fmt, cli_dark_mode=dark_mode)
    except ConfigError as exc:
        set_output(OutputManager(no_color=no_color))
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    unknown_format: Optional[str] = None
    try:
        output_format = OutputFormat(config.output.format)
    except ValueError:
        unknown_format = config.output.format
        output_format = OutputFormat.AUTO

    set_output(
        OutputManager(
            format=output_format,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
        )
    )
    if unknown_format is not None:
        warning(f"Unknown output format '{unknown_format}' in config; using auto.")

    store, platform = create_store(config)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["store"] = store
    ctx.obj["platform"] = platform
    ctx.obj["force"] = force


from hubdeck.commands.config import config_app  # noqa: E402
from hubdeck.commands.profiles import profiles_app  # noqa: E402
from hubdeck.commands.status import status_command, users_command  # noqa: E402

app.command("status")(status_command)
app.command("users")(users_command)
app.add_typer(profiles_app, name="profiles", help="Create, edit and delete profiles.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from hubdeck.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``hubdeck`` console script.

    :class:`~hubdeck.exceptions.HubdeckError` instances escaping a command
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from hubdeck.exceptions import HubdeckError
        from hubdeck.output import error

        if isinstance(exc, HubdeckError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
