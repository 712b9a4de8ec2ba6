"""Config commands -- the settings shared by every profile.

``hubdeck config`` reads and edits :class:`~hubdeck.models.AppConfig`:
the output format, the timeout and TLS settings the identity verifier uses,
and the dark-mode state reported to the profile store. Profile-specific
settings are edited with ``hubdeck profiles set`` instead.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError as PydanticValidationError

from hubdeck.commands import assign_dotted, is_forced
from hubdeck.config import (
    get_config_dir,
    get_data_dir,
    get_profiles_path,
    load_app_config,
    save_app_config,
)
from hubdeck.exit_codes import EXIT_INVALID_USAGE
from hubdeck.models import AppConfig
from hubdeck.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    ctx: typer.Context,
    saved: bool = typer.Option(
        False, "--saved", help="Show the config file instead of the effective settings."
    ),
) -> None:
    """Show the configuration in effect for this invocation.

    Environment variables and global flags are already applied; pass
    ``--saved`` to see only what the config file holds.

    Example::

        hubdeck --dark config show
        hubdeck config show --saved --json
    """
    config = load_app_config() if saved else ctx.obj["config"]
    format_response(config.model_dump(mode="json"))


@config_app.command("path")
def config_path() -> None:
    """Show where hubdeck keeps its files."""
    format_response(
        {
            "config": str(get_config_dir()),
            "profiles": str(get_profiles_path()),
            "data": str(get_data_dir()),
        }
    )


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key (dot notation, e.g. 'request.timeout')."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Change one saved setting.

    Raises:
        typer.Exit: With the invalid-usage code for an unknown key or a
            value the config model rejects. Nothing is saved in that case.

    Example::

        hubdeck config set output.format plain
        hubdeck config set request.verify_ssl false
        hubdeck config set dark_mode true
    """
    data = load_app_config().model_dump(mode="json")
    coerced = assign_dotted(data, key, value)

    try:
        updated = AppConfig.model_validate(data)
    except PydanticValidationError as exc:
        for problem in exc.errors():
            error(f"{key}: {problem['msg']}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_app_config(updated)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Restore the default settings. Profiles are not touched.

    Asks for confirmation unless ``--force`` is active.
    """
    if not is_forced(ctx) and not typer.confirm("Reset hubdeck settings to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_app_config(AppConfig())
    success("Settings reset to defaults. Profiles were left as they are.")
