"""Profile commands -- create, inspect, edit and delete profiles.

Provides the ``hubdeck profiles`` sub-command group. Every command loads the
persisted list through the store first, so records written by older versions
are migrated before they are shown or changed.

``set`` and ``delete`` act on the active profile, which is the first one
after loading. Passing ``--index`` switches to another profile first; like
the desktop client, switching verifies that profile's token, so it needs
network access.

Typical workflow::

    hubdeck profiles add --token env:GITHUB_TOKEN
    hubdeck profiles add --host ghe.example.com --path-prefix /api/v3/ --token prompt
    hubdeck profiles list
    hubdeck profiles set behavior.style.theme_mode dark
    hubdeck profiles delete --index 1
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from pydantic import ValidationError as PydanticValidationError

from hubdeck.commands import abort, assign_dotted, get_store, is_forced
from hubdeck.exceptions import ValidationError
from hubdeck.models import DEFAULT_HOST, DEFAULT_WEB_HOST, ConnectionSettings, Profile
from hubdeck.output import error, format_response, info, print_table, success, suggest
from hubdeck.profiles.store import ProfileStore
from hubdeck.profiles.validator import connection_errors, profile_errors


profiles_app = typer.Typer(no_args_is_help=True)


def _mask(token: Optional[str]) -> str:
    if not token:
        return ""
    return "****" + token[-4:]


async def _load(store: ProfileStore, allow_empty: bool = False) -> None:
    """Load the store's profiles, exiting on failure.

    With *allow_empty*, a missing or empty profile list is not an error.
    """
    result = await store.load()
    if result.ok or (allow_empty and result.is_not_found_error):
        return
    if result.is_not_found_error:
        suggest("Add a profile: hubdeck profiles add --token env:GITHUB_TOKEN")
    abort(result.error)


async def _select(store: ProfileStore, index: Optional[int]) -> None:
    """Load the profiles and make *index* active, exiting on failure."""
    await _load(store)
    if index is None or index == store.get_index():
        return
    result = await store.switch_profile(index)
    if not result.ok:
        abort(result.error)


@profiles_app.command("list")
def profiles_list(ctx: typer.Context) -> None:
    """List all profiles in order.

    Example::

        hubdeck profiles list
        hubdeck profiles list --json
    """
    store = get_store(ctx)
    asyncio.run(_load(store, allow_empty=True))

    profiles = store.get_profiles()
    if not profiles:
        info("No profiles configured.")
        suggest("Add one: hubdeck profiles add --token env:GITHUB_TOKEN")
        return

    rows = [
        [
            str(i),
            p.connection.host or "",
            p.connection.web_host or "",
            p.behavior.style.theme_mode,
            p.storage.path or "",
        ]
        for i, p in enumerate(profiles)
    ]
    print_table(["#", "host", "web host", "theme", "storage"], rows, title="Profiles")


@profiles_app.command("show")
def profiles_show(
    ctx: typer.Context,
    index: int = typer.Option(0, "--index", "-i", help="Profile index."),
) -> None:
    """Show one profile. The token is masked.

    Example::

        hubdeck profiles show --index 1
    """
    store = get_store(ctx)
    asyncio.run(_load(store))

    profiles = store.get_profiles()
    if not 0 <= index < len(profiles):
        error(f"Profile index {index} is out of range (0-{len(profiles) - 1}).")
        raise typer.Exit(code=2)

    data = profiles[index].model_dump(mode="json")
    data["connection"]["token"] = _mask(profiles[index].connection.token)
    format_response(data)


@profiles_app.command("add")
def profiles_add(
    ctx: typer.Context,
    token: str = typer.Option(
        "prompt",
        "--token",
        "-t",
        help="Token source: env:VAR, file:/path, prompt, or the token itself.",
    ),
    host: str = typer.Option(DEFAULT_HOST, "--host", help="API host."),
    path_prefix: str = typer.Option(
        "", "--path-prefix", help="API path prefix, e.g. /api/v3/ for enterprise hosts."
    ),
    web_host: Optional[str] = typer.Option(
        None, "--web-host", help="Web host. Defaults to github.com or the API host."
    ),
    https: bool = typer.Option(True, "--https/--no-https", help="Use TLS."),
    interval: int = typer.Option(10, "--interval", help="Polling interval in seconds."),
    browser: str = typer.Option("builtin", "--browser", help="builtin or external."),
) -> None:
    """Add a profile built from the default template.

    Raises:
        typer.Exit: With the validation exit code if the connection is invalid.

    Example::

        hubdeck profiles add --token env:GITHUB_TOKEN
    """
    from hubdeck.config import resolve_credential
    from hubdeck.exceptions import ConfigError

    try:
        token_value = resolve_credential(token)
    except ConfigError as exc:
        abort(exc)

    if web_host is None:
        web_host = DEFAULT_WEB_HOST if host == DEFAULT_HOST else host

    connection = ConnectionSettings(
        host=host,
        path_prefix=path_prefix,
        web_host=web_host,
        token=token_value,
        https=https,
        interval=interval,
    )

    store = get_store(ctx)

    async def _run() -> bool:
        await _load(store, allow_empty=True)
        return await store.add_profile(connection, browser)

    if not asyncio.run(_run()):
        for problem in connection_errors(connection):
            error(problem)
        raise typer.Exit(code=ValidationError.exit_code)

    success(f"Added profile #{len(store.get_profiles()) - 1} for {host}.")
    suggest("Verify it: hubdeck status")


@profiles_app.command("set")
def profiles_set(
    ctx: typer.Context,
    key: str = typer.Argument(
        help="Profile key (dot notation, e.g. 'behavior.style.theme_mode')."
    ),
    value: str = typer.Argument(help="Value to set."),
    index: Optional[int] = typer.Option(
        None, "--index", "-i", help="Switch to this profile first (verifies it)."
    ),
) -> None:
    """Change one field of the active profile.

    The value is coerced to the current field's type. ``connection.token``
    accepts the same sources as ``profiles add --token``. The whole profile is
    validated before anything is written.

    Example::

        hubdeck profiles set connection.interval 60
        hubdeck profiles set storage.max 20000 --index 1
    """
    store = get_store(ctx)
    asyncio.run(_select(store, index))

    profile = store.get_active_profile()
    assert profile is not None

    is_token = key == "connection.token"
    if is_token:
        from hubdeck.config import resolve_credential
        from hubdeck.exceptions import ConfigError

        try:
            value = resolve_credential(value)
        except ConfigError as exc:
            abort(exc)

    data = profile.model_dump(mode="json")
    coerced = assign_dotted(data, key, value)

    try:
        updated = Profile.model_validate(data)
    except PydanticValidationError as exc:
        for problem in exc.errors():
            error(f"{key}: {problem['msg']}")
        raise typer.Exit(code=2) from None

    if not asyncio.run(store.update_profile(updated)):
        for problem in profile_errors(updated):
            error(problem)
        raise typer.Exit(code=ValidationError.exit_code)

    success(f"Set {key} = {_mask(value) if is_token else coerced}")


@profiles_app.command("delete")
def profiles_delete(
    ctx: typer.Context,
    index: Optional[int] = typer.Option(
        None, "--index", "-i", help="Switch to this profile first (verifies it)."
    ),
) -> None:
    """Delete the active profile and its local data file.

    Asks for confirmation unless ``--force`` is active.

    Example::

        hubdeck --force profiles delete --index 1
    """
    store = get_store(ctx)
    asyncio.run(_select(store, index))

    profile = store.get_active_profile()
    assert profile is not None
    prompt = f"Delete profile #{store.get_index()} ({profile.connection.host}) and its data?"
    if not is_forced(ctx) and not typer.confirm(prompt):
        info("Cancelled.")
        raise typer.Exit()

    if not asyncio.run(store.delete_profile()):
        raise typer.Exit(code=1)

    success(f"Deleted profile for {profile.connection.host}.")
    platform = ctx.obj.get("platform")
    if platform is not None and platform.restart_requested:
        suggest("Restart any running hubdeck session to pick up the change.")
