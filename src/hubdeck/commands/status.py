"""Status commands -- verify profiles against the remote API.

``hubdeck status`` initialises the store the way the desktop client does at
startup: it loads and migrates the persisted profiles, verifies the first
one, and applies its theme. ``--index`` then switches to another profile.

``hubdeck users`` verifies every profile in turn and lists who each token
belongs to.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import typer

from hubdeck.commands import abort, get_store
from hubdeck.exceptions import HubdeckError
from hubdeck.output import format_response, print_table, suggest
from hubdeck.profiles.store import InitResult, ProfileStore


def _report_init_failure(result: InitResult) -> None:
    if result.is_not_found_error:
        suggest("Add a profile: hubdeck profiles add --token env:GITHUB_TOKEN")
    elif result.is_scope_error:
        suggest(
            f"Create a token with the repo, user, notifications and read:org scopes at {result.web_url}"
        )
    elif result.is_network_error:
        suggest(f"Check that {result.web_url} is reachable and the token is valid")


async def _init_and_switch(store: ProfileStore, index: Optional[int]) -> Optional[HubdeckError]:
    result = await store.init()
    if not result.ok:
        _report_init_failure(result)
        return result.error

    if index is not None and index != store.get_index():
        switched = await store.switch_profile(index)
        if not switched.ok:
            return switched.error
    return None


def status_command(
    ctx: typer.Context,
    index: Optional[int] = typer.Option(
        None, "--index", "-i", help="Switch to this profile after startup."
    ),
) -> None:
    """Verify the active profile and show who it belongs to.

    Example::

        hubdeck status
        hubdeck status --index 1 --json
    """
    store = get_store(ctx)
    err = asyncio.run(_init_and_switch(store, index))
    if err is not None:
        abort(err)

    profile = store.get_active_profile()
    identity = store.get_identity()
    assert profile is not None and identity is not None

    data: dict[str, Any] = {
        "index": store.get_index(),
        "host": profile.connection.host,
        "web_host": profile.connection.web_host,
        "login": identity.user.login,
        "name": identity.user.name,
        "scopes": identity.header.scopes,
        "theme": store.get_theme_name().value,
    }
    if store.get_server_version():
        data["server_version"] = store.get_server_version()
    format_response(data)


def users_command(ctx: typer.Context) -> None:
    """List the user behind every profile, verifying each one in order.

    Example::

        hubdeck users
    """
    store = get_store(ctx)

    async def _run():
        loaded = await store.load()
        if not loaded.ok:
            _report_init_failure(loaded)
            return loaded.error, None
        result = await store.get_users()
        return result.error, result

    err, result = asyncio.run(_run())
    if err is not None:
        abort(err)

    rows = []
    for i, (profile, user) in enumerate(zip(store.get_profiles(), result.users)):
        rows.append([str(i), profile.connection.host or "", user.login, user.name or ""])
    print_table(["#", "host", "login", "name"], rows, title="Users")
