"""Built-in CLI commands for hubdeck.

Sub-modules:
    status: ``hubdeck status`` and ``hubdeck users`` -- credential verification.
    profiles: ``hubdeck profiles`` -- list, show, add, set and delete profiles.
    config: ``hubdeck config`` -- view and modify the app configuration.

Commands receive the process's :class:`~hubdeck.profiles.store.ProfileStore`
through ``ctx.obj`` (see :func:`hubdeck.app.main_callback`) and drive its
async operations with :func:`asyncio.run`.
"""

from __future__ import annotations

from typing import Any, NoReturn

import typer

from hubdeck.exceptions import HubdeckError, InvalidUsageError
from hubdeck.output import error
from hubdeck.profiles.store import ProfileStore

_TRUE_WORDS = ("true", "1", "yes", "on")


def get_store(ctx: typer.Context) -> ProfileStore:
    """Return the store built by the root callback."""
    return ctx.obj["store"]


def is_forced(ctx: typer.Context) -> bool:
    """Whether the global ``--force`` flag was passed."""
    return bool(ctx.obj and ctx.obj.get("force", False))


def abort(exc: HubdeckError) -> NoReturn:
    """Report *exc* on stderr and exit with its exit code."""
    error(str(exc))
    raise typer.Exit(code=exc.exit_code)


def assign_dotted(data: dict[str, Any], key: str, value: str) -> Any:
    """Set the dot-notation *key* of a dumped model to *value*, in place.

    *value* is coerced to the type of the value it replaces: booleans accept
    ``true/1/yes/on``, numbers are parsed, anything else is kept as text and
    left for model validation.

    Returns:
        The coerced value.

    Raises:
        typer.Exit: With the invalid-usage code if *key* does not name an
            existing field or *value* is not a number where one is expected.
    """
    *parents, leaf = key.split(".")
    target = data
    for part in parents:
        target = target.get(part)
        if not isinstance(target, dict):
            abort(InvalidUsageError(f"Invalid key: {key}"))
    if leaf not in target or isinstance(target[leaf], dict):
        abort(InvalidUsageError(f"Unknown key: {key}"))

    current = target[leaf]
    if isinstance(current, bool):
        coerced: Any = value.strip().lower() in _TRUE_WORDS
    elif isinstance(current, (int, float)):
        try:
            coerced = type(current)(value)
        except ValueError:
            abort(InvalidUsageError(f"Expected a number for {key}, got: {value}"))
    else:
        coerced = value

    target[leaf] = coerced
    return coerced
