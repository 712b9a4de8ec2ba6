"""Default profile template and the constructor used when adding a profile."""

from __future__ import annotations

import time
from collections.abc import Iterable
from typing import Optional

from hubdeck.models import (
    BehaviorSettings,
    ConnectionSettings,
    Profile,
    StorageSettings,
    StyleSettings,
    ThemeMode,
)

FIRST_STORAGE_PATH = "./main.db"

TEMPLATE_PROFILE = Profile(
    connection=ConnectionSettings(
        host=None,
        path_prefix="",
        web_host=None,
        token=None,
        https=True,
        interval=10,
    ),
    behavior=BehaviorSettings(
        browser=None,
        notification=True,
        notification_silent=False,
        only_unread_issue=False,
        badge=True,
        always_open_external_url_in_external_browser=True,
        notification_sync=True,
        style=StyleSettings(theme_mode=ThemeMode.SYSTEM.value),
    ),
    storage=StorageSettings(path=FIRST_STORAGE_PATH, max=10000),
)


def template_profile() -> Profile:
    """Return an independent copy of :data:`TEMPLATE_PROFILE`."""
    return TEMPLATE_PROFILE.model_copy(deep=True)


def storage_path_for(
    existing_paths: Iterable[Optional[str]],
    now_ms: Optional[int] = None,
) -> str:
    """Choose the data file path for a new profile.

    The first profile gets ``./main.db``. Every later one is suffixed with
    the creation time in epoch milliseconds, bumped until it differs from
    every path in *existing_paths*.

    Args:
        existing_paths: Storage paths of the profiles already in the store.
        now_ms: Creation time; defaults to the current time.
    """
    taken = set(existing_paths)
    if not taken:
        return FIRST_STORAGE_PATH

    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    path = f"./main-{stamp}.db"
    while path in taken:
        stamp += 1
        path = f"./main-{stamp}.db"
    return path


def new_profile(
    connection: ConnectionSettings,
    browser: Optional[str],
    storage_path: str,
) -> Profile:
    """Build a profile from the template with the given connection and browser."""
    profile = template_profile()
    profile.connection = connection.model_copy(deep=True)
    profile.behavior.browser = browser
    profile.storage.path = storage_path
    return profile
