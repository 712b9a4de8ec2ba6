"""Structural rules a profile must satisfy before the store accepts it.

Every check is a pure function of its argument. The ``*_errors`` functions
return human-readable descriptions of each broken rule (empty when the input
is valid) so the CLI can explain a rejection; the ``is_valid_*`` predicates
are what the store uses. Nothing here raises.

Connection rules:

* ``host`` is non-empty.
* ``path_prefix`` is empty for ``api.github.com`` and non-empty for any
  other host.
* ``token`` is non-empty lowercase alphanumeric.
* ``web_host`` is non-empty, and exactly ``github.com`` for
  ``api.github.com``.
* ``interval`` is set and at least :data:`MIN_INTERVAL` seconds.

Storage rules:

* ``path`` is non-empty.
* ``max`` is set and within [:data:`MIN_RECORDS`, :data:`MAX_RECORDS`].
"""

from __future__ import annotations

import re

from hubdeck.models import (
    DEFAULT_HOST,
    DEFAULT_WEB_HOST,
    ConnectionSettings,
    Profile,
    StorageSettings,
)

MIN_INTERVAL = 10
MIN_RECORDS = 1000
MAX_RECORDS = 100000

_TOKEN_RE = re.compile(r"[0-9a-z]+")


def connection_errors(connection: ConnectionSettings) -> list[str]:
    """Return the connection rules *connection* breaks."""
    errors: list[str] = []
    is_default_host = connection.host == DEFAULT_HOST

    if not connection.host:
        errors.append("host is required")
    if not is_default_host and not connection.path_prefix:
        errors.append("path_prefix is required for hosts other than " + DEFAULT_HOST)
    if is_default_host and connection.path_prefix:
        errors.append("path_prefix must be empty for " + DEFAULT_HOST)

    if not connection.token:
        errors.append("token is required")
    elif not _TOKEN_RE.fullmatch(connection.token):
        errors.append("token may only contain lowercase letters and digits")

    if not connection.web_host:
        errors.append("web_host is required")
    elif is_default_host and connection.web_host != DEFAULT_WEB_HOST:
        errors.append(f"web_host must be {DEFAULT_WEB_HOST} for {DEFAULT_HOST}")

    if connection.interval is None:
        errors.append("interval is required")
    elif connection.interval < MIN_INTERVAL:
        errors.append(f"interval must be at least {MIN_INTERVAL} seconds")

    return errors


def storage_errors(storage: StorageSettings) -> list[str]:
    """Return the storage rules *storage* breaks."""
    errors: list[str] = []
    if not storage.path:
        errors.append("storage path is required")
    if storage.max is None:
        errors.append("storage max is required")
    elif not MIN_RECORDS <= storage.max <= MAX_RECORDS:
        errors.append(f"storage max must be between {MIN_RECORDS} and {MAX_RECORDS}")
    return errors


def profile_errors(profile: Profile) -> list[str]:
    """Return every rule *profile* breaks, connection rules first."""
    return connection_errors(profile.connection) + storage_errors(profile.storage)


def is_valid_connection(connection: ConnectionSettings) -> bool:
    return not connection_errors(connection)


def is_valid_storage(storage: StorageSettings) -> bool:
    return not storage_errors(storage)


def is_valid_profile(profile: Profile) -> bool:
    """Return ``True`` when *profile* satisfies every connection and storage rule."""
    return not profile_errors(profile)
