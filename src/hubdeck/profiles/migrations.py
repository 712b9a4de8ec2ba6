"""Upgrade profile records written by older versions.

There is no schema version in the persisted file. Each migration step instead
checks whether a field is *absent* from the raw record and only then injects
its default, which makes every step safe to run on a record of any age and
makes the whole chain idempotent. The chain therefore runs in full on every
load.

Migrations operate on the raw JSON records (dicts) rather than on
:class:`~hubdeck.models.Profile` instances: a typed model fills defaults
during parsing and would hide the absence the steps depend on.

Steps run in list order. A step may rely on an earlier one; both behavior
steps create the ``behavior`` group if it is missing before touching a field
inside it.
"""

from __future__ import annotations

from typing import Any, Callable

Record = dict[str, Any]


def _group(record: Record, name: str) -> Record:
    """Return the nested settings group *name*, creating it when missing."""
    group = record.get(name)
    if not isinstance(group, dict):
        group = {}
        record[name] = group
    return group


# introduced in 0.1.1
def _default_https(record: Record) -> None:
    connection = _group(record, "connection")
    if "https" not in connection:
        connection["https"] = True


# introduced in 0.1.1
def _default_badge(record: Record) -> None:
    behavior = _group(record, "behavior")
    if "badge" not in behavior:
        behavior["badge"] = False


# introduced in 0.10.0
def _default_notification_sync(record: Record) -> None:
    behavior = _group(record, "behavior")
    if "notification_sync" not in behavior:
        behavior["notification_sync"] = True


# introduced in 0.10.0
def _default_style(record: Record) -> None:
    behavior = _group(record, "behavior")
    if "style" not in behavior:
        behavior["style"] = {"theme_mode": "system"}


MIGRATIONS: list[Callable[[Record], None]] = [
    _default_https,
    _default_badge,
    _default_notification_sync,
    _default_style,
]


def migrate_record(record: Record) -> Record:
    """Apply every migration step to *record* in place and return it."""
    for step in MIGRATIONS:
        step(record)
    return record


def migrate(records: list[Record]) -> list[Record]:
    """Apply the full migration chain to every record in place.

    Args:
        records: Raw profile records as decoded from the persisted JSON.

    Returns:
        The same list, with every record normalised.
    """
    for record in records:
        migrate_record(record)
    return records
