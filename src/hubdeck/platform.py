"""Platform collaborators used by the profile store.

The store needs three things from its host environment: whether the system is
in dark mode, a way to apply the effective theme, and a way to request an
application restart after a profile is deleted. They are described by the
:class:`Platform` protocol so the store can be driven by a desktop shell, the
CLI, or a test double.

:class:`CliPlatform` is the implementation used by the ``hubdeck`` command:
the dark-mode state comes from the resolved :class:`~hubdeck.models.AppConfig`
and a restart request is recorded for the command to report, since a one-shot
CLI process ends on its own.
"""

from __future__ import annotations

from typing import Optional, Protocol

from hubdeck.models import ThemeName
from hubdeck.output import debug
from hubdeck.theme import set_app_theme_name


class Platform(Protocol):
    """Host environment hooks consumed by :class:`~hubdeck.profiles.store.ProfileStore`."""

    def is_system_dark_mode(self) -> bool:
        """Return whether the system UI is currently in dark mode."""
        ...

    def apply_theme(self, name: ThemeName) -> None:
        """Apply *name* as the process-wide display theme."""
        ...

    def restart(self) -> None:
        """Terminate and relaunch the application."""
        ...


class CliPlatform:
    """:class:`Platform` implementation for the command line.

    Args:
        dark_mode: Reported dark-mode state. ``None`` is treated as light.
    """

    def __init__(self, dark_mode: Optional[bool] = None) -> None:
        self._dark_mode = bool(dark_mode)
        self._restart_requested = False

    @property
    def restart_requested(self) -> bool:
        """Whether :meth:`restart` has been called during this process."""
        return self._restart_requested

    def is_system_dark_mode(self) -> bool:
        return self._dark_mode

    def apply_theme(self, name: ThemeName) -> None:
        debug(f"Applying theme: {name.value}")
        set_app_theme_name(name)

    def restart(self) -> None:
        debug("Restart requested")
        self._restart_requested = True
