"""Effective display theme.

A profile stores a :class:`~hubdeck.models.ThemeMode` preference; the display
uses a concrete :class:`~hubdeck.models.ThemeName`. :func:`resolve_theme`
maps one onto the other, and the process-wide current theme is held here for
the presentation layer to read.
"""

from __future__ import annotations

from typing import Optional

from hubdeck.models import ThemeMode, ThemeName

_current: Optional[ThemeName] = None


def resolve_theme(mode: str, system_dark_mode: bool) -> ThemeName:
    """Resolve a theme preference to the theme that should be displayed.

    ``system`` follows *system_dark_mode*, ``light`` is light, and any other
    value is dark.
    """
    if mode == ThemeMode.SYSTEM:
        return ThemeName.DARK if system_dark_mode else ThemeName.LIGHT
    if mode == ThemeMode.LIGHT:
        return ThemeName.LIGHT
    return ThemeName.DARK


def set_app_theme_name(name: ThemeName) -> None:
    global _current
    _current = name


def get_app_theme_name() -> Optional[ThemeName]:
    """Return the theme last applied to the process, or ``None`` before the first one."""
    return _current


def reset_app_theme_name() -> None:
    """Forget the applied theme. Used by tests."""
    global _current
    _current = None
