"""Canonical Pydantic models shared across all hubdeck modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Profile models** -- serialised as a JSON array in ``profiles.json``:
    :class:`ConnectionSettings`, :class:`StyleSettings`,
    :class:`BehaviorSettings`, :class:`StorageSettings` and :class:`Profile`.

**Identity models** -- derived from the remote API, never persisted:
    :class:`RemoteUser`, :class:`IdentityHeader` and :class:`Identity`.

**Application config** -- serialised as ``config.json``:
    :class:`OutputConfig`, :class:`RequestConfig` and :class:`AppConfig`.

Profile models only check field *types*. The structural rules a profile must
satisfy before the store accepts it live in
:mod:`hubdeck.profiles.validator`, and fields that older versions did not
write are filled in by :mod:`hubdeck.profiles.migrations` before a record is
ever validated against these models. Profile models use ``extra="allow"`` so
that keys written by newer versions survive a load/save cycle.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_HOST = "api.github.com"
"""API host of the public service. The only host that takes no path prefix."""

DEFAULT_WEB_HOST = "github.com"
"""Web-facing host paired with :data:`DEFAULT_HOST`."""


class ThemeMode(str, enum.Enum):
    """Known values of ``behavior.style.theme_mode``.

    The stored field is free text; :func:`~hubdeck.theme.resolve_theme` treats
    anything other than ``system`` and ``light`` as dark.
    """

    SYSTEM = "system"
    LIGHT = "light"
    DARK = "dark"


class ThemeName(str, enum.Enum):
    """Effective theme applied to the display, resolved from :class:`ThemeMode`."""

    LIGHT = "light"
    DARK = "dark"


# --- Profile ---


class ConnectionSettings(BaseModel):
    """How to reach the API and authenticate against it.

    For the public service ``host`` is ``api.github.com``, ``path_prefix`` is
    empty and ``web_host`` is ``github.com``. Enterprise hosts need a path
    prefix such as ``/api/v3/`` and their own web host.

    Example::

        ConnectionSettings(
            host="ghe.example.com",
            path_prefix="/api/v3/",
            web_host="ghe.example.com",
            token="0123abcd",
        )
    """

    model_config = ConfigDict(extra="allow")

    host: Optional[str] = Field(default=None, description="API host name")
    path_prefix: Optional[str] = Field(
        default="", description="API path prefix, empty for the public host"
    )
    web_host: Optional[str] = Field(
        default=None, description="Host serving the web UI"
    )
    token: Optional[str] = Field(default=None, description="Personal access token")
    https: bool = Field(default=True, description="Use TLS for API calls")
    interval: Optional[int] = Field(
        default=None, description="Polling interval in seconds"
    )


class StyleSettings(BaseModel):
    """Display style preferences."""

    model_config = ConfigDict(extra="allow")

    theme_mode: str = Field(
        default=ThemeMode.SYSTEM.value,
        description="system, light or dark; any other value displays as dark",
    )


class BehaviorSettings(BaseModel):
    """Per-profile client behavior.

    ``badge``, ``notification_sync`` and ``style`` have no defaults here: they
    were introduced after the first release and are injected into old records
    by the migrator, so a record that reaches this model without them was
    never migrated.
    """

    model_config = ConfigDict(extra="allow")

    browser: Optional[str] = Field(
        default=None, description="Browser used to open issues: builtin or external"
    )
    notification: bool = True
    notification_silent: bool = False
    only_unread_issue: bool = False
    badge: bool
    always_open_external_url_in_external_browser: bool = True
    notification_sync: bool
    style: StyleSettings


class StorageSettings(BaseModel):
    """Location and size bound of the profile's local data file."""

    model_config = ConfigDict(extra="allow")

    path: Optional[str] = Field(
        default="", description="Data file path relative to the data dir"
    )
    max: Optional[int] = Field(default=None, description="Maximum number of stored records")


class Profile(BaseModel):
    """One complete, independently switchable configuration.

    Profiles are kept by :class:`~hubdeck.profiles.store.ProfileStore` in
    insertion order; the position of a profile in that list is its index.

    See Also:
        :func:`~hubdeck.profiles.validator.is_valid_profile`: Rules applied
            before a profile is accepted.
        :func:`~hubdeck.profiles.template.new_profile`: How new profiles are
            created.
    """

    model_config = ConfigDict(extra="allow")

    connection: ConnectionSettings
    behavior: BehaviorSettings
    storage: StorageSettings


# --- Identity ---


class RemoteUser(BaseModel):
    """The authenticated user as returned by ``GET /user``.

    Only the fields hubdeck displays are declared; everything else the API
    returns is kept in ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")

    login: str
    id: int
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None


class IdentityHeader(BaseModel):
    """Descriptor derived from the response headers of ``GET /user``."""

    scopes: list[str] = Field(default_factory=list)
    server_version: Optional[str] = Field(
        default=None, description="Enterprise server version, None for the public host"
    )


class Identity(BaseModel):
    """Result of a successful credential verification."""

    user: RemoteUser
    header: IdentityHeader


# --- Application config ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`AppConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class RequestConfig(BaseModel):
    """HTTP settings used for identity verification."""

    timeout: float = Field(default=10.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")


class AppConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/hubdeck/config.json``.

    Loaded and saved by :func:`~hubdeck.config.load_app_config` and
    :func:`~hubdeck.config.save_app_config`. Environment variables and CLI
    flags override it; see :func:`~hubdeck.config.resolve_config`.
    """

    output: OutputConfig = Field(default_factory=OutputConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)
    dark_mode: Optional[bool] = Field(
        default=None,
        description="System dark-mode state reported to the store; None means light",
    )
