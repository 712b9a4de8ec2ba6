"""Shared test fixtures for hubdeck.

Provides in-memory collaborators for the profile store, an ``httpx``
mock-transport verifier, record builders, XDG config isolation and output
state management. These fixtures are discovered by pytest automatically.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from hubdeck.identity.client import UserClient
from hubdeck.identity.verifier import IdentityVerifier
from hubdeck.models import ThemeName
from hubdeck.output import OutputFormat, OutputManager, reset_output, set_output
from hubdeck.profiles.store import ProfileStore
from hubdeck.theme import reset_app_theme_name

ALL_SCOPES = "repo, user, notifications, read:org"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_global_state() -> None:
    """Reset the global OutputManager and applied theme after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; when CliRunner redirects those streams the cached
    references go stale once the test ends.
    """
    yield
    reset_output()
    reset_app_theme_name()


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, plain-format output manager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG config and data directories into tmp_path.

    Clears HUBDECK_* environment variables so tests never see the real
    user's settings.
    """
    monkeypatch.setattr("hubdeck.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["HUBDECK_DARK_MODE", "HUBDECK_TIMEOUT", "NO_COLOR"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Profile records
# ---------------------------------------------------------------------------


def _record(**overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "connection": {
            "host": "api.github.com",
            "path_prefix": "",
            "web_host": "github.com",
            "token": "abc123",
            "https": True,
            "interval": 10,
        },
        "behavior": {
            "browser": "builtin",
            "notification": True,
            "notification_silent": False,
            "only_unread_issue": False,
            "badge": True,
            "always_open_external_url_in_external_browser": True,
            "notification_sync": True,
            "style": {"theme_mode": "system"},
        },
        "storage": {"path": "./main.db", "max": 10000},
    }
    for dotted, value in overrides.items():
        group, key = dotted.split("__", 1)
        record[group][key] = value
    return record


@pytest.fixture
def profile_record() -> Callable[..., dict[str, Any]]:
    """Factory for current-schema profile records.

    Overrides use ``group__field`` keywords, e.g.
    ``profile_record(connection__token="zzz", storage__path="./b.db")``.
    """
    return _record


@pytest.fixture
def enterprise_record() -> dict[str, Any]:
    return _record(
        connection__host="ghe.example.com",
        connection__path_prefix="/api/v3/",
        connection__web_host="ghe.example.com",
        connection__token="ghe456",
        storage__path="./main-1700000000000.db",
    )


# ---------------------------------------------------------------------------
# Remote API
# ---------------------------------------------------------------------------


def _user_handler(
    scopes: str = ALL_SCOPES,
    status: int = 200,
    body: Any = None,
    server_version: Optional[str] = None,
    calls: Optional[list[httpx.Request]] = None,
) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        headers = {"X-OAuth-Scopes": scopes}
        if server_version is not None:
            headers["X-GitHub-Enterprise-Version"] = server_version
        payload = body if body is not None else {"login": "octocat", "id": 1, "name": "The Octocat"}
        return httpx.Response(status, json=payload, headers=headers)

    return handler


@pytest.fixture
def user_handler() -> Callable[..., Callable[[httpx.Request], httpx.Response]]:
    """Factory for ``GET /user`` mock handlers."""
    return _user_handler


def make_verifier(handler: Callable[[httpx.Request], httpx.Response]) -> IdentityVerifier:
    transport = httpx.MockTransport(handler)
    return IdentityVerifier(client_factory=lambda c: UserClient(c, transport=transport))


# ---------------------------------------------------------------------------
# Store collaborators
# ---------------------------------------------------------------------------


class MemoryPersistence:
    """In-memory persistence that records every call."""

    def __init__(self, text: Optional[str] = None) -> None:
        self.text = text
        self.reads = 0
        self.writes: list[str] = []
        self.deleted: list[str] = []

    async def read(self) -> Optional[str]:
        self.reads += 1
        return self.text

    async def write(self, text: str) -> None:
        self.writes.append(text)
        self.text = text

    async def delete_relative_file(self, path: str) -> None:
        self.deleted.append(path)

    async def absolute_path(self, relative_path: str) -> Path:
        return (Path("/data") / relative_path).resolve()

    def records(self) -> list[dict[str, Any]]:
        return json.loads(self.text or "[]")


class RecordingPlatform:
    def __init__(self, dark: bool = False) -> None:
        self.dark = dark
        self.dark_queries = 0
        self.themes: list[ThemeName] = []
        self.restarts = 0

    def is_system_dark_mode(self) -> bool:
        self.dark_queries += 1
        return self.dark

    def apply_theme(self, name: ThemeName) -> None:
        self.themes.append(name)

    def restart(self) -> None:
        self.restarts += 1


@dataclass
class StoreKit:
    store: ProfileStore
    persistence: MemoryPersistence
    platform: RecordingPlatform
    requests: list[httpx.Request]


@pytest.fixture
def make_store(quiet_output: OutputManager) -> Callable[..., StoreKit]:
    """Build a store over in-memory persistence and a mock ``GET /user``.

    Args (of the returned factory):
        records: Profile records to persist, or ``None`` for no data.
        dark: Whether the platform reports dark mode.
        **handler_kwargs: Forwarded to the ``user_handler`` factory.
    """

    def _make(
        records: Optional[list[dict[str, Any]]] = None,
        dark: bool = False,
        **handler_kwargs: Any,
    ) -> StoreKit:
        requests: list[httpx.Request] = []
        text = None if records is None else json.dumps(records, indent=2)
        persistence = MemoryPersistence(text)
        platform = RecordingPlatform(dark=dark)
        verifier = make_verifier(_user_handler(calls=requests, **handler_kwargs))
        store = ProfileStore(persistence, verifier, platform)
        return StoreKit(store, persistence, platform, requests)

    return _make


# ---------------------------------------------------------------------------
# CLI runner
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
