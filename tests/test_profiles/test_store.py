"""Tests for hubdeck.profiles.store.ProfileStore."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from hubdeck.exceptions import (
    ConfigError,
    InvalidUsageError,
    NetworkError,
    NotFoundError,
    ScopeError,
)
from hubdeck.models import ConnectionSettings, Profile, ThemeMode, ThemeName
from hubdeck.profiles.store import StorePhase, web_url


def _connection(**overrides) -> ConnectionSettings:
    data = {
        "host": "api.github.com",
        "path_prefix": "",
        "web_host": "github.com",
        "token": "def456",
        "https": True,
        "interval": 30,
    }
    data.update(overrides)
    return ConnectionSettings(**data)


# ---------------------------------------------------------------------------
# init / load
# ---------------------------------------------------------------------------


class TestInit:
    def test_success(self, make_store, profile_record) -> None:
        kit = make_store([profile_record()])

        result = asyncio.run(kit.store.init())

        assert result.ok
        assert kit.store.phase == StorePhase.READY
        assert kit.store.get_index() == 0
        identity = kit.store.get_identity()
        assert identity.user.login == "octocat"
        assert "read:org" in identity.header.scopes
        assert len(kit.requests) == 1

    def test_request_uses_active_connection(self, make_store, enterprise_record) -> None:
        kit = make_store([enterprise_record])
        asyncio.run(kit.store.init())

        request = kit.requests[0]
        assert str(request.url) == "https://ghe.example.com/api/v3/user"
        assert request.headers["Authorization"] == "token ghe456"

    def test_missing_scope(self, make_store, profile_record) -> None:
        kit = make_store([profile_record()], scopes="repo, user, notifications")

        result = asyncio.run(kit.store.init())

        assert not result.ok
        assert isinstance(result.error, ScopeError)
        assert result.is_scope_error and not result.is_network_error
        assert result.web_url == "https://github.com"
        assert kit.store.get_identity() is None
        assert kit.store.phase == StorePhase.LOAD_FAILED

    def test_network_error(self, make_store, enterprise_record) -> None:
        kit = make_store([enterprise_record], status=401, body={"message": "Bad credentials"})

        result = asyncio.run(kit.store.init())

        assert isinstance(result.error, NetworkError)
        assert result.is_network_error
        assert result.web_url == "https://ghe.example.com"
        assert kit.platform.themes == []
        # Profiles stay loaded so the token can be fixed.
        assert len(kit.store.get_profiles()) == 1

    @pytest.mark.parametrize("text", [None, "[]", ""])
    def test_nothing_persisted(self, make_store, text) -> None:
        kit = make_store()
        kit.persistence.text = text

        result = asyncio.run(kit.store.init())

        assert isinstance(result.error, NotFoundError)
        assert result.is_not_found_error
        assert kit.requests == []

    def test_corrupt_json(self, make_store) -> None:
        kit = make_store()
        kit.persistence.text = "{not json"

        result = asyncio.run(kit.store.init())

        assert isinstance(result.error, ConfigError)
        assert kit.store.phase == StorePhase.LOAD_FAILED

    def test_not_a_list(self, make_store) -> None:
        kit = make_store()
        kit.persistence.text = '{"connection": {}}'

        result = asyncio.run(kit.store.init())
        assert isinstance(result.error, ConfigError)

    def test_invalid_record(self, make_store, profile_record) -> None:
        record = profile_record()
        record["storage"]["max"] = "lots"
        kit = make_store([record])

        result = asyncio.run(kit.store.init())
        assert isinstance(result.error, ConfigError)

    def test_migrates_old_records(self, make_store, profile_record) -> None:
        record = profile_record()
        del record["behavior"]["style"]
        del record["connection"]["https"]
        kit = make_store([record])

        assert asyncio.run(kit.store.init()).ok
        profile = kit.store.get_active_profile()
        assert profile.behavior.style.theme_mode == ThemeMode.SYSTEM
        assert profile.connection.https is True
        # Migration alone does not write back.
        assert kit.persistence.writes == []

    def test_load_does_not_verify(self, make_store, profile_record) -> None:
        kit = make_store([profile_record()])

        result = asyncio.run(kit.store.load())

        assert result.ok
        assert kit.requests == []
        assert kit.store.get_identity() is None


class TestTheme:
    @pytest.mark.parametrize(
        ("mode", "dark", "expected"),
        [
            ("system", True, ThemeName.DARK),
            ("system", False, ThemeName.LIGHT),
            ("light", True, ThemeName.LIGHT),
            ("dark", False, ThemeName.DARK),
            ("solarized", False, ThemeName.DARK),
        ],
    )
    def test_applied_on_init(self, make_store, profile_record, mode, dark, expected) -> None:
        kit = make_store([profile_record(behavior__style={"theme_mode": mode})], dark=dark)

        asyncio.run(kit.store.init())

        assert kit.platform.themes == [expected]
        assert kit.store.get_theme_name() == expected

    def test_unknown_mode_kept_as_stored(self, make_store, profile_record) -> None:
        kit = make_store([profile_record(behavior__style={"theme_mode": "solarized"})])

        result = asyncio.run(kit.store.init())

        assert result.ok
        assert kit.store.get_active_profile().behavior.style.theme_mode == "solarized"
        assert kit.platform.themes == [ThemeName.DARK]

    def test_reapplied_on_update(self, make_store, profile_record) -> None:
        kit = make_store([profile_record()], dark=True)
        asyncio.run(kit.store.init())

        profile = kit.store.get_active_profile()
        profile.behavior.style.theme_mode = ThemeMode.LIGHT.value
        assert asyncio.run(kit.store.update_profile(profile))

        assert kit.platform.themes == [ThemeName.DARK, ThemeName.LIGHT]
        assert kit.platform.dark_queries == 2


# ---------------------------------------------------------------------------
# switch
# ---------------------------------------------------------------------------


class TestSwitch:
    def test_switch_verifies_new_profile(
        self, make_store, profile_record, enterprise_record
    ) -> None:
        kit = make_store([profile_record(), enterprise_record], server_version="3.12.0")
        asyncio.run(kit.store.init())

        result = asyncio.run(kit.store.switch_profile(1))

        assert result.ok
        assert kit.store.get_index() == 1
        assert kit.store.get_server_version() == "3.12.0"
        assert len(kit.requests) == 2

    def test_failure_keeps_new_index(self, make_store, profile_record, enterprise_record) -> None:
        kit = make_store([profile_record(), enterprise_record], scopes="repo")
        asyncio.run(kit.store.init())

        result = asyncio.run(kit.store.switch_profile(1))

        assert result.is_scope_error
        assert kit.store.get_index() == 1
        assert kit.store.get_identity() is None

    @pytest.mark.parametrize("index", [-1, 2, 10])
    def test_out_of_range(self, make_store, profile_record, enterprise_record, index) -> None:
        kit = make_store([profile_record(), enterprise_record])
        asyncio.run(kit.store.init())

        result = asyncio.run(kit.store.switch_profile(index))

        assert isinstance(result.error, InvalidUsageError)
        assert kit.store.get_index() == 0
        assert kit.store.get_identity() is not None
        assert len(kit.requests) == 1

    def test_switch_does_not_reapply_theme(
        self, make_store, profile_record, enterprise_record
    ) -> None:
        kit = make_store([profile_record(), enterprise_record])
        asyncio.run(kit.store.init())

        asyncio.run(kit.store.switch_profile(1))
        assert len(kit.platform.themes) == 1


# ---------------------------------------------------------------------------
# add / update
# ---------------------------------------------------------------------------


class TestAdd:
    def test_appends_from_template(self, make_store, profile_record) -> None:
        kit = make_store([profile_record()])
        asyncio.run(kit.store.load())

        assert asyncio.run(kit.store.add_profile(_connection(), "external"))

        profiles = kit.store.get_profiles()
        assert len(profiles) == 2
        added = profiles[1]
        assert added.connection.token == "def456"
        assert added.behavior.browser == "external"
        assert added.storage.max == 10000
        assert added.storage.path != profiles[0].storage.path
        assert kit.persistence.records()[1]["connection"]["token"] == "def456"

    def test_first_profile_gets_main_db(self, make_store) -> None:
        kit = make_store()
        assert asyncio.run(kit.store.add_profile(_connection(), None))
        assert kit.store.get_profiles()[0].storage.path == "./main.db"

    def test_storage_paths_distinct(self, make_store) -> None:
        kit = make_store()
        for _ in range(4):
            assert asyncio.run(kit.store.add_profile(_connection(), None))

        paths = [p.storage.path for p in kit.store.get_profiles()]
        assert len(set(paths)) == 4

    def test_invalid_connection_rejected(self, make_store, profile_record) -> None:
        kit = make_store([profile_record()])
        asyncio.run(kit.store.load())

        assert not asyncio.run(kit.store.add_profile(_connection(token="Bad Token"), None))
        assert kit.persistence.writes == []
        assert len(kit.store.get_profiles()) == 1

    def test_added_profile_reloads(self, make_store) -> None:
        kit = make_store()
        asyncio.run(kit.store.add_profile(_connection(), "builtin"))

        reloaded = make_store()
        reloaded.persistence.text = kit.persistence.text
        assert asyncio.run(reloaded.store.load()).ok
        assert reloaded.store.get_profiles() == kit.store.get_profiles()


class TestUpdate:
    def test_persists_and_replaces(self, make_store, profile_record, enterprise_record) -> None:
        kit = make_store([profile_record(), enterprise_record])
        asyncio.run(kit.store.init())
        asyncio.run(kit.store.switch_profile(1))

        profile = kit.store.get_active_profile()
        profile.connection.interval = 120
        assert asyncio.run(kit.store.update_profile(profile))

        assert kit.store.get_profiles()[1].connection.interval == 120
        assert kit.persistence.records()[1]["connection"]["interval"] == 120
        assert kit.persistence.records()[0]["connection"]["interval"] == 10

    def test_invalid_storage_rejected(self, make_store, profile_record) -> None:
        kit = make_store([profile_record()])
        asyncio.run(kit.store.init())

        profile = kit.store.get_active_profile()
        profile.storage.max = 500

        assert asyncio.run(kit.store.update_profile(profile)) is False
        assert kit.persistence.writes == []
        assert kit.store.get_active_profile().storage.max == 10000

    def test_nothing_loaded(self, make_store, profile_record) -> None:
        kit = make_store()
        profile = Profile.model_validate(profile_record())
        assert asyncio.run(kit.store.update_profile(profile)) is False
        assert kit.persistence.writes == []

    def test_stored_copy_is_independent(self, make_store, profile_record) -> None:
        kit = make_store([profile_record()])
        asyncio.run(kit.store.init())

        profile = kit.store.get_active_profile()
        asyncio.run(kit.store.update_profile(profile))
        profile.connection.interval = 999
        assert kit.store.get_active_profile().connection.interval == 10


# ---------------------------------------------------------------------------
# delete
# ---------------------------------------------------------------------------


class TestDelete:
    def test_removes_active_profile(self, make_store, profile_record, enterprise_record) -> None:
        kit = make_store([profile_record(), enterprise_record])
        asyncio.run(kit.store.init())
        asyncio.run(kit.store.switch_profile(1))

        assert asyncio.run(kit.store.delete_profile())

        assert kit.persistence.deleted == ["./main-1700000000000.db"]
        assert [r["connection"]["host"] for r in kit.persistence.records()] == ["api.github.com"]
        assert kit.platform.restarts == 1
        assert kit.store.get_index() == 0
        assert len(kit.store.get_profiles()) == 1

    def test_writes_raw_records(self, make_store, profile_record, enterprise_record) -> None:
        kit = make_store([profile_record(), enterprise_record])
        asyncio.run(kit.store.load())
        # Another writer adds a field after the store loaded.
        on_disk = kit.persistence.records()
        on_disk[1]["behavior"]["extra_flag"] = True
        kit.persistence.text = json.dumps(on_disk)

        asyncio.run(kit.store.delete_profile())

        assert kit.persistence.records() == [on_disk[1]]

    def test_last_profile(self, make_store, profile_record) -> None:
        kit = make_store([profile_record()])
        asyncio.run(kit.store.init())

        assert asyncio.run(kit.store.delete_profile())
        assert kit.persistence.records() == []
        assert kit.store.get_profiles() == []
        assert kit.store.get_active_profile() is None
        assert kit.store.phase == StorePhase.UNINITIALIZED

    def test_empty_storage_path(self, make_store, profile_record) -> None:
        kit = make_store([profile_record(storage__path="")])
        asyncio.run(kit.store.load())

        assert asyncio.run(kit.store.delete_profile()) is False
        assert kit.persistence.deleted == []
        assert kit.persistence.writes == []
        assert kit.platform.restarts == 0

    def test_null_storage_path(self, make_store, profile_record) -> None:
        kit = make_store([profile_record(storage__path=None)])
        assert asyncio.run(kit.store.load()).ok

        assert asyncio.run(kit.store.delete_profile()) is False
        assert kit.persistence.deleted == []
        assert kit.persistence.writes == []

    def test_unreadable_list_keeps_data_file(self, make_store, profile_record) -> None:
        kit = make_store([profile_record()])
        asyncio.run(kit.store.load())
        kit.persistence.text = "{not json"

        with pytest.raises(ConfigError):
            asyncio.run(kit.store.delete_profile())

        assert kit.persistence.deleted == []
        assert kit.platform.restarts == 0
        assert len(kit.store.get_profiles()) == 1

    def test_nothing_loaded(self, make_store) -> None:
        kit = make_store()
        assert asyncio.run(kit.store.delete_profile()) is False
        assert kit.platform.restarts == 0


# ---------------------------------------------------------------------------
# users and accessors
# ---------------------------------------------------------------------------


class TestUsers:
    def test_verifies_each_profile(self, make_store, profile_record, enterprise_record) -> None:
        kit = make_store([profile_record(), enterprise_record])
        asyncio.run(kit.store.load())

        result = asyncio.run(kit.store.get_users())

        assert result.ok
        assert [u.login for u in result.users] == ["octocat", "octocat"]
        hosts = [r.url.host for r in kit.requests]
        assert hosts == ["api.github.com", "ghe.example.com"]

    def test_stops_at_first_failure(self, make_store, profile_record, enterprise_record) -> None:
        kit = make_store([profile_record(), enterprise_record], status=500)
        asyncio.run(kit.store.load())

        result = asyncio.run(kit.store.get_users())

        assert isinstance(result.error, NetworkError)
        assert result.users == []
        assert len(kit.requests) == 1


class TestAccessors:
    def test_profiles_are_copies(self, make_store, profile_record) -> None:
        kit = make_store([profile_record()])
        asyncio.run(kit.store.load())

        kit.store.get_profiles()[0].connection.token = "changed"
        kit.store.get_active_profile().storage.path = "./other.db"

        profile = kit.store.get_active_profile()
        assert profile.connection.token == "abc123"
        assert profile.storage.path == "./main.db"

    def test_identity_is_a_copy(self, make_store, profile_record) -> None:
        kit = make_store([profile_record()])
        asyncio.run(kit.store.init())

        kit.store.get_identity().user = None
        assert kit.store.get_identity().user.login == "octocat"

    def test_server_version_public_host(self, make_store, profile_record) -> None:
        kit = make_store([profile_record()], server_version="3.12.0")
        asyncio.run(kit.store.init())
        assert kit.store.get_server_version() is None

    def test_data_path(self, make_store, profile_record) -> None:
        kit = make_store([profile_record()])
        asyncio.run(kit.store.load())
        assert asyncio.run(kit.store.get_data_path()) == Path("/data/main.db").resolve()

    def test_theme_name_without_profiles(self, make_store) -> None:
        kit = make_store()
        with pytest.raises(NotFoundError, match="No profile is loaded"):
            kit.store.get_theme_name()

    def test_data_path_without_profiles(self, make_store) -> None:
        kit = make_store()
        with pytest.raises(NotFoundError, match="No profile is loaded"):
            asyncio.run(kit.store.get_data_path())

    def test_null_path_prefix_on_public_host(self, make_store, profile_record) -> None:
        kit = make_store([profile_record(connection__path_prefix=None)])

        assert asyncio.run(kit.store.init()).ok
        assert str(kit.requests[0].url) == "https://api.github.com/user"


def test_web_url() -> None:
    assert web_url(_connection()) == "https://github.com"
    assert web_url(_connection(https=False, web_host="ghe.local")) == "http://ghe.local"
