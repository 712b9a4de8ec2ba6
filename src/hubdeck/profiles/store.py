"""The profile store: in-memory authority over the list of profiles.

:class:`ProfileStore` holds the ordered list of profiles, the active index,
and the identity last verified for the active profile. Every change to the
list goes through it:

* :meth:`~ProfileStore.load` reads the persisted list, runs the migration
  chain over every record and parses it. :meth:`~ProfileStore.init` does the
  same and then verifies the active credential and applies its theme.
* :meth:`~ProfileStore.add_profile`, :meth:`~ProfileStore.update_profile` and
  :meth:`~ProfileStore.delete_profile` validate before they write, and only
  change the in-memory list once the write has succeeded.
* :meth:`~ProfileStore.switch_profile` changes the active index and
  re-verifies.

Expected failures are returned, not raised: ``init`` and ``switch_profile``
return result objects carrying a :class:`~hubdeck.exceptions.HubdeckError`,
and the mutating operations return ``False``. Errors raised by the
persistence collaborator itself (e.g. an unwritable config directory)
propagate.

The store does not serialise concurrent calls. Callers must not start an
operation while another one on the same store is still running.

Example::

    store = ProfileStore(FilePersistence(), IdentityVerifier(), CliPlatform())
    result = await store.init()
    if result.ok:
        print(store.get_identity().user.login)
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from hubdeck.exceptions import (
    ConfigError,
    HubdeckError,
    InvalidUsageError,
    NotFoundError,
)
from hubdeck.identity.verifier import IdentityVerifier, VerifyOutcome, VerifyStatus
from hubdeck.models import ConnectionSettings, Identity, Profile, RemoteUser, ThemeName
from hubdeck.output import debug, error
from hubdeck.platform import Platform
from hubdeck.profiles.migrations import migrate
from hubdeck.profiles.persistence import ProfilePersistence
from hubdeck.profiles.template import new_profile, storage_path_for
from hubdeck.profiles.validator import (
    connection_errors,
    is_valid_connection,
    is_valid_profile,
    profile_errors,
)
from hubdeck.theme import resolve_theme


class StorePhase(str, enum.Enum):
    """Lifecycle phase of a :class:`ProfileStore`."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    LOAD_FAILED = "load_failed"


@dataclass
class InitResult:
    """Result of :meth:`ProfileStore.load` and :meth:`ProfileStore.init`.

    Attributes:
        error: The failure, or ``None`` on success.
        web_url: Web address of the active profile's host, set when
            verification failed so the user can go fix the token.
        is_not_found_error: No profiles are persisted.
        is_network_error: The remote call failed.
        is_scope_error: The token lacks a required scope.
    """

    error: Optional[HubdeckError] = None
    web_url: Optional[str] = None
    is_not_found_error: bool = False
    is_network_error: bool = False
    is_scope_error: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SwitchResult:
    """Result of :meth:`ProfileStore.switch_profile`."""

    error: Optional[HubdeckError] = None
    is_network_error: bool = False
    is_scope_error: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class UsersResult:
    """Result of :meth:`ProfileStore.get_users`."""

    users: list[RemoteUser] = field(default_factory=list)
    error: Optional[HubdeckError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def web_url(connection: ConnectionSettings) -> str:
    """Return the browser address of a connection's web host."""
    scheme = "https" if connection.https else "http"
    return f"{scheme}://{connection.web_host}"


class ProfileStore:
    """Authority over the ordered list of profiles.

    Args:
        persistence: Reads and writes the profile list and data files.
        verifier: Verifies credentials against the remote API.
        platform: Dark-mode query, theme application and restart hooks.
    """

    def __init__(
        self,
        persistence: ProfilePersistence,
        verifier: IdentityVerifier,
        platform: Platform,
    ) -> None:
        self._persistence = persistence
        self._verifier = verifier
        self._platform = platform

        self._phase = StorePhase.UNINITIALIZED
        self._profiles: list[Profile] = []
        self._index = 0
        self._identity: Optional[Identity] = None
        self._server_version: Optional[str] = None
        self._system_dark_mode = False

    @property
    def phase(self) -> StorePhase:
        return self._phase

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def load(self) -> InitResult:
        """Read, migrate and parse the persisted profiles without verifying them.

        On success the first profile becomes active. The phase stays
        ``LOADING`` until :meth:`init` finishes verification; a failed load
        moves it to ``LOAD_FAILED``.
        """
        self._phase = StorePhase.LOADING
        try:
            records = await self._read_records()
        except ConfigError as exc:
            self._phase = StorePhase.LOAD_FAILED
            return InitResult(error=exc)

        if not records:
            self._phase = StorePhase.LOAD_FAILED
            return InitResult(
                error=NotFoundError("No profiles found"),
                is_not_found_error=True,
            )

        migrate(records)
        try:
            profiles = [Profile.model_validate(record) for record in records]
        except PydanticValidationError as exc:
            self._phase = StorePhase.LOAD_FAILED
            return InitResult(error=ConfigError(f"Invalid profile record: {exc}"))

        self._profiles = profiles
        self._index = 0
        self._identity = None
        self._server_version = None
        debug(f"Loaded {len(profiles)} profile(s)")
        return InitResult()

    async def init(self) -> InitResult:
        """Load the profiles, verify the first one and apply its theme.

        When verification fails the profiles stay loaded, so the caller can
        still :meth:`update_profile` or :meth:`switch_profile` to recover, but
        no identity is recorded and the phase is ``LOAD_FAILED``.
        """
        result = await self.load()
        if not result.ok:
            return result

        outcome = await self._verify_active()
        if not outcome.ok:
            self._phase = StorePhase.LOAD_FAILED
            return InitResult(
                error=outcome.error,
                web_url=web_url(self._profiles[self._index].connection),
                is_network_error=outcome.status == VerifyStatus.NETWORK_ERROR,
                is_scope_error=outcome.status == VerifyStatus.INSUFFICIENT_SCOPE,
            )

        self._apply_theme()
        self._phase = StorePhase.READY
        return InitResult()

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    async def switch_profile(self, index: int) -> SwitchResult:
        """Make the profile at *index* active and verify it.

        The index is not rolled back when verification fails; the caller
        decides whether to switch back.
        """
        if not 0 <= index < len(self._profiles):
            return SwitchResult(
                error=InvalidUsageError(
                    f"Profile index {index} is out of range (0-{len(self._profiles) - 1})"
                )
            )

        self._index = index
        self._identity = None
        self._server_version = None

        outcome = await self._verify_active()
        if not outcome.ok:
            return SwitchResult(
                error=outcome.error,
                is_network_error=outcome.status == VerifyStatus.NETWORK_ERROR,
                is_scope_error=outcome.status == VerifyStatus.INSUFFICIENT_SCOPE,
            )

        self._phase = StorePhase.READY
        return SwitchResult()

    async def add_profile(
        self,
        connection: ConnectionSettings,
        browser: Optional[str],
    ) -> bool:
        """Append a new profile built from the template and persist the list.

        Returns:
            ``False`` without touching any state if *connection* is invalid.
        """
        if not is_valid_connection(connection):
            debug("Rejected connection: " + "; ".join(connection_errors(connection)))
            return False

        path = storage_path_for(profile.storage.path for profile in self._profiles)
        profiles = self._profiles + [new_profile(connection, browser, path)]
        await self._write_profiles(profiles)
        self._profiles = profiles
        return True

    async def update_profile(self, profile: Profile) -> bool:
        """Replace the active profile with *profile*, persist, and re-apply the theme.

        Returns:
            ``False`` without touching any state if *profile* is invalid or no
            profile is loaded.
        """
        if not is_valid_profile(profile):
            debug("Rejected profile: " + "; ".join(profile_errors(profile)))
            return False
        if not self._profiles:
            error("No profile is loaded.")
            return False

        profiles = list(self._profiles)
        profiles[self._index] = profile.model_copy(deep=True)
        await self._write_profiles(profiles)
        self._profiles = profiles

        self._apply_theme()
        return True

    async def delete_profile(self) -> bool:
        """Delete the active profile and its data file, then request a restart.

        The persisted list is re-read so that the removal applies to what is
        on disk. It is read before the data file is deleted, so an unreadable
        list leaves both untouched. Returns ``False`` and changes nothing if the active profile
        has no storage path.
        """
        if not self._profiles:
            error("No profile is loaded.")
            return False

        storage_path = self._profiles[self._index].storage.path
        if not storage_path:
            error("Storage path is empty.")
            return False

        records = await self._read_records() or []
        await self._persistence.delete_relative_file(storage_path)

        if self._index < len(records):
            records.pop(self._index)
        await self._write_text(_dumps(records))

        self._profiles.pop(self._index)
        self._index = 0
        self._identity = None
        self._server_version = None
        if not self._profiles:
            self._phase = StorePhase.UNINITIALIZED

        self._platform.restart()
        return True

    async def get_users(self) -> UsersResult:
        """Verify every profile in order, one at a time.

        Stops at the first profile that fails and returns its error.
        """
        users: list[RemoteUser] = []
        for profile in self.get_profiles():
            outcome = await self._verifier.verify(profile.connection)
            if not outcome.ok:
                return UsersResult(error=outcome.error)
            assert outcome.identity is not None
            users.append(outcome.identity.user)
        return UsersResult(users=users)

    # ------------------------------------------------------------------ #
    # Accessors
    # ------------------------------------------------------------------ #

    def get_profiles(self) -> list[Profile]:
        """Return deep copies of all profiles."""
        return [profile.model_copy(deep=True) for profile in self._profiles]

    def get_active_profile(self) -> Optional[Profile]:
        """Return a deep copy of the active profile, or ``None`` when none is loaded."""
        if not self._profiles:
            return None
        return self._profiles[self._index].model_copy(deep=True)

    def get_index(self) -> int:
        return self._index

    def get_identity(self) -> Optional[Identity]:
        """Return a shallow copy of the last verified identity."""
        if self._identity is None:
            return None
        return self._identity.model_copy()

    def get_server_version(self) -> Optional[str]:
        """Server version of the active enterprise host, ``None`` for the public host."""
        return self._server_version

    def get_theme_name(self) -> ThemeName:
        """Theme the active profile displays with.

        Raises:
            NotFoundError: If no profile is loaded.
        """
        profile = self._loaded_profile()
        return resolve_theme(profile.behavior.style.theme_mode, self._system_dark_mode)

    async def get_data_path(self) -> Path:
        """Absolute path of the active profile's data file.

        Raises:
            NotFoundError: If no profile is loaded.
            ConfigError: If the profile has no usable storage path.
        """
        profile = self._loaded_profile()
        return await self._persistence.absolute_path(profile.storage.path or "")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _loaded_profile(self) -> Profile:
        if not self._profiles:
            raise NotFoundError("No profile is loaded.")
        return self._profiles[self._index]

    async def _verify_active(self) -> VerifyOutcome:
        outcome = await self._verifier.verify(self._profiles[self._index].connection)
        if outcome.ok:
            assert outcome.identity is not None
            self._identity = outcome.identity
            self._server_version = outcome.identity.header.server_version
        return outcome

    def _apply_theme(self) -> None:
        self._system_dark_mode = self._platform.is_system_dark_mode()
        self._platform.apply_theme(self.get_theme_name())

    async def _read_records(self) -> Optional[list[dict[str, Any]]]:
        """Read and decode the persisted list.

        Raises:
            ConfigError: If the text is not a JSON array of objects.
        """
        text = await self._persistence.read()
        if not text:
            return None
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Profile list is not valid JSON: {exc}") from exc
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise ConfigError("Profile list must be a JSON array of objects")
        return data

    async def _write_profiles(self, profiles: list[Profile]) -> None:
        await self._write_text(_dumps([p.model_dump(mode="json") for p in profiles]))

    async def _write_text(self, text: str) -> None:
        await self._persistence.write(text)


def _dumps(records: list[dict[str, Any]]) -> str:
    return json.dumps(records, indent=2)
