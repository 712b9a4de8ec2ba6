"""Storage of the persisted profile list and of per-profile data files.

The store only sees the :class:`ProfilePersistence` protocol: an opaque text
blob that it reads and writes as a whole, plus data-file operations keyed by
the relative path recorded in each profile's ``storage.path``.

:class:`FilePersistence` keeps the blob at ``<config_dir>/profiles.json``
(written atomically with ``0o600`` permissions, see
:func:`~hubdeck.config.atomic_write`) and resolves data files against the
data directory. A relative path that would resolve outside the data
directory is refused, since ``storage.path`` comes from an editable file and
feeds a delete.

The methods are coroutines so that other backends can do real I/O behind
the protocol, but :class:`FilePersistence` reads and writes synchronously
and blocks the event loop while it does. Each CLI command runs one short
store operation, so nothing else is waiting on the loop. Wrap the calls in
:func:`asyncio.to_thread` before sharing a loop with other work.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol

from hubdeck.config import atomic_write, get_data_dir, get_profiles_path
from hubdeck.exceptions import ConfigError
from hubdeck.output import debug


class ProfilePersistence(Protocol):
    """Persistence collaborator of :class:`~hubdeck.profiles.store.ProfileStore`."""

    async def read(self) -> Optional[str]:
        """Return the persisted profile list, or ``None`` when nothing is stored."""
        ...

    async def write(self, text: str) -> None:
        """Replace the persisted profile list with *text*."""
        ...

    async def delete_relative_file(self, path: str) -> None:
        """Delete the data file at *path*, relative to the data directory."""
        ...

    async def absolute_path(self, relative_path: str) -> Path:
        """Resolve *relative_path* against the data directory."""
        ...


class FilePersistence:
    """:class:`ProfilePersistence` backed by the local filesystem.

    Args:
        profiles_path: Location of the profile list. Defaults to
            :func:`~hubdeck.config.get_profiles_path`.
        data_dir: Directory holding per-profile data files. Defaults to
            :func:`~hubdeck.config.get_data_dir`.

    Example::

        persistence = FilePersistence()
        text = await persistence.read()
    """

    def __init__(
        self,
        profiles_path: Optional[Path] = None,
        data_dir: Optional[Path] = None,
    ) -> None:
        self._profiles_path = profiles_path
        self._data_dir = data_dir

    @property
    def profiles_path(self) -> Path:
        if self._profiles_path is None:
            self._profiles_path = get_profiles_path()
        return self._profiles_path

    @property
    def data_dir(self) -> Path:
        if self._data_dir is None:
            self._data_dir = get_data_dir()
        return self._data_dir

    async def read(self) -> Optional[str]:
        path = self.profiles_path
        if not path.is_file():
            debug(f"No profile list at {path}")
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read profiles at {path}: {exc}") from exc

    async def write(self, text: str) -> None:
        debug(f"Writing profile list to {self.profiles_path}")
        atomic_write(self.profiles_path, text)

    async def delete_relative_file(self, path: str) -> None:
        """Delete a profile's data file. A file that is already gone is not an error."""
        target = await self.absolute_path(path)
        debug(f"Deleting data file {target}")
        target.unlink(missing_ok=True)

    async def absolute_path(self, relative_path: str) -> Path:
        """Resolve *relative_path* against the data directory.

        Raises:
            ConfigError: If the result lies outside the data directory.
        """
        base = self.data_dir.resolve()
        target = (base / relative_path).resolve()
        if target == base or base not in target.parents:
            raise ConfigError(
                f"Data file path '{relative_path}' is outside the data directory {base}"
            )
        return target
