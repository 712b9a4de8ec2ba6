"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for hubdeck:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.hubdeck/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`. The profile list lives in the config directory;
  per-profile data files live in the data directory.
* **App config** -- A single :class:`~hubdeck.models.AppConfig` JSON file
  storing output, request and dark-mode defaults.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables and the config file into the effective
  configuration.
* **Credential resolution** -- :func:`resolve_credential` reads a token from
  an env var, a file, an interactive prompt, or takes it literally.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`) so a crash never leaves a truncated file behind.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Optional

from hubdeck.exceptions import ConfigError
from hubdeck.models import AppConfig

_APP_NAME = "hubdeck"
_CONFIG_FILENAME = "config.json"
_PROFILES_FILENAME = "profiles.json"

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG base directories (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/hubdeck/`` (default ``~/.config/hubdeck/``).
    On macOS/Windows: ``~/.hubdeck/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_CONFIG_HOME", (".config",))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (profile data files, crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/hubdeck/`` (default ``~/.local/share/hubdeck/``).
    On macOS/Windows: ``~/.hubdeck/data/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        base = _xdg_base("XDG_DATA_HOME", (".local", "share"))
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_profiles_path() -> Path:
    """Path to the persisted profile list (``<config_dir>/profiles.json``)."""
    return get_config_dir() / _PROFILES_FILENAME


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. The file is created
    with ``0o600`` permissions because the profile list holds access tokens.
    On any failure the temp file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        os.chmod(tmp_path, 0o600)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        # Clean up the temp file on any error (including KeyboardInterrupt).
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- App config ---


def _app_config_path() -> Path:
    """Path to the app config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_app_config() -> AppConfig:
    """Load the app configuration from the config directory.

    Returns:
        The deserialised :class:`~hubdeck.models.AppConfig`. If the file does
        not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _app_config_path()
    if not path.is_file():
        return AppConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return AppConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_app_config(config: AppConfig) -> None:
    """Persist the app configuration atomically to disk."""
    data = config.model_dump(mode="json")
    atomic_write(_app_config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def _env_bool(name: str) -> Optional[bool]:
    """Parse a boolean environment variable, returning None when unset."""
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return None
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigError(f"Expected a boolean for {name}, got: {raw}")


def resolve_config(
    cli_format: Optional[str] = None,
    cli_dark_mode: Optional[bool] = None,
) -> AppConfig:
    """Resolve the effective app config.

    Precedence (high to low):
        1. CLI flags (``cli_format``, ``cli_dark_mode``)
        2. Environment variables (``HUBDECK_DARK_MODE``, ``HUBDECK_TIMEOUT``)
        3. User config (``~/.config/hubdeck/config.json``)
        4. Defaults

    Raises:
        ConfigError: If the config file or an environment variable is invalid.
    """
    config = load_app_config()

    env_dark = _env_bool("HUBDECK_DARK_MODE")
    if env_dark is not None:
        config.dark_mode = env_dark

    env_timeout = os.environ.get("HUBDECK_TIMEOUT")
    if env_timeout:
        try:
            config.request.timeout = float(env_timeout)
        except ValueError as exc:
            raise ConfigError(
                f"Expected a number for HUBDECK_TIMEOUT, got: {env_timeout}"
            ) from exc

    if cli_dark_mode is not None:
        config.dark_mode = cli_dark_mode
    if cli_format is not None:
        config.output.format = cli_format

    return config


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve an access token from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts the user (requires a TTY)
        - anything else is taken as the token itself

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value.strip()

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Token file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read token file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for the token: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Access token: ").strip()

    return source
