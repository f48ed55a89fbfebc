"""Configuration management with XDG paths, atomic writes, and JSON config sources.

This module holds the persistent configuration the negotiator consults:

* **Directory layout** -- ``$PKGNET_HOME`` when set, otherwise XDG Base
  Directory compliant on Linux/BSD and ``~/.pkgnet/`` on macOS and Windows.
  See :func:`get_config_dir`.
* **Settings** -- the ``config`` section of ``config.json``, validated into
  :class:`~pkgnet.models.NetworkSettings` (``gitlab-domains``,
  ``github-domains``, ``store-auths``).
* **Auth file** -- ``auth.json`` holding ``http-basic``, ``github-oauth``,
  ``gitlab-oauth``, ``gitlab-token`` and ``bearer`` sections. The
  ``PKGNET_AUTH`` environment variable may carry the same structure inline
  and takes precedence.
* **Config sources** -- :class:`JsonConfigSource` is the write side, used by
  :meth:`~pkgnet.auth.negotiator.CredentialNegotiator.store_auth` to persist
  ``http-basic.<origin>`` entries.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) so a crash never leaves a half-written auth file.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from pkgnet.exceptions import ConfigError
from pkgnet.models import NetworkSettings

_APP_NAME = "pkgnet"
_CONFIG_FILENAME = "config.json"
_AUTH_FILENAME = "auth.json"
_HOME_ENV = "PKGNET_HOME"
_AUTH_ENV = "PKGNET_AUTH"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    ``$PKGNET_HOME`` wins when set. Otherwise, on Linux/BSD:
    ``$XDG_CONFIG_HOME/pkgnet/`` (default ``~/.config/pkgnet/``); on
    macOS/Windows: ``~/.pkgnet/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    home = os.environ.get(_HOME_ENV, "")
    if home:
        path = Path(home).expanduser()
    elif _is_xdg_platform():
        base = os.environ.get("XDG_CONFIG_HOME", "")
        path = (Path(base) if base else Path.home() / ".config") / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file lives in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. When *mode* is
    given it is applied before any content is written.
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
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Config sources ---


class JsonConfigSource:
    """A JSON file that settings can be written into.

    Keys use dot notation split on the *first* dot only, so
    ``"http-basic.repo.example.org"`` lands in
    ``{"http-basic": {"repo.example.org": ...}}``. For the auth file the
    sections sit at the top level; for ``config.json`` they go under the
    ``config`` key.

    Args:
        path: The JSON file to read and write.
        auth: Whether this is an auth file (top-level sections, ``0o600``).

    Example::

        source = JsonConfigSource(get_config_dir() / "auth.json", auth=True)
        source.add_config_setting(
            "http-basic.repo.example.org",
            {"username": "alice", "password": "s3cret"},
        )
    """

    def __init__(self, path: Path, auth: bool = False) -> None:
        self._path = path
        self._auth = auth

    @property
    def path(self) -> Path:
        return self._path

    def get_name(self) -> str:
        """Human-readable name shown in the "store credentials?" prompt."""
        return str(self._path)

    def read(self) -> dict[str, Any]:
        """Return the parsed file, or an empty dict when it does not exist.

        Raises:
            ConfigError: If the file is not a JSON object.
        """
        if not self._path.is_file():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            raise ConfigError(f"Invalid JSON in {self._path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a JSON object in {self._path}")
        return data

    def add_config_setting(self, key: str, value: Any) -> None:
        """Set *key* (dot notation) to *value* and write the file atomically.

        Pydantic models are stored as their JSON dump.
        """
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json")
        data = self.read()
        section, name = self._split(key)
        target = data if self._auth else data.setdefault("config", {})
        if name is None:
            target[section] = value
        else:
            node = target.get(section)
            if not isinstance(node, dict):
                node = {}
                target[section] = node
            node[name] = value
        self._write(data)

    def remove_config_setting(self, key: str) -> None:
        """Remove *key* (dot notation); a missing key is a no-op."""
        data = self.read()
        section, name = self._split(key)
        target = data if self._auth else data.get("config", {})
        if name is None:
            if target.pop(section, None) is None:
                return
        else:
            node = target.get(section)
            if not isinstance(node, dict) or node.pop(name, None) is None:
                return
            if not node:
                del target[section]
        self._write(data)

    @staticmethod
    def _split(key: str) -> tuple[str, Optional[str]]:
        section, sep, name = key.partition(".")
        if not section or (sep and not name):
            raise ConfigError(f"Invalid config key: {key!r}")
        return section, (name if sep else None)

    def _write(self, data: dict[str, Any]) -> None:
        text = json.dumps(data, indent=4) + "\n"
        _atomic_write(self._path, text, mode=0o600 if self._auth else None)


# --- Read side ---


class Config:
    """Key-value view of the effective configuration.

    Args:
        settings: Validated settings; defaults apply when ``None``.
        auth_source: Where new credentials are persisted.
        auth: Auth sections (``http-basic``, ``github-oauth``, ...) already
            read from disk and the environment.
    """

    def __init__(
        self,
        settings: Optional[NetworkSettings] = None,
        auth_source: Optional[JsonConfigSource] = None,
        auth: Optional[dict[str, Any]] = None,
    ) -> None:
        self._settings = settings or NetworkSettings()
        self._values = self._settings.model_dump(by_alias=True)
        self._auth_source = auth_source
        self._auth = auth or {}

    def get(self, key: str) -> Any:
        """Return the setting stored under its on-disk name (``"gitlab-domains"``).

        Raises:
            ConfigError: If *key* is not a known setting.
        """
        if key not in self._values:
            raise ConfigError(f"Unknown config key: {key}")
        return self._values[key]

    def get_store_auths(self) -> Union[bool, str]:
        """The ``store-auths`` setting as ``True``, ``False`` or ``"prompt"``."""
        value = self.get("store-auths")
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        return value

    def get_auth_config_source(self) -> JsonConfigSource:
        """Return the sink for persisted credentials.

        Raises:
            ConfigError: If this config was built without one.
        """
        if self._auth_source is None:
            raise ConfigError("No auth config source is configured")
        return self._auth_source

    def get_auth_settings(self) -> dict[str, Any]:
        """Return the raw auth sections, for :meth:`ConsoleIO.load_configuration`."""
        return self._auth


def _load_settings(path: Path) -> NetworkSettings:
    source = JsonConfigSource(path)
    section = source.read().get("config", {})
    try:
        return NetworkSettings.model_validate(section)
    except PydanticValidationError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def _load_env_auth() -> dict[str, Any]:
    raw = os.environ.get(_AUTH_ENV, "")
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{_AUTH_ENV} is not valid JSON: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{_AUTH_ENV} must contain a JSON object")
    return data


def load_config(config_dir: Optional[Path] = None) -> Config:
    """Build the effective :class:`Config` from disk and the environment.

    Precedence for auth sections (high to low):
        1. ``PKGNET_AUTH`` environment variable (inline JSON)
        2. ``<config_dir>/auth.json``

    Args:
        config_dir: Directory to read from; defaults to :func:`get_config_dir`.

    Raises:
        ConfigError: If a file or ``PKGNET_AUTH`` contains invalid JSON, or
            the settings fail validation.
    """
    base = config_dir or get_config_dir()
    settings = _load_settings(base / _CONFIG_FILENAME)
    auth_source = JsonConfigSource(base / _AUTH_FILENAME, auth=True)

    auth = auth_source.read()
    for section, values in _load_env_auth().items():
        if isinstance(values, dict) and isinstance(auth.get(section), dict):
            auth[section] = {**auth[section], **values}
        else:
            auth[section] = values

    return Config(settings=settings, auth_source=auth_source, auth=auth)
