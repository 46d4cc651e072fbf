"""Persistent JSON configuration of named store roots.

The file maps each root name to its endpoint, address and credentials.
Unlike UI preferences, the root registry is required state: a missing or
malformed file is reported as ``ConfigError`` rather than silently replaced.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .errors import ConfigError, DuplicateNameError, UnknownRootError

logger = logging.getLogger(__name__)

APP_NAME = "etcdbox"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
# Older releases kept the registry in the working directory.
LEGACY_CONFIG_PATH = Path(CONFIG_FILENAME)
CONFIG_PATH = DEFAULT_CONFIG_PATH

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 2379


@dataclass(frozen=True)
class RootConfig:
    """One named store target; credentials are opaque to the core."""

    name: str
    endpoint: str
    host: str = ""
    port: int = 0
    username: str = ""
    password: str = ""

    @classmethod
    def from_address(
        cls,
        name: str,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        username: str = "",
        password: str = "",
    ) -> RootConfig:
        """Validate form-style input and derive ``endpoint`` as ``http://host:port``."""
        name = name.strip()
        host = host.strip()
        if not name:
            raise ConfigError("root name is required")
        if not host:
            raise ConfigError("host is required")
        if isinstance(port, bool) or not isinstance(port, int) or port <= 0:
            raise ConfigError("port must be a number greater than zero")
        return cls(
            name=name,
            endpoint=f"http://{host}:{port}",
            host=host,
            port=port,
            username=username,
            password=password,
        )

    def to_json(self) -> dict[str, object]:
        return {
            "endpoint": self.endpoint,
            "host": self.host,
            "port": self.port,
            "username": self.username,
            "password": self.password,
        }


def _field(raw: Mapping[str, object], name: str, default: object) -> object:
    """Read ``name`` accepting the capitalized spelling older files used."""
    if name in raw:
        return raw[name]
    return raw.get(name.capitalize(), default)


def _parse_root(name: object, raw: object) -> RootConfig:
    if not isinstance(name, str) or not name:
        raise ConfigError(f"invalid root name: {name!r}")
    if not isinstance(raw, dict):
        raise ConfigError(f"root {name!r} must be a JSON object")

    host = _field(raw, "host", "")
    port = _field(raw, "port", 0)
    username = _field(raw, "username", "")
    password = _field(raw, "password", "")
    endpoint = _field(raw, "endpoint", "")
    if not isinstance(host, str) or not isinstance(username, str) or not isinstance(password, str):
        raise ConfigError(f"root {name!r} has non-string host or credentials")
    # Older files stored the port as a JSON float.
    if isinstance(port, float) and port.is_integer():
        port = int(port)
    if isinstance(port, bool) or not isinstance(port, int) or port < 0:
        raise ConfigError(f"root {name!r} has invalid port {port!r}")
    if not isinstance(endpoint, str):
        raise ConfigError(f"root {name!r} has non-string endpoint")
    if not endpoint:
        if not host or port <= 0:
            raise ConfigError(f"root {name!r} has neither endpoint nor host:port")
        endpoint = f"http://{host}:{port}"
    return RootConfig(
        name=name,
        endpoint=endpoint,
        host=host,
        port=port,
        username=username,
        password=password,
    )


def _resolve_load_path(path: Path | None) -> Path:
    if path is not None:
        return path
    if CONFIG_PATH.exists():
        return CONFIG_PATH
    if CONFIG_PATH == DEFAULT_CONFIG_PATH and LEGACY_CONFIG_PATH.exists():
        return LEGACY_CONFIG_PATH
    return CONFIG_PATH


def load_roots(path: Path | None = None) -> dict[str, RootConfig]:
    """Load the root registry, preserving file order.

    Raises ``ConfigError`` when the file is missing, unreadable, not JSON, or
    any entry is malformed.
    """
    config_path = _resolve_load_path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"config file not found: {config_path}") from exc
    except OSError as exc:
        raise ConfigError(f"cannot read config file {config_path}: {exc}") from exc
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise ConfigError(f"config file {config_path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"config file {config_path} must contain a JSON object")

    roots = {name: _parse_root(name, raw) for name, raw in data.items()}
    logger.debug("config.loaded path=%s roots=%d", config_path, len(roots))
    return roots


def save_roots(roots: Mapping[str, RootConfig], path: Path | None = None) -> None:
    """Persist the registry as pretty-printed JSON; raise ``ConfigError`` on failure."""
    config_path = CONFIG_PATH if path is None else path
    payload = {name: root.to_json() for name, root in roots.items()}
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot write config file {config_path}: {exc}") from exc
    logger.debug("config.saved path=%s roots=%d", config_path, len(payload))


class RootRepository:
    """In-memory root registry backed by the JSON config file.

    A single lock serializes writers; readers get snapshots so they can
    enumerate roots while another thread adds or removes one.
    """

    def __init__(self, roots: Mapping[str, RootConfig] | None = None, path: Path | None = None) -> None:
        self._lock = threading.Lock()
        self._roots: dict[str, RootConfig] = dict(roots or {})
        self.path = path

    @classmethod
    def load(cls, path: Path | None = None, *, allow_missing: bool = False) -> RootRepository:
        """Load from disk; ``allow_missing`` starts empty when no file exists yet."""
        target = _resolve_load_path(path)
        if allow_missing and not target.exists():
            return cls({}, path=path)
        return cls(load_roots(target), path=path)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._roots)

    def snapshot(self) -> dict[str, RootConfig]:
        with self._lock:
            return dict(self._roots)

    def get(self, name: str) -> RootConfig:
        with self._lock:
            root = self._roots.get(name)
        if root is None:
            raise UnknownRootError(name)
        return root

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._roots

    def add(self, root: RootConfig) -> None:
        """Register and persist ``root``; duplicates are rejected before any write."""
        with self._lock:
            if root.name in self._roots:
                raise DuplicateNameError(root.name)
            updated = {**self._roots, root.name: root}
            save_roots(updated, self.path)
            self._roots = updated
        logger.info("config.root_added name=%s endpoint=%s", root.name, root.endpoint)

    def remove(self, name: str) -> RootConfig:
        with self._lock:
            root = self._roots.get(name)
            if root is None:
                raise UnknownRootError(name)
            updated = {key: value for key, value in self._roots.items() if key != name}
            save_roots(updated, self.path)
            self._roots = updated
        logger.info("config.root_removed name=%s", name)
        return root


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DEFAULT_CONFIG_PATH",
    "LEGACY_CONFIG_PATH",
    "RootConfig",
    "RootRepository",
    "load_roots",
    "save_roots",
]
