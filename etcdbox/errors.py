"""Error types raised by the namespace browser core.

All errors derive from ``EtcdBoxError`` so callers (the CLI, a UI) can catch
one base class and present the message to the operator.
"""

from __future__ import annotations

from enum import Enum


class EtcdBoxError(Exception):
    """Base class for every error raised by ``etcdbox``."""


class ConfigError(EtcdBoxError):
    """Persisted root configuration is missing, malformed, or unwritable."""


class DuplicateNameError(EtcdBoxError):
    """A root with the requested name is already configured."""

    def __init__(self, name: str) -> None:
        super().__init__(f"root already exists: {name!r}")
        self.name = name


class UnknownRootError(EtcdBoxError):
    """No root with the requested name is configured."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown root: {name!r}")
        self.name = name


class ConnectionFailure(Enum):
    UNREACHABLE = "unreachable"
    AUTH_FAILED = "auth_failed"
    TIMEOUT = "timeout"


class StoreConnectionError(EtcdBoxError):
    """Connecting to or probing a store failed; the root stays unconnected."""

    def __init__(self, reason: ConnectionFailure, message: str) -> None:
        super().__init__(f"{reason.value}: {message}")
        self.reason = reason


class QueryError(EtcdBoxError):
    """A prefix listing or direct key fetch failed."""


class SessionStateError(EtcdBoxError):
    """Operation is not valid for the session's current state."""


__all__ = [
    "EtcdBoxError",
    "ConfigError",
    "DuplicateNameError",
    "UnknownRootError",
    "ConnectionFailure",
    "StoreConnectionError",
    "QueryError",
    "SessionStateError",
]
