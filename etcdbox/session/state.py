"""Connection-session status values and timing constants."""

from __future__ import annotations

from enum import Enum

# Prefix listed on connect; an empty search prefix means the same namespace.
FULL_NAMESPACE_PREFIX = "/"

DIAL_TIMEOUT_SECONDS = 2.0
PROBE_TIMEOUT_SECONDS = 2.0
QUERY_TIMEOUT_SECONDS = 30.0


class SessionStatus(Enum):
    """Lifecycle of one root's connection.

    ``DISCONNECTED -> CONNECTING -> CONNECTED`` on success;
    ``CONNECTING -> FAILED -> DISCONNECTED`` on failure;
    ``CONNECTED -> DISCONNECTED`` on disconnect.
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


__all__ = [
    "FULL_NAMESPACE_PREFIX",
    "DIAL_TIMEOUT_SECONDS",
    "PROBE_TIMEOUT_SECONDS",
    "QUERY_TIMEOUT_SECONDS",
    "SessionStatus",
]
