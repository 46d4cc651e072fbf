"""Connection sessions, prefix search, and background task coordination."""

from __future__ import annotations

from .actions import NodeAction, available_actions
from .connection import ConnectionSession, ConnectListing
from .manager import SessionManager, TaskOutcome
from .scheduler import CancellationToken, SessionTaskScheduler, TaskHandle, TaskKind, TaskResult
from .search import search
from .state import FULL_NAMESPACE_PREFIX, SessionStatus

__all__ = [
    "NodeAction",
    "available_actions",
    "ConnectionSession",
    "ConnectListing",
    "SessionManager",
    "TaskOutcome",
    "CancellationToken",
    "SessionTaskScheduler",
    "TaskHandle",
    "TaskKind",
    "TaskResult",
    "search",
    "FULL_NAMESPACE_PREFIX",
    "SessionStatus",
]
