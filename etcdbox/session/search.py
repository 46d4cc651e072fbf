"""Prefix-filtered rebuild of a connected root's subtree."""

from __future__ import annotations

import logging

from ..namespace_tree import RootState, reset_subtree
from .connection import ConnectionSession
from .state import FULL_NAMESPACE_PREFIX, SessionStatus

logger = logging.getLogger(__name__)


def search_state(query_prefix: str) -> RootState:
    return RootState.SEARCHING if query_prefix else RootState.CONNECTED


def fetch_search(session: ConnectionSession, query_prefix: str) -> list[str]:
    """List keys under ``query_prefix`` (empty means the full namespace)."""
    client = session.require_client("search")
    effective_prefix = query_prefix or FULL_NAMESPACE_PREFIX
    keys = client.get_by_prefix(effective_prefix, keys_only=True, timeout=session.query_timeout)
    return list(keys)


def complete_search(session: ConnectionSession, query_prefix: str, keys: list[str]) -> bool:
    """Replace the subtree with ``keys``; ``False`` if the session is no longer connected."""
    if session.status is not SessionStatus.CONNECTED:
        logger.info("search.dropped root=%s status=%s", session.name, session.status.value)
        return False
    session.tree_model.rebuild(session.node, keys, search_state(query_prefix))
    logger.info("search.applied root=%s prefix=%r keys=%d", session.name, query_prefix, len(keys))
    return True


def fail_search(session: ConnectionSession, error: BaseException) -> None:
    """Leave the subtree empty after a failed listing; the session stays connected."""
    logger.error("search.failed root=%s err=%s", session.name, error)
    if session.status is SessionStatus.CONNECTED:
        state = session.node.root_state or RootState.CONNECTED
        session.tree_model.rebuild(session.node, None, state)


def search(session: ConnectionSession, query_prefix: str) -> int:
    """Rebuild ``session``'s subtree from keys under ``query_prefix``.

    Returns the number of keys listed. Raises ``SessionStateError`` when the
    root is not connected and propagates listing failures after leaving the
    subtree empty.
    """
    session.require_client("search")
    reset_subtree(session.node)
    try:
        keys = fetch_search(session, query_prefix)
    except Exception as exc:
        fail_search(session, exc)
        raise
    complete_search(session, query_prefix, keys)
    return len(keys)


__all__ = [
    "search",
    "search_state",
    "fetch_search",
    "complete_search",
    "fail_search",
]
