"""Session operations over every configured root.

``SessionManager`` is the surface a presentation layer calls: it owns the
root registry, the tree model, and one ``ConnectionSession`` per root that
has been connected. Synchronous operations run inline; the ``*_async``
variants push network work to ``SessionTaskScheduler`` and
``process_results`` applies finished work on the calling thread.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import RootConfig, RootRepository
from ..errors import SessionStateError, UnknownRootError
from ..namespace_tree import NamespaceNode, NamespaceTreeModel, NodeKind, RootState
from ..store import StoreClientFactory, connect_etcd
from .actions import NodeAction, available_actions
from .connection import ConnectionSession, ConnectListing
from .scheduler import SessionTaskScheduler, TaskHandle, TaskKind, TaskResult
from .search import complete_search, fail_search, fetch_search, search
from .state import (
    DIAL_TIMEOUT_SECONDS,
    PROBE_TIMEOUT_SECONDS,
    QUERY_TIMEOUT_SECONDS,
    SessionStatus,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskOutcome:
    """What ``process_results`` did with one finished task."""

    root_name: str
    kind: TaskKind
    applied: bool
    cancelled: bool = False
    error: BaseException | None = None


class SessionManager:
    def __init__(
        self,
        repository: RootRepository,
        client_factory: StoreClientFactory = connect_etcd,
        *,
        tree_model: NamespaceTreeModel | None = None,
        scheduler: SessionTaskScheduler | None = None,
        dial_timeout: float = DIAL_TIMEOUT_SECONDS,
        probe_timeout: float = PROBE_TIMEOUT_SECONDS,
        query_timeout: float | None = QUERY_TIMEOUT_SECONDS,
    ) -> None:
        self.repository = repository
        self.client_factory = client_factory
        self.tree_model = tree_model if tree_model is not None else NamespaceTreeModel(repository.names())
        self.scheduler = scheduler if scheduler is not None else SessionTaskScheduler()
        self.dial_timeout = dial_timeout
        self.probe_timeout = probe_timeout
        self.query_timeout = query_timeout
        self._sessions: dict[str, ConnectionSession] = {}
        self._pending: dict[int, ConnectionSession] = {}

    # -- sessions ------------------------------------------------------

    def session(self, name: str) -> ConnectionSession | None:
        return self._sessions.get(name)

    def status(self, name: str) -> SessionStatus:
        session = self._sessions.get(name)
        return session.status if session is not None else SessionStatus.DISCONNECTED

    def _node(self, name: str) -> NamespaceNode:
        node = self.tree_model.connection_root(name)
        if node is None:
            raise UnknownRootError(name)
        return node

    def _session_for(self, name: str) -> ConnectionSession:
        session = self._sessions.get(name)
        if session is None:
            session = ConnectionSession(
                self.repository.get(name),
                self._node(name),
                self.tree_model,
                self.client_factory,
                dial_timeout=self.dial_timeout,
                probe_timeout=self.probe_timeout,
                query_timeout=self.query_timeout,
            )
            self._sessions[name] = session
        return session

    def _connected_session(self, name: str, operation: str) -> ConnectionSession:
        session = self._sessions.get(name)
        if session is None:
            self._node(name)
            raise SessionStateError(f"cannot {operation} {name!r}: root is disconnected")
        session.require_client(operation)
        return session

    def _require_idle(self, name: str, operation: str) -> None:
        """Reject a synchronous tree operation while a background task owns ``name``."""
        if self.scheduler.is_busy(name):
            raise SessionStateError(f"cannot {operation} {name!r}: a background task is in flight")

    # -- synchronous operations ----------------------------------------

    def connect(self, name: str) -> None:
        self._require_idle(name, "connect")
        self._session_for(name).connect()

    def disconnect(self, name: str) -> None:
        """Tear down ``name``'s session; repeated calls repeat the same harmless steps."""
        session = self._sessions.pop(name, None)
        if session is not None:
            session.disconnect()
            return
        self.tree_model.rebuild(self._node(name), None, RootState.UNCONNECTED)

    def reconnect(self, name: str) -> None:
        self._require_idle(name, "reconnect")
        self.disconnect(name)
        self.connect(name)

    def search(self, name: str, query_prefix: str) -> int:
        session = self._connected_session(name, "search")
        self._require_idle(name, "search")
        return search(session, query_prefix)

    def get_value(self, name: str, key: str) -> bytes:
        return self._connected_session(name, "read").get_value(key)

    def add_root(self, root: RootConfig) -> NamespaceNode:
        self.repository.add(root)
        return self.tree_model.insert_connection_root(root.name)

    def remove_root(self, name: str) -> None:
        self.repository.remove(name)
        session = self._sessions.pop(name, None)
        if session is not None:
            session.disconnect()
        self.tree_model.remove_connection_root(name)

    def close_all(self) -> None:
        for name in list(self._sessions):
            self.disconnect(name)

    # -- node-driven helpers -------------------------------------------

    def actions_for(self, node: NamespaceNode) -> frozenset[NodeAction]:
        return available_actions(node)

    def activate(self, node: NamespaceNode) -> tuple[str, bytes] | None:
        """Primary action on a node.

        An unconnected connection root connects; a node carrying a key returns
        ``(key, value)``; anything else returns ``None``.
        """
        if node.kind is NodeKind.CONNECTION_ROOT:
            if node.root_state is RootState.UNCONNECTED:
                self.connect(node.label)
            return None
        if node.full_key:
            return node.full_key, self.get_value(node.root_name, node.full_key)
        return None

    # -- background operations -----------------------------------------

    def connect_async(self, name: str) -> TaskHandle:
        session = self._session_for(name)
        session.begin_connect()
        try:
            handle = self.scheduler.submit(name, TaskKind.CONNECT, session.fetch_listing)
        except SessionStateError:
            session.abandon_connect()
            raise
        self._pending[handle.request.request_id] = session
        return handle

    def search_async(self, name: str, query_prefix: str) -> TaskHandle:
        session = self._connected_session(name, "search")
        handle = self.scheduler.submit(
            name,
            TaskKind.SEARCH,
            lambda: fetch_search(session, query_prefix),
            prefix=query_prefix,
        )
        self._pending[handle.request.request_id] = session
        return handle

    def cancel(self, handle: TaskHandle) -> None:
        """Detach from an in-flight task; its eventual result is discarded."""
        handle.cancel()
        session = self._pending.get(handle.request.request_id)
        if session is not None and handle.request.kind is TaskKind.CONNECT:
            session.abandon_connect()

    def process_results(self, timeout: float | None = 0.0) -> list[TaskOutcome]:
        """Apply finished background work; wait up to ``timeout`` for the first result.

        ``timeout=0`` only drains what is already complete; ``None`` waits
        indefinitely for one result.
        """
        results: list[TaskResult] = []
        if timeout is None or timeout > 0:
            first = self.scheduler.wait_result(timeout)
            if first is not None:
                results.append(first)
        results.extend(self.scheduler.drain_results())
        return [self._apply(result) for result in results]

    def _apply(self, result: TaskResult) -> TaskOutcome:
        request = result.request
        session = self._pending.pop(request.request_id)
        if request.kind is TaskKind.CONNECT:
            listing = result.value if isinstance(result.value, ConnectListing) else None
            if result.cancelled:
                session.abandon_connect(listing)
                return TaskOutcome(request.root_name, request.kind, applied=False, cancelled=True)
            if result.error is not None:
                session.fail_connect(result.error)
                return TaskOutcome(request.root_name, request.kind, applied=False, error=result.error)
            assert listing is not None
            applied = session.complete_connect(listing)
            return TaskOutcome(request.root_name, request.kind, applied=applied)

        if result.cancelled:
            logger.info("search.cancelled root=%s prefix=%r", request.root_name, request.prefix)
            return TaskOutcome(request.root_name, request.kind, applied=False, cancelled=True)
        if result.error is not None:
            fail_search(session, result.error)
            return TaskOutcome(request.root_name, request.kind, applied=False, error=result.error)
        keys = result.value if isinstance(result.value, list) else []
        applied = complete_search(session, request.prefix, keys)
        return TaskOutcome(request.root_name, request.kind, applied=applied)


__all__ = [
    "SessionManager",
    "TaskOutcome",
]
