"""Per-root connection session: owns the store client and drives tree rebuilds."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from ..config import RootConfig
from ..errors import SessionStateError
from ..namespace_tree import NamespaceNode, NamespaceTreeModel, RootState
from ..store import StoreClient, StoreClientFactory
from .state import (
    DIAL_TIMEOUT_SECONDS,
    FULL_NAMESPACE_PREFIX,
    PROBE_TIMEOUT_SECONDS,
    QUERY_TIMEOUT_SECONDS,
    SessionStatus,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectListing:
    """Outcome of the network phase of a connect attempt."""

    client: StoreClient
    keys: list[str]


def close_client(client: StoreClient, root_name: str) -> None:
    """Close ``client``; a failing close is logged, never raised over the caller's error."""
    try:
        client.close()
    except Exception:
        logger.warning("session.close_failed root=%s", root_name, exc_info=True)


class ConnectionSession:
    """Connection state machine for one configured root.

    ``connect`` is split into ``begin_connect`` (state guard),
    ``fetch_listing`` (network only, safe on a worker thread) and
    ``complete_connect`` / ``fail_connect`` / ``abandon_connect`` (state and
    tree mutation, run on the coordinating thread).
    """

    def __init__(
        self,
        root: RootConfig,
        node: NamespaceNode,
        tree_model: NamespaceTreeModel,
        client_factory: StoreClientFactory,
        *,
        dial_timeout: float = DIAL_TIMEOUT_SECONDS,
        probe_timeout: float = PROBE_TIMEOUT_SECONDS,
        query_timeout: float | None = QUERY_TIMEOUT_SECONDS,
    ) -> None:
        self.root = root
        self.node = node
        self.tree_model = tree_model
        self.client_factory = client_factory
        self.dial_timeout = dial_timeout
        self.probe_timeout = probe_timeout
        self.query_timeout = query_timeout
        self.status = SessionStatus.DISCONNECTED
        self.client: StoreClient | None = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.root.name

    def require_client(self, operation: str) -> StoreClient:
        if self.status is not SessionStatus.CONNECTED or self.client is None:
            raise SessionStateError(f"cannot {operation} {self.name!r}: root is {self.status.value}")
        return self.client

    def begin_connect(self) -> None:
        with self._lock:
            if self.status in (SessionStatus.CONNECTING, SessionStatus.CONNECTED):
                raise SessionStateError(f"root {self.name!r} is already {self.status.value}")
            self.status = SessionStatus.CONNECTING
        logger.info("session.connecting root=%s endpoint=%s", self.name, self.root.endpoint)

    def fetch_listing(self) -> ConnectListing:
        """Create a client, probe liveness, and list the full namespace.

        Touches no session or tree state. A client created here is closed
        again if any later step fails.
        """
        client: StoreClient | None = None
        try:
            client = self.client_factory(
                self.root.endpoint,
                self.root.username,
                self.root.password,
                self.dial_timeout,
            )
            client.probe(self.root.endpoint, self.probe_timeout)
            keys = client.get_by_prefix(FULL_NAMESPACE_PREFIX, keys_only=True, timeout=self.query_timeout)
        except Exception:
            if client is not None:
                close_client(client, self.name)
            raise
        return ConnectListing(client=client, keys=list(keys))

    def complete_connect(self, listing: ConnectListing) -> bool:
        """Install the client and rebuild the subtree; ``False`` if the attempt was dropped."""
        with self._lock:
            if self.status is not SessionStatus.CONNECTING:
                stale = True
            else:
                stale = False
                self.client = listing.client
                self.status = SessionStatus.CONNECTED
        if stale:
            logger.info("session.connect_dropped root=%s status=%s", self.name, self.status.value)
            close_client(listing.client, self.name)
            return False
        self.tree_model.rebuild(self.node, listing.keys, RootState.CONNECTED)
        logger.info("session.connected root=%s keys=%d", self.name, len(listing.keys))
        return True

    def fail_connect(self, error: BaseException) -> None:
        with self._lock:
            if self.status is not SessionStatus.CONNECTING:
                return
            self.status = SessionStatus.FAILED
        logger.error("session.connect_failed root=%s err=%s", self.name, error)
        self.tree_model.rebuild(self.node, None, RootState.UNCONNECTED)
        self.status = SessionStatus.DISCONNECTED

    def abandon_connect(self, listing: ConnectListing | None = None) -> None:
        """Drop a cancelled attempt: close any handle it produced, leave the tree alone."""
        if listing is not None:
            close_client(listing.client, self.name)
        with self._lock:
            if self.status is SessionStatus.CONNECTING:
                self.status = SessionStatus.DISCONNECTED
                logger.info("session.connect_cancelled root=%s", self.name)

    def connect(self) -> None:
        """Run a full connect inline; errors propagate after the session returns to disconnected."""
        self.begin_connect()
        try:
            listing = self.fetch_listing()
        except Exception as exc:
            self.fail_connect(exc)
            raise
        self.complete_connect(listing)

    def disconnect(self) -> None:
        """Empty the subtree and release the client. Safe to repeat."""
        with self._lock:
            client = self.client
            self.client = None
            self.status = SessionStatus.DISCONNECTED
        if client is not None:
            close_client(client, self.name)
        self.tree_model.rebuild(self.node, None, RootState.UNCONNECTED)
        logger.info("session.disconnected root=%s", self.name)

    def reconnect(self) -> None:
        self.disconnect()
        self.connect()

    def get_value(self, key: str) -> bytes:
        client = self.require_client("read")
        value = client.get_value(key, timeout=self.query_timeout)
        logger.debug("session.get_value root=%s key=%r bytes=%d", self.name, key, len(value))
        return value


__all__ = [
    "ConnectListing",
    "ConnectionSession",
    "close_client",
]
