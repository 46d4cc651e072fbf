"""Presentation-facing tree model over all configured connection roots.

The model owns the synthetic ``All`` root and one connection-root node per
configured store. Readers use the query surface (``root_count``,
``child_at``...) and subscribe to mutation notifications; the only writers are
the sessions (subtree rebuilds) and the manager (adding/removing roots).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Protocol

from .build import build_subtree, reset_subtree
from .types import NamespaceNode, NodeKind, RootState

logger = logging.getLogger(__name__)

TREE_ROOT_LABEL = "All"


class TreeModelListener(Protocol):
    def item_inserted(self, node: NamespaceNode) -> None: ...

    def item_removed(self, node: NamespaceNode) -> None: ...

    def items_reset(self, node: NamespaceNode) -> None:
        """Consumers must drop any cached children of ``node``."""
        ...


class NamespaceTreeModel:
    def __init__(self, root_names: Iterable[str] = ()) -> None:
        self._lock = threading.RLock()
        self._listeners: list[TreeModelListener] = []
        self.tree_root = NamespaceNode(label=TREE_ROOT_LABEL, is_tree_root=True)
        for name in root_names:
            self.tree_root.append_child(_connection_root(name))

    # -- notifications -------------------------------------------------

    def add_listener(self, listener: TreeModelListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: TreeModelListener) -> None:
        self._listeners.remove(listener)

    def _publish_inserted(self, node: NamespaceNode) -> None:
        for listener in list(self._listeners):
            listener.item_inserted(node)

    def _publish_removed(self, node: NamespaceNode) -> None:
        for listener in list(self._listeners):
            listener.item_removed(node)

    def _publish_reset(self, node: NamespaceNode) -> None:
        for listener in list(self._listeners):
            listener.items_reset(node)

    # -- read-only query surface ---------------------------------------

    def root_count(self) -> int:
        return 1

    def root_at(self, index: int) -> NamespaceNode:
        if index != 0:
            raise IndexError(index)
        return self.tree_root

    @staticmethod
    def child_count(node: NamespaceNode) -> int:
        return len(node.children)

    @staticmethod
    def child_at(node: NamespaceNode, index: int) -> NamespaceNode:
        return node.children[index]

    @staticmethod
    def label(node: NamespaceNode) -> str:
        return node.label

    @staticmethod
    def kind(node: NamespaceNode) -> NodeKind:
        return node.kind

    @staticmethod
    def parent(node: NamespaceNode) -> NamespaceNode | None:
        return node.parent

    def connection_root_names(self) -> list[str]:
        with self._lock:
            return [child.label for child in self.tree_root.children]

    def connection_root(self, name: str) -> NamespaceNode | None:
        with self._lock:
            return self.tree_root.child(name)

    # -- mutation ------------------------------------------------------

    def insert_connection_root(self, name: str) -> NamespaceNode:
        with self._lock:
            node = self.tree_root.append_child(_connection_root(name))
        logger.debug("tree.root_inserted name=%s", name)
        self._publish_inserted(node)
        return node

    def remove_connection_root(self, name: str) -> NamespaceNode | None:
        with self._lock:
            node = self.tree_root.child(name)
            if node is None:
                return None
            reset_subtree(node)
            self.tree_root.remove_child(node)
        logger.debug("tree.root_removed name=%s", name)
        self._publish_removed(node)
        return node

    def rebuild(
        self,
        node: NamespaceNode,
        keys: Iterable[str] | None,
        root_state: RootState,
    ) -> None:
        """Replace ``node``'s subtree wholesale and publish one reset.

        ``keys=None`` leaves the subtree empty (disconnect / failed listing).
        """
        reset_subtree(node)
        count = 0
        if keys is not None:
            count = build_subtree(node, keys, node.label)
        node.root_state = root_state
        logger.debug(
            "tree.rebuilt root=%s keys=%d children=%d state=%s",
            node.label,
            count,
            len(node.children),
            root_state.value,
        )
        self._publish_reset(node)


def _connection_root(name: str) -> NamespaceNode:
    return NamespaceNode(label=name, root_name=name, root_state=RootState.UNCONNECTED)


__all__ = [
    "TREE_ROOT_LABEL",
    "TreeModelListener",
    "NamespaceTreeModel",
]
