"""Which session actions apply to a tree node (context-menu availability)."""

from __future__ import annotations

from enum import Enum

from ..namespace_tree import NamespaceNode, NodeKind, RootState


class NodeAction(Enum):
    CONNECT = "connect"
    RECONNECT = "reconnect"
    DISCONNECT = "disconnect"
    SEARCH = "search"
    DELETE = "delete"


def available_actions(node: NamespaceNode) -> frozenset[NodeAction]:
    """Actions offered for ``node``: only connection roots have any."""
    if node.kind is not NodeKind.CONNECTION_ROOT:
        return frozenset()
    if node.root_state is RootState.UNCONNECTED:
        return frozenset({NodeAction.CONNECT, NodeAction.DELETE})
    return frozenset(
        {
            NodeAction.RECONNECT,
            NodeAction.DISCONNECT,
            NodeAction.SEARCH,
            NodeAction.DELETE,
        }
    )


__all__ = [
    "NodeAction",
    "available_actions",
]
