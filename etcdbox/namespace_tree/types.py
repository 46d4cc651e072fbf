"""Node datatypes for the key namespace tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class NodeKind(Enum):
    ROOT = "root"
    CONNECTION_ROOT = "connection_root"
    DIRECTORY = "directory"
    LEAF = "leaf"


class RootState(Enum):
    """Display state of a connection-root node."""

    UNCONNECTED = "unconnected"
    CONNECTED = "connected"
    SEARCHING = "searching"


@dataclass(eq=False)
class NamespaceNode:
    """One tree node: synthetic root, connection root, directory, or leaf.

    ``parent`` is a back-reference only; a node is owned by its parent's
    ``children`` list. ``_index`` mirrors ``children`` by label so sibling
    lookup stays constant time while ``children`` keeps first-seen order.
    """

    label: str
    full_key: str = ""
    root_name: str = ""
    parent: NamespaceNode | None = field(default=None, repr=False)
    root_state: RootState | None = None
    is_tree_root: bool = False
    children: list[NamespaceNode] = field(default_factory=list, init=False, repr=False)
    _index: dict[str, NamespaceNode] = field(default_factory=dict, init=False, repr=False)

    @property
    def kind(self) -> NodeKind:
        if self.is_tree_root:
            return NodeKind.ROOT
        if self.root_state is not None:
            return NodeKind.CONNECTION_ROOT
        if self.full_key and not self.children:
            return NodeKind.LEAF
        return NodeKind.DIRECTORY

    def child(self, label: str) -> NamespaceNode | None:
        return self._index.get(label)

    def append_child(self, child: NamespaceNode) -> NamespaceNode:
        """Attach ``child`` under this node; labels must be unique per parent."""
        if child.label in self._index:
            raise ValueError(f"duplicate child label {child.label!r} under {self.label!r}")
        child.parent = self
        self.children.append(child)
        self._index[child.label] = child
        return child

    def remove_child(self, child: NamespaceNode) -> None:
        if self._index.get(child.label) is not child:
            raise ValueError(f"{child.label!r} is not a child of {self.label!r}")
        del self._index[child.label]
        self.children.remove(child)
        child.parent = None

    def clear_children(self) -> None:
        for child in self.children:
            child.parent = None
        self.children = []
        self._index = {}


__all__ = [
    "NodeKind",
    "RootState",
    "NamespaceNode",
]
