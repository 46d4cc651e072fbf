"""Build and query hierarchical node trees from flat slash-delimited keys."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .types import NamespaceNode, NodeKind

KEY_SEPARATOR = "/"


def split_key(key: str) -> list[str]:
    """Return path segments of ``key`` after stripping one leading separator.

    Empty segments are kept (``"/a//b"`` -> ``["a", "", "b"]``) so distinct
    keys never collapse onto the same node.
    """
    if key.startswith(KEY_SEPARATOR):
        key = key[len(KEY_SEPARATOR):]
    return key.split(KEY_SEPARATOR)


def insert_key(node: NamespaceNode, key: str, root_name: str) -> NamespaceNode:
    """Insert one key below ``node`` and return the node that carries it.

    Missing intermediate directories are created and existing children with a
    matching label are reused, so inserting the same key twice is a no-op.
    """
    current = node
    for segment in split_key(key):
        child = current.child(segment)
        if child is None:
            child = current.append_child(NamespaceNode(label=segment, root_name=root_name))
        current = child
    current.full_key = key
    return current


def build_subtree(node: NamespaceNode, keys: Iterable[str], root_name: str | None = None) -> int:
    """Populate ``node`` from ``keys`` in input order; return number of keys consumed."""
    owner = node.root_name if root_name is None else root_name
    count = 0
    for key in keys:
        insert_key(node, key, owner)
        count += 1
    return count


def reset_subtree(node: NamespaceNode) -> None:
    """Discard every descendant of ``node``. Old child references become stale."""
    node.clear_children()


def iter_subtree(node: NamespaceNode) -> Iterator[tuple[NamespaceNode, int]]:
    """Yield ``(descendant, depth)`` pairs depth-first, excluding ``node`` itself."""
    stack: list[tuple[NamespaceNode, int]] = [(child, 1) for child in reversed(node.children)]
    while stack:
        current, depth = stack.pop()
        yield current, depth
        stack.extend((child, depth + 1) for child in reversed(current.children))


def leaf_count(node: NamespaceNode) -> int:
    return sum(1 for child, _depth in iter_subtree(node) if child.kind is NodeKind.LEAF)


def directory_count(node: NamespaceNode) -> int:
    return sum(1 for child, _depth in iter_subtree(node) if child.kind is NodeKind.DIRECTORY)


def key_node_count(node: NamespaceNode) -> int:
    """Count descendants carrying a store key (leaves plus keyed directories)."""
    return sum(1 for child, _depth in iter_subtree(node) if child.full_key)


def find_node(node: NamespaceNode, key: str) -> NamespaceNode | None:
    """Walk ``key``'s segments below ``node``; return the matching node or ``None``."""
    current: NamespaceNode | None = node
    for segment in split_key(key):
        assert current is not None
        current = current.child(segment)
        if current is None:
            return None
    return current


def node_path(node: NamespaceNode) -> list[str]:
    """Labels from the owning connection root (exclusive) down to ``node``."""
    labels: list[str] = []
    current: NamespaceNode | None = node
    while current is not None and current.kind not in (NodeKind.CONNECTION_ROOT, NodeKind.ROOT):
        labels.append(current.label)
        current = current.parent
    labels.reverse()
    return labels


__all__ = [
    "KEY_SEPARATOR",
    "split_key",
    "insert_key",
    "build_subtree",
    "reset_subtree",
    "iter_subtree",
    "leaf_count",
    "directory_count",
    "key_node_count",
    "find_node",
    "node_path",
]
