"""Key-namespace tree: nodes built from flat slash-delimited store keys.

This package contains non-I/O tree primitives:
- node datatypes with ordered, label-indexed children
- incremental, idempotent subtree building from key listings
- the presentation-facing model with mutation notifications
"""

from __future__ import annotations

from .types import NamespaceNode, NodeKind, RootState
from .build import (
    KEY_SEPARATOR,
    build_subtree,
    directory_count,
    find_node,
    insert_key,
    iter_subtree,
    key_node_count,
    leaf_count,
    node_path,
    reset_subtree,
    split_key,
)
from .model import TREE_ROOT_LABEL, NamespaceTreeModel, TreeModelListener

__all__ = [
    "NamespaceNode",
    "NodeKind",
    "RootState",
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
    "TREE_ROOT_LABEL",
    "NamespaceTreeModel",
    "TreeModelListener",
]
