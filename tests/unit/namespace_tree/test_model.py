"""Tree-model query surface and mutation notification tests."""

from __future__ import annotations

import unittest

from etcdbox.namespace_tree import NamespaceTreeModel, NodeKind, RootState
from fake_store import RecordingListener, tree_shape


class NamespaceTreeModelTests(unittest.TestCase):
    def test_configured_roots_start_as_empty_unconnected_placeholders(self) -> None:
        model = NamespaceTreeModel(["prod", "dev"])

        self.assertEqual(model.root_count(), 1)
        tree_root = model.root_at(0)
        self.assertEqual(model.kind(tree_root), NodeKind.ROOT)
        self.assertEqual(model.label(tree_root), "All")
        self.assertIsNone(model.parent(tree_root))
        self.assertEqual(model.child_count(tree_root), 2)
        prod = model.child_at(tree_root, 0)
        self.assertEqual(model.label(prod), "prod")
        self.assertEqual(model.kind(prod), NodeKind.CONNECTION_ROOT)
        self.assertIs(prod.root_state, RootState.UNCONNECTED)
        self.assertEqual(model.child_count(prod), 0)
        self.assertIs(model.parent(prod), tree_root)
        self.assertEqual(model.connection_root_names(), ["prod", "dev"])

    def test_root_at_rejects_out_of_range_index(self) -> None:
        with self.assertRaises(IndexError):
            NamespaceTreeModel().root_at(1)

    def test_rebuild_replaces_subtree_and_publishes_one_reset(self) -> None:
        model = NamespaceTreeModel(["prod"])
        listener = RecordingListener()
        model.add_listener(listener)
        node = model.connection_root("prod")
        assert node is not None

        model.rebuild(node, ["/a/b", "/c"], RootState.CONNECTED)
        model.rebuild(node, ["/x"], RootState.SEARCHING)

        self.assertEqual(tree_shape(node), [(1, "x", "/x")])
        self.assertIs(node.root_state, RootState.SEARCHING)
        self.assertEqual(listener.events, [("reset", "prod"), ("reset", "prod")])

    def test_rebuild_without_keys_leaves_subtree_empty(self) -> None:
        model = NamespaceTreeModel(["prod"])
        node = model.connection_root("prod")
        assert node is not None
        model.rebuild(node, ["/a"], RootState.CONNECTED)

        model.rebuild(node, None, RootState.UNCONNECTED)

        self.assertEqual(node.children, [])
        self.assertIs(node.root_state, RootState.UNCONNECTED)

    def test_insert_and_remove_connection_roots_publish_events(self) -> None:
        model = NamespaceTreeModel(["prod"])
        listener = RecordingListener()
        model.add_listener(listener)

        inserted = model.insert_connection_root("dev")
        removed = model.remove_connection_root("prod")

        self.assertIs(model.connection_root("dev"), inserted)
        self.assertIsNotNone(removed)
        self.assertIsNone(model.connection_root("prod"))
        self.assertEqual(model.connection_root_names(), ["dev"])
        self.assertEqual(listener.events, [("inserted", "dev"), ("removed", "prod")])

    def test_remove_unknown_root_is_silent(self) -> None:
        model = NamespaceTreeModel(["prod"])
        listener = RecordingListener()
        model.add_listener(listener)

        self.assertIsNone(model.remove_connection_root("missing"))
        self.assertEqual(listener.events, [])

    def test_removed_listener_stops_receiving_events(self) -> None:
        model = NamespaceTreeModel()
        listener = RecordingListener()
        model.add_listener(listener)
        model.remove_listener(listener)

        model.insert_connection_root("dev")

        self.assertEqual(listener.events, [])


if __name__ == "__main__":
    unittest.main()
