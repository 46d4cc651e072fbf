"""Tree-row and value rendering tests."""

from __future__ import annotations

import unittest
from dataclasses import fields

from etcdbox.namespace_tree import NamespaceTreeModel, RootState
from etcdbox.rendering import render_tree, render_value, sanitize_terminal_text
from etcdbox.ui_theme import DEFAULT_THEME, PLAIN_THEME, UITheme, normalize_theme_name, resolve_theme
from fake_store import EXAMPLE_DATA


def _root(keys, state: RootState = RootState.CONNECTED):
    model = NamespaceTreeModel(["local"])
    node = model.connection_root("local")
    assert node is not None
    model.rebuild(node, keys, state)
    return model, node


class RenderTreeTests(unittest.TestCase):
    def test_connected_root_renders_expanded_tree(self) -> None:
        _model, node = _root(sorted(EXAMPLE_DATA))

        self.assertEqual(
            render_tree(node, PLAIN_THEME),
            [
                "▾ local [connected]",
                "  ▾ a/",
                "    ▾ b/",
                "        c",
                "        d",
                "      e",
            ],
        )

    def test_searching_and_unconnected_badges(self) -> None:
        model, node = _root(["/x"], RootState.SEARCHING)
        model.insert_connection_root("idle")

        self.assertEqual(render_tree(node, PLAIN_THEME)[0], "▾ local [search]")
        self.assertEqual(
            render_tree(model.tree_root, PLAIN_THEME),
            ["▾ All/", "  ▾ local [search]", "      x", "  ▸ idle [unconnected]"],
        )

    def test_keyed_directory_and_empty_segment(self) -> None:
        _model, node = _root(["/a", "/a/b", "/c//d"])

        self.assertEqual(
            render_tree(node, PLAIN_THEME, include_self=False),
            [
                "▾ a/ [key]",
                "    b",
                "▾ c/",
                "  ▾ (empty)/",
                "      d",
            ],
        )

    def test_default_theme_emits_ansi(self) -> None:
        _model, node = _root(["/a"])

        rows = render_tree(node, DEFAULT_THEME)

        self.assertIn("\033[", rows[0])
        self.assertIn("local", rows[0])


class RenderValueTests(unittest.TestCase):
    def test_no_color_returns_decoded_text(self) -> None:
        self.assertEqual(render_value("/a/b/d", b'{"d": 1}', no_color=True), '{"d": 1}')

    def test_json_key_is_highlighted(self) -> None:
        rendered = render_value("/cfg/app.json", b'{"d": 1}')

        self.assertIn("\x1b[", rendered)
        self.assertFalse(rendered.endswith("\n"))

    def test_control_bytes_are_escaped(self) -> None:
        self.assertEqual(render_value("/k", b"ring\x07\x1b[2J", no_color=True), "ring\\x07\\x1b[2J")
        self.assertEqual(sanitize_terminal_text("a\tb\nc"), "a\tb\nc")

    def test_invalid_utf8_is_replaced(self) -> None:
        self.assertEqual(render_value("/k", b"ok\xff", no_color=True), "ok�")

    def test_empty_value(self) -> None:
        self.assertEqual(render_value("/k", b""), "")


class ThemeTests(unittest.TestCase):
    def test_palette_slots_are_the_ones_renderers_use(self) -> None:
        self.assertEqual(
            {slot.name for slot in fields(UITheme)},
            {
                "name",
                "reset",
                "tree_marker",
                "tree_all",
                "tree_dir",
                "tree_leaf",
                "tree_keyed_dir",
                "root_unconnected",
                "root_connected",
                "root_searching",
                "badge",
            },
        )

    def test_unknown_theme_falls_back_to_default(self) -> None:
        self.assertEqual(normalize_theme_name("Ocean"), "ocean")
        self.assertEqual(normalize_theme_name("nope"), "default")
        self.assertIs(resolve_theme("ocean", no_color=True), PLAIN_THEME)


if __name__ == "__main__":
    unittest.main()
