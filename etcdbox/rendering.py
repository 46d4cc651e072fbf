"""Text rendering of namespace trees and stored values.

Tree rows follow the file-tree conventions of a terminal pager (``▾``/``▸``
markers, two-space indentation). Values are decoded, stripped of terminal
control bytes and highlighted with Pygments.
"""

from __future__ import annotations

import re

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import TextLexer, get_lexer_for_filename, guess_lexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .namespace_tree import NamespaceNode, NodeKind, RootState, iter_subtree
from .ui_theme import DEFAULT_THEME, UITheme

DEFAULT_STYLE = "monokai"
EMPTY_LABEL = "(empty)"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


def display_label(node: NamespaceNode) -> str:
    return node.label if node.label else EMPTY_LABEL


def _root_badge(node: NamespaceNode) -> str:
    if node.root_state is RootState.SEARCHING:
        return "search"
    if node.root_state is RootState.CONNECTED:
        return "connected"
    return "unconnected"


def format_node_row(node: NamespaceNode, depth: int, theme: UITheme | None = None) -> str:
    """Render one tree row as ANSI-styled text."""
    active_theme = theme or DEFAULT_THEME
    reset = active_theme.reset
    marker_color = active_theme.tree_marker
    kind = node.kind
    indent = "  " * depth
    marker = "▾ " if node.children else "▸ "

    if kind is NodeKind.LEAF:
        # Align leaf names under the parent directory arrow column.
        return f"{indent}  {active_theme.tree_leaf}{display_label(node)}{reset}"

    if kind is NodeKind.ROOT:
        return f"{indent}{marker_color}{marker}{reset}{active_theme.tree_all}{node.label}/{reset}"

    if kind is NodeKind.CONNECTION_ROOT:
        color = {
            RootState.CONNECTED: active_theme.root_connected,
            RootState.SEARCHING: active_theme.root_searching,
        }.get(node.root_state, active_theme.root_unconnected)
        badge = f"{active_theme.badge} [{_root_badge(node)}]{reset}"
        return f"{indent}{marker_color}{marker}{reset}{color}{node.label}{reset}{badge}"

    if node.full_key:
        badge = f"{active_theme.badge} [key]{reset}"
        return f"{indent}{marker_color}{marker}{reset}{active_theme.tree_keyed_dir}{display_label(node)}/{reset}{badge}"
    return f"{indent}{marker_color}{marker}{reset}{active_theme.tree_dir}{display_label(node)}/{reset}"


def render_tree(node: NamespaceNode, theme: UITheme | None = None, *, include_self: bool = True) -> list[str]:
    """Render ``node`` and its fully expanded subtree as rows."""
    rows: list[str] = []
    offset = 0
    if include_self:
        rows.append(format_node_row(node, 0, theme))
    else:
        offset = -1
    for child, depth in iter_subtree(node):
        rows.append(format_node_row(child, depth + offset, theme))
    return rows


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def decode_value(value: bytes) -> str:
    return sanitize_terminal_text(value.decode("utf-8", errors="replace"))


def _normalize_style(style: str) -> str:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return DEFAULT_STYLE
    return style


def _lexer_for(key: str, text: str):
    name = key.rsplit("/", 1)[-1]
    try:
        return get_lexer_for_filename(name, text)
    except ClassNotFound:
        pass
    try:
        return guess_lexer(text)
    except ClassNotFound:
        return TextLexer()


def render_value(key: str, value: bytes, style: str = DEFAULT_STYLE, *, no_color: bool = False) -> str:
    """Decode ``value`` for display, highlighting by key name or content."""
    text = decode_value(value)
    if no_color or not text:
        return text
    formatter = TerminalFormatter(style=_normalize_style(style))
    rendered = highlight(text, _lexer_for(key, text), formatter)
    if not text.endswith("\n") and rendered.endswith("\n"):
        rendered = rendered[:-1]
    return rendered


__all__ = [
    "EMPTY_LABEL",
    "display_label",
    "format_node_row",
    "render_tree",
    "sanitize_terminal_text",
    "decode_value",
    "render_value",
]
