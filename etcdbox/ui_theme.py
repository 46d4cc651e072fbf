"""ANSI palettes for the text tree and value views.

Syntax highlighting of values uses a separate Pygments style setting.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    reset: str
    tree_marker: str
    tree_all: str
    tree_dir: str
    tree_leaf: str
    tree_keyed_dir: str
    root_unconnected: str
    root_connected: str
    root_searching: str
    badge: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    tree_marker="\033[38;5;44m",
    tree_all="\033[1;38;5;252m",
    tree_dir="\033[1;34m",
    tree_leaf="\033[38;5;252m",
    tree_keyed_dir="\033[1;38;5;110m",
    root_unconnected="\033[2;38;5;250m",
    root_connected="\033[1;38;5;42m",
    root_searching="\033[1;38;5;214m",
    badge="\033[38;5;109m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    tree_marker="\033[38;5;39m",
    tree_all="\033[1;38;5;153m",
    tree_dir="\033[1;38;5;45m",
    tree_leaf="\033[38;5;252m",
    tree_keyed_dir="\033[1;38;5;117m",
    root_unconnected="\033[2;38;5;110m",
    root_connected="\033[1;38;5;84m",
    root_searching="\033[1;38;5;215m",
    badge="\033[38;5;73m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    tree_marker="",
    tree_all="",
    tree_dir="",
    tree_leaf="",
    tree_keyed_dir="",
    root_unconnected="",
    root_connected="",
    root_searching="",
    badge="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
