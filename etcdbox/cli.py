"""Command-line front door for etcdbox.

Manages the configured roots and prints a root's key namespace as a tree,
optionally filtered by prefix, or a single key's value.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import DEFAULT_HOST, DEFAULT_PORT, RootConfig, RootRepository
from .errors import EtcdBoxError
from .logging_setup import DEFAULT_LOG_PATH, init_logging
from .rendering import DEFAULT_STYLE, render_tree, render_value
from .session import SessionManager, TaskHandle
from .store import connect_etcd
from .ui_theme import available_theme_names, resolve_theme

RESULT_POLL_SECONDS = 0.1


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="etcdbox",
        description="Browse etcd key namespaces as a tree.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to the roots config file.")
    parser.add_argument("--style", default=DEFAULT_STYLE, help="Pygments style name for values.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--log-level", default="WARNING", help="Console log level (default: WARNING).")
    parser.add_argument("--no-log-file", action="store_true", help="Do not write the debug log file.")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("roots", help="List configured roots.")

    add = commands.add_parser("add", help="Add a named root.")
    add.add_argument("name")
    add.add_argument("--host", default=DEFAULT_HOST)
    add.add_argument("--port", type=_positive_int, default=DEFAULT_PORT)
    add.add_argument("--username", default="")
    add.add_argument("--password", default="")

    remove = commands.add_parser("remove", help="Remove a named root.")
    remove.add_argument("name")

    tree = commands.add_parser("tree", help="Print a root's keys as a tree.")
    tree.add_argument("name", nargs="?", default=None, help="Root to connect (omit to list roots).")
    tree.add_argument("--prefix", default=None, help="Only show keys under this prefix.")

    get = commands.add_parser("get", help="Print the value stored at KEY.")
    get.add_argument("name")
    get.add_argument("key")
    return parser


def wait_for(manager: SessionManager, handle: TaskHandle) -> None:
    """Apply background results until ``handle`` completes; Ctrl-C cancels it."""
    try:
        while True:
            for outcome in manager.process_results(timeout=RESULT_POLL_SECONDS):
                if outcome.root_name != handle.request.root_name or outcome.kind is not handle.request.kind:
                    continue
                if outcome.error is not None:
                    raise outcome.error
                return
    except KeyboardInterrupt:
        manager.cancel(handle)
        raise SystemExit("Cancelled.") from None


def _run(args: argparse.Namespace, out) -> None:
    theme = resolve_theme(args.theme, no_color=args.no_color)
    repository = RootRepository.load(args.config, allow_missing=args.command == "add")
    manager = SessionManager(repository, connect_etcd)

    if args.command == "roots":
        for root in repository.snapshot().values():
            out.write(f"{root.name}\t{root.endpoint}\n")
        return

    if args.command == "add":
        root = RootConfig.from_address(args.name, args.host, args.port, args.username, args.password)
        manager.add_root(root)
        out.write(f"Added {root.name} ({root.endpoint})\n")
        return

    if args.command == "remove":
        manager.remove_root(args.name)
        out.write(f"Removed {args.name}\n")
        return

    if args.command == "tree" and args.name is None:
        out.write("\n".join(render_tree(manager.tree_model.tree_root, theme)) + "\n")
        return

    try:
        wait_for(manager, manager.connect_async(args.name))
        if args.command == "tree":
            if args.prefix is not None:
                wait_for(manager, manager.search_async(args.name, args.prefix))
            node = manager.tree_model.connection_root(args.name)
            assert node is not None
            out.write("\n".join(render_tree(node, theme)) + "\n")
        else:
            value = manager.get_value(args.name, args.key)
            rendered = render_value(args.key, value, args.style, no_color=args.no_color)
            out.write(rendered if rendered.endswith("\n") else rendered + "\n")
    finally:
        manager.close_all()


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run one command; errors exit with a message."""
    args = build_parser().parse_args(argv)
    init_logging(args.log_level, None if args.no_log_file else DEFAULT_LOG_PATH)
    try:
        _run(args, sys.stdout)
    except EtcdBoxError as exc:
        raise SystemExit(f"etcdbox: {exc}") from exc


if __name__ == "__main__":
    main()
