"""CLI command tests.

Runs ``etcdbox.cli.main`` against a temporary config file and an in-memory
store so every subcommand is exercised end to end without a network.
"""

from __future__ import annotations

import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from etcdbox import cli
from etcdbox.errors import ConnectionFailure, StoreConnectionError
from fake_store import EXAMPLE_DATA, FakeStore


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.config_path = Path(self._tmp.name) / "roots.json"
        self.store = FakeStore(EXAMPLE_DATA)
        patcher = mock.patch("etcdbox.cli.connect_etcd", self.store.factory)
        patcher.start()
        self.addCleanup(patcher.stop)

    def run_cli(self, *argv: str) -> str:
        stdout = io.StringIO()
        with mock.patch("sys.stdout", stdout):
            cli.main(["--no-log-file", "--no-color", "--config", str(self.config_path), *argv])
        return stdout.getvalue()

    def add_local(self) -> None:
        self.run_cli("add", "local", "--host", "10.0.0.5", "--port", "2379")


class RootCommandTests(CliTestCase):
    def test_add_then_list_roots(self) -> None:
        output = self.run_cli("add", "local", "--host", "10.0.0.5", "--port", "2380")

        self.assertEqual(output, "Added local (http://10.0.0.5:2380)\n")
        self.assertEqual(self.run_cli("roots"), "local\thttp://10.0.0.5:2380\n")
        saved = json.loads(self.config_path.read_text(encoding="utf-8"))
        self.assertEqual(saved["local"]["port"], 2380)

    def test_duplicate_add_exits_with_message(self) -> None:
        self.add_local()

        with self.assertRaises(SystemExit) as caught:
            self.run_cli("add", "local")

        self.assertIn("already exists", str(caught.exception.code))

    def test_remove_root(self) -> None:
        self.add_local()
        self.run_cli("add", "other")

        self.assertEqual(self.run_cli("remove", "local"), "Removed local\n")
        self.assertEqual(self.run_cli("roots"), "other\thttp://127.0.0.1:2379\n")

    def test_missing_config_exits_with_message(self) -> None:
        with self.assertRaises(SystemExit) as caught:
            self.run_cli("roots")

        self.assertIn("config file not found", str(caught.exception.code))

    def test_invalid_port_is_rejected_by_parser(self) -> None:
        with mock.patch("sys.stderr", io.StringIO()), self.assertRaises(SystemExit) as caught:
            self.run_cli("add", "local", "--port", "0")

        self.assertEqual(caught.exception.code, 2)


class TreeCommandTests(CliTestCase):
    def test_tree_without_name_lists_unconnected_roots(self) -> None:
        self.add_local()

        self.assertEqual(self.run_cli("tree"), "▾ All/\n  ▸ local [unconnected]\n")
        self.assertEqual(self.store.clients, [])

    def test_tree_prints_full_namespace(self) -> None:
        self.add_local()

        output = self.run_cli("tree", "local")

        self.assertEqual(
            output.splitlines(),
            ["▾ local [connected]", "  ▾ a/", "    ▾ b/", "        c", "        d", "      e"],
        )
        self.assertEqual(self.store.clients[0].endpoint, "http://10.0.0.5:2379")
        self.assertTrue(self.store.clients[0].closed)

    def test_tree_with_prefix_prints_filtered_namespace(self) -> None:
        self.add_local()

        output = self.run_cli("tree", "local", "--prefix", "/a/b")

        self.assertEqual(
            output.splitlines(),
            ["▾ local [search]", "  ▾ a/", "    ▾ b/", "        c", "        d"],
        )
        self.assertEqual(self.store.clients[0].prefix_calls, ["/", "/a/b"])

    def test_unknown_root_exits_with_message(self) -> None:
        self.add_local()

        with self.assertRaises(SystemExit) as caught:
            self.run_cli("tree", "missing")

        self.assertIn("unknown root", str(caught.exception.code))

    def test_connect_failure_exits_with_reason(self) -> None:
        self.add_local()
        self.store.probe_error = StoreConnectionError(ConnectionFailure.UNREACHABLE, "connection refused")

        with self.assertRaises(SystemExit) as caught:
            self.run_cli("tree", "local")

        self.assertIn("unreachable: connection refused", str(caught.exception.code))


class GetCommandTests(CliTestCase):
    def test_get_prints_value(self) -> None:
        self.add_local()

        self.assertEqual(self.run_cli("get", "local", "/a/b/d"), '{"d": 1}\n')
        self.assertTrue(self.store.clients[0].closed)

    def test_get_missing_key_exits_with_message(self) -> None:
        self.add_local()

        with self.assertRaises(SystemExit) as caught:
            self.run_cli("get", "local", "/missing")

        self.assertIn("key not found", str(caught.exception.code))


if __name__ == "__main__":
    unittest.main()
