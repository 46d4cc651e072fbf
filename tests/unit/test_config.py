"""Root registry persistence tests."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from etcdbox import config
from etcdbox.config import RootConfig, RootRepository, load_roots, save_roots
from etcdbox.errors import ConfigError, DuplicateNameError, UnknownRootError


class ConfigTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp = Path(self._tmp.name)
        self.config_path = self.tmp / "config.json"
        patcher = mock.patch.object(config, "CONFIG_PATH", self.config_path)
        patcher.start()
        self.addCleanup(patcher.stop)


class RootConfigTests(unittest.TestCase):
    def test_from_address_derives_endpoint(self) -> None:
        root = RootConfig.from_address(" prod ", " 10.0.0.1 ", 2380, "root", "pw")

        self.assertEqual(root.name, "prod")
        self.assertEqual(root.endpoint, "http://10.0.0.1:2380")
        self.assertEqual(root.username, "root")

    def test_from_address_validates_input(self) -> None:
        with self.assertRaises(ConfigError):
            RootConfig.from_address("  ")
        with self.assertRaises(ConfigError):
            RootConfig.from_address("prod", "")
        with self.assertRaises(ConfigError):
            RootConfig.from_address("prod", "10.0.0.1", 0)


class LoadSaveTests(ConfigTestCase):
    def test_round_trip_preserves_order_and_fields(self) -> None:
        roots = {
            "prod": RootConfig.from_address("prod", "10.0.0.1", 2379, "root", "pw"),
            "dev": RootConfig.from_address("dev"),
        }

        save_roots(roots)
        loaded = load_roots()

        self.assertEqual(list(loaded), ["prod", "dev"])
        self.assertEqual(loaded, roots)

    def test_capitalized_fields_and_float_port_are_accepted(self) -> None:
        self.config_path.write_text(
            json.dumps({"old": {"Host": "10.0.0.9", "Port": 2379.0, "Username": "", "Password": ""}}),
            encoding="utf-8",
        )

        loaded = load_roots()

        self.assertEqual(loaded["old"].endpoint, "http://10.0.0.9:2379")
        self.assertEqual(loaded["old"].port, 2379)

    def test_missing_file_is_an_error(self) -> None:
        with self.assertRaises(ConfigError):
            load_roots()

    def test_malformed_file_is_an_error(self) -> None:
        self.config_path.write_text("{not json", encoding="utf-8")

        with self.assertRaises(ConfigError):
            load_roots()

    def test_non_object_document_is_an_error(self) -> None:
        self.config_path.write_text("[]", encoding="utf-8")

        with self.assertRaises(ConfigError):
            load_roots()

    def test_entry_without_address_is_an_error(self) -> None:
        self.config_path.write_text(json.dumps({"bad": {"username": "x"}}), encoding="utf-8")

        with self.assertRaises(ConfigError):
            load_roots()

    def test_legacy_file_is_used_when_default_is_absent(self) -> None:
        legacy = self.tmp / "legacy.json"
        save_roots({"old": RootConfig.from_address("old")}, legacy)

        with mock.patch.object(config, "DEFAULT_CONFIG_PATH", self.config_path), mock.patch.object(
            config, "LEGACY_CONFIG_PATH", legacy
        ):
            loaded = load_roots()

        self.assertEqual(list(loaded), ["old"])


class RootRepositoryTests(ConfigTestCase):
    def test_add_persists_and_duplicate_leaves_file_unchanged(self) -> None:
        repository = RootRepository.load(allow_missing=True)
        self.assertEqual(repository.names(), [])

        repository.add(RootConfig.from_address("prod"))
        before = self.config_path.read_text(encoding="utf-8")
        with self.assertRaises(DuplicateNameError):
            repository.add(RootConfig.from_address("prod", "10.1.1.1"))

        self.assertEqual(self.config_path.read_text(encoding="utf-8"), before)
        self.assertEqual(repository.get("prod").host, "127.0.0.1")
        self.assertIn("prod", repository)

    def test_remove_persists(self) -> None:
        save_roots({"a": RootConfig.from_address("a"), "b": RootConfig.from_address("b")})
        repository = RootRepository.load()

        removed = repository.remove("a")

        self.assertEqual(removed.name, "a")
        self.assertEqual(list(load_roots()), ["b"])
        with self.assertRaises(UnknownRootError):
            repository.remove("a")

    def test_snapshot_is_detached(self) -> None:
        repository = RootRepository({"a": RootConfig.from_address("a")}, path=self.config_path)
        snapshot = repository.snapshot()

        repository.add(RootConfig.from_address("b"))

        self.assertEqual(list(snapshot), ["a"])
        self.assertEqual(repository.names(), ["a", "b"])

    def test_unwritable_path_raises_config_error(self) -> None:
        blocker = self.tmp / "file"
        blocker.write_text("", encoding="utf-8")
        repository = RootRepository(path=blocker / "config.json")

        with self.assertRaises(ConfigError):
            repository.add(RootConfig.from_address("a"))
        self.assertEqual(repository.names(), [])


if __name__ == "__main__":
    unittest.main()
