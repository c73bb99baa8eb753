# tests/test_settings.py

"""Tests for the Settings configuration class."""

import json
import unittest
from pathlib import Path

from src.config.settings import Settings


class TestSettings(unittest.TestCase):
    """Verify Settings constants and retailer registry."""

    def test_max_retries_is_positive(self) -> None:
        """MAX_RETRIES must be >= 1."""
        self.assertGreaterEqual(Settings.MAX_RETRIES, 1)

    def test_request_timeout_is_positive_int(self) -> None:
        """REQUEST_TIMEOUT must be a positive integer."""
        self.assertIsInstance(Settings.REQUEST_TIMEOUT, int)
        self.assertGreater(Settings.REQUEST_TIMEOUT, 0)

    def test_max_history_entries_non_negative(self) -> None:
        """MAX_HISTORY_ENTRIES must be >= 0."""
        self.assertGreaterEqual(Settings.MAX_HISTORY_ENTRIES, 0)

    def test_history_flag_is_bool(self) -> None:
        self.assertIsInstance(Settings.ENABLE_PRICE_HISTORY, bool)

    def test_each_retailer_has_required_keys(self) -> None:
        """Every retailer must have id, label, and domain keys."""
        for src in Settings.AVAILABLE_RETAILERS:
            with self.subTest(src=src.get("id", "?")):
                self.assertIn("id", src)
                self.assertIn("label", src)
                self.assertIn("domain", src)

    def test_retailer_ids_are_unique(self) -> None:
        """No duplicate retailer ids."""
        ids = [s["id"] for s in Settings.AVAILABLE_RETAILERS]
        self.assertEqual(len(ids), len(set(ids)))

    def test_selectors_file_covers_every_retailer(self) -> None:
        """selectors.json has price and title chains for each retailer."""
        with open(Settings.SELECTORS_PATH, encoding="utf-8") as f:
            selectors = json.load(f)
        for src in Settings.AVAILABLE_RETAILERS:
            with self.subTest(src=src["id"]):
                self.assertTrue(selectors[src["id"]]["price"])
                self.assertTrue(selectors[src["id"]]["title"])

    def test_paths_are_paths(self) -> None:
        self.assertIsInstance(Settings.DATA_FILE, Path)
        self.assertIsInstance(Settings.LOGS_DIR, Path)
        self.assertEqual(Settings.DATA_FILE.suffix, ".json")


if __name__ == "__main__":
    unittest.main()
