"""Tests for refbuild.logging: handler setup and the lookup trail."""

from __future__ import annotations

import logging
import tempfile
import unittest
from pathlib import Path

from history_test_helpers import action_dict, write_build

from refbuild.logging import get_logger, setup_logging
from refbuild.store import BuildStore


class TestSetupLogging(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.base = Path(self.tmpdir.name)

    def tearDown(self) -> None:
        logger = logging.getLogger("refbuild")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        self.tmpdir.cleanup()

    def test_console_levels(self) -> None:
        for kwargs, level in (
            ({}, logging.INFO),
            ({"verbose": True}, logging.DEBUG),
            ({"quiet": True}, logging.WARNING),
            ({"verbose": True, "quiet": True}, logging.DEBUG),
        ):
            with self.subTest(**kwargs):
                logger = setup_logging(**kwargs)
                self.assertEqual(len(logger.handlers), 1)
                self.assertEqual(logger.handlers[0].level, level)

    def test_child_logger_name(self) -> None:
        self.assertEqual(get_logger("history").name, "refbuild.history")

    def test_ignored_action_lines_reach_log_file(self) -> None:
        log_file = self.base / "refbuild.log"
        logger = setup_logging(quiet=True, log_file=log_file)
        self.assertEqual(len(logger.handlers), 2)

        build_dir = write_build(self.base / "builds", "main", 1, actions=[action_dict()])
        with (build_dir / "analysis.jsonl").open("a", encoding="utf-8") as f:
            f.write("[1, 2]\n")
        build = BuildStore(self.base / "builds").get("main", 1)
        assert build is not None
        self.assertEqual(len(build.actions), 1)

        for handler in logger.handlers:
            handler.flush()
        text = log_file.read_text(encoding="utf-8")
        self.assertIn("refbuild.store", text)
        self.assertIn("Ignoring non-object line 2", text)

    def test_repeated_setup_replaces_handlers(self) -> None:
        setup_logging(log_file=self.base / "first.log")
        logger = setup_logging()
        self.assertEqual(len(logger.handlers), 1)
        self.assertNotIsInstance(logger.handlers[0], logging.FileHandler)


if __name__ == "__main__":
    unittest.main()
