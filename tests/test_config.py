"""Tests for refbuild.config: lookup profiles."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

import yaml
from history_test_helpers import FakeBuild, make_action

from refbuild.config import (
    LookupConfig,
    config_from_profile,
    load_profile,
    validate_config,
)
from refbuild.history import ReferenceFilter


class TestLoadProfile(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.base = Path(self.tmpdir.name)

    def tearDown(self) -> None:
        self.tmpdir.cleanup()

    def test_loads_mapping(self) -> None:
        path = self.base / "profile.yaml"
        path.write_text(yaml.safe_dump({"analysis_id": "pylint", "job": "ci"}), encoding="utf-8")
        self.assertEqual(load_profile(path), {"analysis_id": "pylint", "job": "ci"})

    def test_empty_file(self) -> None:
        path = self.base / "empty.yaml"
        path.write_text("", encoding="utf-8")
        self.assertEqual(load_profile(path), {})

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_profile(self.base / "nope.yaml")

    def test_not_a_mapping(self) -> None:
        path = self.base / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with self.assertRaises(ValueError):
            load_profile(path)


class TestConfigFromProfile(unittest.TestCase):
    def test_defaults(self) -> None:
        config = config_from_profile({})
        self.assertIsNone(config.analysis_id)
        self.assertEqual(config.job, "main")
        self.assertEqual(config.builds_dir, Path("builds"))
        self.assertEqual(config.reference_filter, ReferenceFilter())

    def test_profile_values(self) -> None:
        config = config_from_profile(
            {
                "kind": "lint",
                "builds_dir": "/tmp/b",
                "job": "nightly",
                "require_overall_success": True,
                "ignore_analysis_outcome": True,
            }
        )
        self.assertEqual(config.kind, "lint")
        self.assertEqual(config.builds_dir, Path("/tmp/b"))
        self.assertEqual(config.job, "nightly")
        self.assertEqual(
            config.reference_filter,
            ReferenceFilter(require_overall_success=True, ignore_analysis_outcome=True),
        )

    def test_cli_overrides_win(self) -> None:
        config = config_from_profile(
            {"analysis_id": "pylint", "job": "nightly"},
            cli_overrides={"analysis_id": "ruff", "job": None},
        )
        self.assertEqual(config.analysis_id, "ruff")
        self.assertEqual(config.job, "nightly")

    def test_unknown_key(self) -> None:
        with self.assertRaises(ValueError) as ctx:
            config_from_profile({"analysis": "pylint"})
        self.assertIn("analysis", str(ctx.exception))

    def test_flags_must_be_booleans(self) -> None:
        for value in ("false", "no", 0, 1, ["true"]):
            with self.subTest(value=value):
                with self.assertRaises(ValueError) as ctx:
                    config_from_profile({"require_overall_success": value})
                self.assertIn("require_overall_success must be true or false", str(ctx.exception))
        with self.assertRaises(ValueError):
            config_from_profile({"ignore_analysis_outcome": "false"})

    def test_null_flag_is_false(self) -> None:
        config = config_from_profile({"require_overall_success": None})
        self.assertFalse(config.require_overall_success)


class TestSelectorFromConfig(unittest.TestCase):
    def setUp(self) -> None:
        self.lint = make_action(analysis_id="pylint", kind="lint")
        self.cov = make_action(analysis_id="coverage", kind="coverage")
        self.build = FakeBuild(number=1, actions=[self.lint, self.cov])

    def test_by_id(self) -> None:
        self.assertIs(LookupConfig(analysis_id="coverage").selector()(self.build), self.cov)

    def test_by_kind(self) -> None:
        self.assertIs(LookupConfig(kind="coverage").selector()(self.build), self.cov)

    def test_first_action(self) -> None:
        self.assertIs(LookupConfig().selector()(self.build), self.lint)


class TestValidateConfig(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.builds_dir = Path(self.tmpdir.name)

    def tearDown(self) -> None:
        self.tmpdir.cleanup()

    def test_valid(self) -> None:
        config = LookupConfig(analysis_id="pylint", builds_dir=self.builds_dir)
        self.assertEqual(validate_config(config), [])

    def test_id_and_kind(self) -> None:
        config = LookupConfig(analysis_id="pylint", kind="lint", builds_dir=self.builds_dir)
        errors = validate_config(config)
        self.assertEqual([e.field for e in errors], ["analysis_id"])
        self.assertEqual(errors[0].severity, "error")

    def test_neither_id_nor_kind_warns(self) -> None:
        errors = validate_config(LookupConfig(builds_dir=self.builds_dir))
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].severity, "warning")

    def test_empty_job(self) -> None:
        config = LookupConfig(analysis_id="pylint", builds_dir=self.builds_dir, job=" ")
        self.assertIn("job", [e.field for e in validate_config(config)])

    def test_missing_builds_dir(self) -> None:
        config = LookupConfig(analysis_id="pylint", builds_dir=self.builds_dir / "missing")
        self.assertIn("builds_dir", [e.field for e in validate_config(config)])


if __name__ == "__main__":
    unittest.main()
