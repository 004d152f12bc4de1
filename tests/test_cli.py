"""Tests for the Click CLI interface.

These tests verify that:
1. Each command parses its inputs and prints the requested report
2. --json and --out follow the output precedence rules
3. Input, graph and lookup errors exit with status 2
4. Environment variables are used as fallbacks
"""

import json
import tempfile
import unittest
from pathlib import Path

from click.testing import CliRunner

from pylock_inspect.cli.main import EXIT_INPUT_ERROR, InspectConfig, cli
from pylock_inspect.exceptions import ConfigurationError, InputNotFoundError

TEST_DATA = Path(__file__).parent / "test-data" / "pylock"

POETRY_LOCK = str(TEST_DATA / "poetry.lock")
UV_WORKSPACE_LOCK = str(TEST_DATA / "uv-workspace.lock")


class CLITestCase(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def invoke(self, args, env=None):
        env = {"PYLOCK_LOCK_FILE": None, "PYLOCK_PYPROJECT_FILE": None, "PYLOCK_INSPECT_LOG_LEVEL": None, **(env or {})}
        return self.runner.invoke(cli, args, env=env)


class TestCLIHelp(CLITestCase):
    """Test CLI help and version options."""

    def test_help_option(self):
        result = self.invoke(["--help"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Inspect Python lock files", result.output)
        for command in ("lock", "pyproject", "bundle"):
            self.assertIn(command, result.output)

    def test_short_help_option(self):
        result = self.invoke(["lock", "-h"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("--show-deps", result.output)
        self.assertIn("--pyproject", result.output)

    def test_version_option(self):
        result = self.invoke(["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("pylock-inspect", result.output)

    def test_invalid_log_level(self):
        result = self.invoke(["--log-level", "LOUD", "lock", "-l", POETRY_LOCK])
        self.assertEqual(result.exit_code, 2)


class TestLockCommand(CLITestCase):
    """Test the lock command."""

    def test_summary(self):
        result = self.invoke(["lock", "-l", POETRY_LOCK])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("=== lock data summary ===", result.output)
        self.assertIn("pkgList.length: 8", result.output)
        self.assertIn("rootList.length: 2", result.output)
        self.assertIn("modes: poetry=True uv=False hatch=False", result.output)

    def test_show_pkgs_and_deps(self):
        result = self.invoke(["lock", "-l", POETRY_LOCK, "--show-pkgs", "--show-deps"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("django@4.2  ref=pkg:pypi/django@4.2", result.output)
        self.assertIn("pkg:pypi/django@4.2 -> 3", result.output)

    def test_show_deps_by_name(self):
        result = self.invoke(["lock", "-l", POETRY_LOCK, "--show-deps", "--name", "Django"])

        self.assertEqual(result.exit_code, 0, result.output)
        node_json = result.output.split("=== dependenciesList ===\n", 1)[1]
        self.assertEqual(
            json.loads(node_json),
            {
                "ref": "pkg:pypi/django@4.2",
                "dependsOn": ["pkg:pypi/asgiref@3.8.1", "pkg:pypi/sqlparse@0.5.0", "pkg:pypi/tzdata@2024.1"],
            },
        )

    def test_duplicate_name_resolves_to_root(self):
        result = self.invoke(["lock", "-l", UV_WORKSPACE_LOCK, "--show-deps", "-n", "urllib3"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"ref": "pkg:pypi/urllib3@2.2.1"', result.output)

    def test_ref_wins_over_name(self):
        result = self.invoke(
            ["lock", "-l", POETRY_LOCK, "--show-deps", "--ref", "pkg:pypi/pytest@8.2.0", "--name", "django"]
        )

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"ref": "pkg:pypi/pytest@8.2.0"', result.output)
        self.assertNotIn('"ref": "pkg:pypi/django@4.2"', result.output)

    def test_json_to_stdout(self):
        result = self.invoke(["lock", "-l", POETRY_LOCK, "--json"])

        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(result.output)
        self.assertEqual(len(data["pkgList"]), 8)
        self.assertEqual(data["rootList"], ["pkg:pypi/django@4.2", "pkg:pypi/pytest@8.2.0"])
        self.assertTrue(data["poetryMode"])

    def test_json_with_out_writes_file_only(self):
        out = Path(self.tmpdir.name) / "poetry.lock.parsed.json"

        result = self.invoke(["lock", "-l", POETRY_LOCK, "--json", "-o", str(out)])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Wrote JSON:", result.output)
        self.assertNotIn('"pkgList"', result.output)
        self.assertEqual(len(json.loads(out.read_text(encoding="utf-8"))["pkgList"]), 8)

    def test_out_writes_selected_node(self):
        out = Path(self.tmpdir.name) / "django.deps.json"

        result = self.invoke(["lock", "-l", POETRY_LOCK, "--show-deps", "--name", "django", "-o", str(out)])

        self.assertEqual(result.exit_code, 0, result.output)
        node = json.loads(out.read_text(encoding="utf-8"))
        self.assertEqual(node["ref"], "pkg:pypi/django@4.2")
        self.assertEqual(len(node["dependsOn"]), 3)
        self.assertIn("=== dependenciesList ===", result.output)

    def test_repeated_exports_are_identical(self):
        first = Path(self.tmpdir.name) / "first.json"
        second = Path(self.tmpdir.name) / "second.json"

        self.invoke(["lock", "-l", UV_WORKSPACE_LOCK, "--json", "-o", str(first)])
        self.invoke(["lock", "-l", UV_WORKSPACE_LOCK, "--json", "-o", str(second)])

        self.assertEqual(first.read_bytes(), second.read_bytes())

    def test_lock_file_from_environment(self):
        result = self.invoke(["lock", "--show-pkgs"], env={"PYLOCK_LOCK_FILE": POETRY_LOCK})

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("pytest@8.2.0  ref=pkg:pypi/pytest@8.2.0", result.output)

    def test_with_pyproject(self):
        result = self.invoke(["lock", "-l", POETRY_LOCK, "-p", str(TEST_DATA / "pyproject_poetry.toml")])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("parentComponent: demo-poetry@0.1.0", result.output)
        self.assertIn("dependenciesList.length: 9", result.output)

    def test_missing_lock_file(self):
        result = self.invoke(["lock", "-l", str(Path(self.tmpdir.name) / "uv.lock")])

        self.assertEqual(result.exit_code, EXIT_INPUT_ERROR)
        self.assertIn("Lock file not found", result.output)

    def test_unknown_name(self):
        result = self.invoke(["lock", "-l", POETRY_LOCK, "--show-deps", "--name", "flask"])

        self.assertEqual(result.exit_code, EXIT_INPUT_ERROR)
        self.assertIn("No package found in pkgList with name: flask", result.output)

    def test_unknown_ref(self):
        result = self.invoke(["lock", "-l", POETRY_LOCK, "--show-deps", "--ref", "pkg:pypi/flask@3.0.0"])

        self.assertEqual(result.exit_code, EXIT_INPUT_ERROR)
        self.assertIn("pkg:pypi/flask@3.0.0", result.output)

    def test_unsupported_lock_format(self):
        path = Path(self.tmpdir.name) / "Pipfile.lock"
        path.write_text('{"_meta": {}}', encoding="utf-8")

        result = self.invoke(["lock", "-l", str(path)])

        self.assertEqual(result.exit_code, EXIT_INPUT_ERROR)
        self.assertIn("Error:", result.output)


    def test_lock_file_not_utf8(self):
        path = Path(self.tmpdir.name) / "poetry.lock"
        path.write_bytes(b'[[package]]\nname = "caf\xe9"\nversion = "1.0"\n')

        result = self.invoke(["lock", "-l", str(path)])

        self.assertEqual(result.exit_code, EXIT_INPUT_ERROR)
        self.assertIn("Error:", result.output)
        self.assertIsInstance(result.exception, SystemExit)

    def test_unknown_ref_without_show_deps_is_reported(self):
        with self.assertLogs("pylock_inspect", level="WARNING") as logs:
            result = self.invoke(["lock", "-l", POETRY_LOCK, "--ref", "pkg:pypi/djngo@4.2"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue(any("pkg:pypi/djngo@4.2" in message for message in logs.output))


class TestBundleCommand(CLITestCase):
    """Test the bundle command."""

    def test_show_deps_by_name(self):
        result = self.invoke(["bundle", str(TEST_DATA / "bundle.json"), "--show-deps", "--name", "DJANGO"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('"dependsOn": []', result.output)

    def test_json_round_trip(self):
        result = self.invoke(["bundle", str(TEST_DATA / "bundle.json"), "--json"])

        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(result.output)
        self.assertIsNone(data["parentComponent"])
        self.assertEqual(data["rootList"], ["pkg:pypi/django@4.2"])

    def test_dangling_edge(self):
        result = self.invoke(["bundle", str(TEST_DATA / "bundle-dangling.json")])

        self.assertEqual(result.exit_code, EXIT_INPUT_ERROR)
        self.assertIn("pkg:pypi/asgiref@3.8.1", result.output)

    def test_wrongly_shaped_bundle(self):
        path = Path(self.tmpdir.name) / "bundle.json"
        path.write_text('{"groupDepsKeys": ["pytest"], "pkgList": ["django"]}', encoding="utf-8")

        result = self.invoke(["bundle", str(path)])

        self.assertEqual(result.exit_code, EXIT_INPUT_ERROR)
        self.assertIn("Invalid bundle", result.output)

    def test_bundle_not_utf8(self):
        path = Path(self.tmpdir.name) / "bundle.json"
        path.write_bytes(b'{"pkgList": [{"name": "caf\xe9"}]}')

        result = self.invoke(["bundle", str(path)])

        self.assertEqual(result.exit_code, EXIT_INPUT_ERROR)
        self.assertIn("Invalid JSON", result.output)

    def test_missing_bundle(self):
        result = self.invoke(["bundle", str(Path(self.tmpdir.name) / "bundle.json")])

        self.assertEqual(result.exit_code, EXIT_INPUT_ERROR)
        self.assertIn("Bundle file not found", result.output)


class TestPyprojectCommand(CLITestCase):
    """Test the pyproject command."""

    HATCH = str(TEST_DATA / "pyproject_hatch.toml")

    def test_summary_sections(self):
        result = self.invoke(["pyproject", "-p", self.HATCH, "--show-direct", "--show-groups"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("=== pyproject summary ===", result.output)
        self.assertIn("parentComponent: hatch-demo@2.1.0", result.output)
        self.assertIn("pytest -> dev, test", result.output)
        self.assertIn("modes: poetry=False uv=False hatch=True", result.output)

    def test_out_writes_summary(self):
        out = Path(self.tmpdir.name) / "summary.json"

        result = self.invoke(["pyproject", "-p", self.HATCH, "-o", str(out)])

        self.assertEqual(result.exit_code, 0, result.output)
        summary = json.loads(out.read_text(encoding="utf-8"))
        self.assertEqual(summary["counts"]["directDepsKeys"], 2)
        self.assertEqual(summary["counts"]["groupDepsKeys"], 5)
        self.assertEqual(summary["parentComponent"]["bom-ref"], "pkg:pypi/hatch-demo@2.1.0")

    def test_json_with_out_writes_full_result(self):
        out = Path(self.tmpdir.name) / "pyproject.json"

        result = self.invoke(["pyproject", "-p", self.HATCH, "--json", "-o", str(out)])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertNotIn('"directDepsKeys"', result.output)
        data = json.loads(out.read_text(encoding="utf-8"))
        self.assertEqual(data["directDepsKeys"], {"click": True, "rich": True})

    def test_project_must_be_a_table(self):
        path = Path(self.tmpdir.name) / "pyproject.toml"
        path.write_text('project = "demo"\n', encoding="utf-8")

        result = self.invoke(["pyproject", "-p", str(path)])

        self.assertEqual(result.exit_code, EXIT_INPUT_ERROR)
        self.assertIn("must be a table", result.output)

    def test_pyproject_not_utf8(self):
        path = Path(self.tmpdir.name) / "pyproject.toml"
        path.write_bytes(b'[project]\nname = "caf\xe9"\n')

        result = self.invoke(["pyproject", "-p", str(path)])

        self.assertEqual(result.exit_code, EXIT_INPUT_ERROR)
        self.assertIn("Failed to parse", result.output)

    def test_missing_pyproject(self):
        result = self.invoke(["pyproject", "-p", str(Path(self.tmpdir.name) / "pyproject.toml")])

        self.assertEqual(result.exit_code, EXIT_INPUT_ERROR)
        self.assertIn("pyproject.toml not found", result.output)


class TestInspectConfig(unittest.TestCase):
    """Test InspectConfig validation."""

    def test_requires_an_input(self):
        with self.assertRaises(ConfigurationError):
            InspectConfig().validate()

    def test_rejects_two_inputs(self):
        config = InspectConfig(lock_file=Path(POETRY_LOCK), bundle_file=TEST_DATA / "bundle.json")
        with self.assertRaises(ConfigurationError):
            config.validate()

    def test_missing_pyproject(self):
        config = InspectConfig(lock_file=Path(POETRY_LOCK), pyproject_file=TEST_DATA / "missing.toml")
        with self.assertRaises(InputNotFoundError):
            config.validate()

    def test_ref_takes_precedence_over_name(self):
        config = InspectConfig(lock_file=Path(POETRY_LOCK), ref="pkg:pypi/django@4.2", name="pytest")
        config.validate()
        self.assertIsNone(config.name)
        self.assertEqual(config.ref, "pkg:pypi/django@4.2")

    def test_wants_node(self):
        self.assertTrue(InspectConfig(show_deps=True, name="django").wants_node)
        self.assertFalse(InspectConfig(show_deps=True).wants_node)
        self.assertFalse(InspectConfig(name="django").wants_node)


if __name__ == "__main__":
    unittest.main()
