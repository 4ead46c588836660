"""Tests for the Click CLI interface.

These tests verify that:
1. Single, multi-path and aggregate runs produce the expected JSON shape
2. Environment variables are used as fallbacks
3. Configuration, registry and scan failures exit with status 1
4. Help and version options work
"""

import json
import tempfile
import unittest
from importlib import import_module
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from tech_detector.cli.main import TECH_DETECTOR_VERSION, build_config, cli
from tech_detector.exceptions import ConfigurationError

cli_main_module = import_module("tech_detector.cli.main")


def _make_project(root: Path, files: dict) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


class TestCLIHelp(unittest.TestCase):
    """Test CLI help and version options."""

    def setUp(self):
        self.runner = CliRunner()

    def test_help_option(self):
        result = self.runner.invoke(cli, ["--help"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Detect the technology stack", result.output)
        self.assertIn("--aggregate", result.output)
        self.assertIn("--compact", result.output)

    def test_short_help_option(self):
        result = self.runner.invoke(cli, ["-h"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Detect the technology stack", result.output)

    def test_version_option(self):
        result = self.runner.invoke(cli, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("tech-detector", result.output)
        self.assertIn(TECH_DETECTOR_VERSION, result.output)

    def test_no_args_shows_help(self):
        result = self.runner.invoke(cli, [])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Usage:", result.output)


class TestCLIScan(unittest.TestCase):
    """Test scan output."""

    def setUp(self):
        self.runner = CliRunner()
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.base = Path(self.tmp.name)
        self.python_project = _make_project(
            self.base / "backend",
            {"requirements.txt": "Django==4.2.7\n", "Dockerfile": "FROM python:3.11-slim\n"},
        )
        self.node_project = _make_project(
            self.base / "frontend",
            {"package.json": json.dumps({"dependencies": {"react": "^18.2.0"}})},
        )

    def test_single_path(self):
        result = self.runner.invoke(cli, [str(self.python_project)])

        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(result.stdout)
        self.assertEqual(data["projectPath"], str(self.python_project.resolve()))
        self.assertEqual(data["languages"], ["Python"])
        self.assertIn("Django", data["frameworks"])
        self.assertIn("Docker", data["infrastructure"])
        self.assertIn({"name": "Django", "version": None}, data["finalResult"])
        self.assertIn("scannedAt", data)

    def test_compact(self):
        result = self.runner.invoke(cli, ["-c", str(self.python_project)])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(len(result.stdout.strip().splitlines()), 1)

    def test_multiple_paths(self):
        missing = self.base / "missing"
        result = self.runner.invoke(
            cli, [str(self.python_project), str(missing), "--path", str(self.node_project)]
        )

        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(result.stdout)
        self.assertEqual(list(data), [str(self.python_project), str(self.node_project)])
        self.assertIn("React", data[str(self.node_project)]["frameworks"])

    def test_aggregate(self):
        result = self.runner.invoke(cli, ["--aggregate", str(self.base)])

        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(result.stdout)
        self.assertEqual(sorted(data), ["backend", "frontend"])
        self.assertEqual(data["frontend"]["languages"], ["JavaScript"])

    def test_output_file(self):
        output = self.base / "result.json"

        result = self.runner.invoke(cli, [str(self.node_project), "-o", str(output)])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(result.stdout, "")
        self.assertIn("React", json.loads(output.read_text())["frameworks"])

    def test_summary(self):
        result = self.runner.invoke(cli, [str(self.node_project), "--summary"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Technology Detection", result.stderr)
        json.loads(result.stdout)

    def test_summary_env_var(self):
        result = self.runner.invoke(cli, [str(self.node_project)], env={"TECH_DETECTOR_SUMMARY": "true"})

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Technology Detection", result.stderr)


class TestCLIEnvVarFallback(unittest.TestCase):
    """Test that CLI falls back to environment variables."""

    def setUp(self):
        self.runner = CliRunner()
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.base = Path(self.tmp.name)
        self.project = _make_project(self.base / "app", {"requirements.txt": "flask==3.0.0\n"})

    def test_registry_env_var(self):
        registry = self.base / "registry.json"
        registry.write_text(json.dumps({"frameworks": {"Flask (custom)": {"keywords": ["flask"]}}}))

        result = self.runner.invoke(cli, [str(self.project)], env={"TECH_DETECTOR_REGISTRY": str(registry)})

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(list(json.loads(result.stdout)["frameworks"]), ["Flask (custom)"])

    def test_cli_argument_overrides_env_var(self):
        env_registry = self.base / "env.json"
        env_registry.write_text(json.dumps({"frameworks": {"From env": {"keywords": ["flask"]}}}))
        cli_registry = self.base / "cli.json"
        cli_registry.write_text(json.dumps({"frameworks": {"From cli": {"keywords": ["flask"]}}}))

        result = self.runner.invoke(
            cli,
            [str(self.project), "--registry", str(cli_registry)],
            env={"TECH_DETECTOR_REGISTRY": str(env_registry)},
        )

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(list(json.loads(result.stdout)["frameworks"]), ["From cli"])

    @patch.object(cli_main_module, "run_detection", return_value={})
    def test_numeric_env_vars(self, mock_run):
        self.runner.invoke(
            cli,
            [str(self.project), str(self.base)],
            env={"TECH_DETECTOR_MAX_FILES": "50", "TECH_DETECTOR_WORKERS": "4", "LOG_LEVEL": "debug"},
        )

        mock_run.assert_called_once()
        config = mock_run.call_args[0][0]
        self.assertEqual(config.max_files, 50)
        self.assertEqual(config.workers, 4)
        self.assertEqual(config.log_level, "DEBUG")


class TestCLIErrors(unittest.TestCase):
    """Test exit codes for failures."""

    def setUp(self):
        self.runner = CliRunner()
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.base = Path(self.tmp.name)

    def test_single_missing_path(self):
        result = self.runner.invoke(cli, [str(self.base / "missing")])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error", result.output)

    def test_missing_registry(self):
        result = self.runner.invoke(cli, [str(self.base), "--registry", str(self.base / "nope.json")])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Registry file not found", result.output)

    def test_invalid_max_files(self):
        result = self.runner.invoke(cli, [str(self.base), "--max-files", "0"])
        self.assertEqual(result.exit_code, 1)
        self.assertIn("max_files", result.output)

    def test_aggregate_with_two_paths(self):
        result = self.runner.invoke(cli, ["--aggregate", str(self.base), "--path", str(self.base / "other")])
        self.assertEqual(result.exit_code, 1)

    def test_aggregate_root_missing(self):
        result = self.runner.invoke(cli, ["--aggregate", str(self.base / "missing")])
        self.assertEqual(result.exit_code, 1)

    def test_invalid_log_level(self):
        result = self.runner.invoke(cli, [str(self.base), "--log-level", "chatty"])
        self.assertNotEqual(result.exit_code, 0)


class TestBuildConfig(unittest.TestCase):
    """Test build_config."""

    def test_merges_and_dedups_paths(self):
        config = build_config(("a", "b"), ("b", "c"), None, False, False, 100, 1, "WARNING", False, None)
        self.assertEqual(config.paths, ["a", "b", "c"])

    def test_invalid(self):
        with self.assertRaises(ConfigurationError):
            build_config((), (), None, False, False, 100, 1, "WARNING", False, None)


if __name__ == "__main__":
    unittest.main()
