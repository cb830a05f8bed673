"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent


def run_cli_command(*args: str, env: dict[str, str] | None = None, timeout: int = 30) -> tuple[int, str, str]:
    """
    Run a CLI command and return exit code, stdout, stderr.

    Args:
        args: Arguments passed after 'python -m gapmap.cli.main'
        env: Extra environment variables for the subprocess
        timeout: Maximum time to wait

    Returns:
        Tuple of (exit_code, stdout, stderr)
    """
    result = subprocess.run(
        [sys.executable, "-m", "gapmap.cli.main", *map(str, args)],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        timeout=timeout,
        # Wide terminal so rich does not truncate usage lines
        env={**os.environ, "COLUMNS": "200", **(env or {})},
    )

    return result.returncode, result.stdout, result.stderr


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        """Main help should list every command."""
        code, stdout, stderr = run_cli_command("--help")

        assert code == 0, f"Help failed: {stderr}"
        for command in ("analyze", "path", "metrics"):
            assert command in stdout

    @pytest.mark.parametrize("command", ["analyze", "path", "metrics"])
    def test_command_help(self, command):
        code, stdout, stderr = run_cli_command(command, "--help")
        assert code == 0, f"{command} help failed: {stderr}"
        assert "Path to a JSON snapshot" in stdout


class TestAnalyzeCommand:
    def test_json_output(self, snapshot_file):
        code, stdout, stderr = run_cli_command("analyze", snapshot_file, "college_concept", "--json")

        assert code == 0, f"analyze failed: {stderr}"
        data = json.loads(stdout)
        assert data["current_node"]["id"] == "basic_vocabulary"
        assert data["recommended_path"][-1] == "college_concept"
        assert data["gap_level"] == "low"

    def test_table_output(self, snapshot_file):
        code, stdout, stderr = run_cli_command("analyze", snapshot_file, "middle_concept")
        assert code == 0, f"analyze failed: {stderr}"
        assert "Gap Analysis" in stdout
        assert "Recommendations" in stdout

    def test_unknown_target_exits_1(self, snapshot_file):
        code, stdout, _ = run_cli_command("analyze", snapshot_file, "missing_node")
        assert code == 1
        assert "Node not found" in stdout

    def test_bad_snapshot_exits_2(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("not json", encoding="utf-8")
        code, _, _ = run_cli_command("analyze", path, "college_concept")
        assert code == 2


class TestPathCommand:
    def test_alternatives_in_json(self, snapshot_file):
        code, stdout, stderr = run_cli_command(
            "path", snapshot_file, "basic_vocabulary", "college_concept", "--alternatives", "--json"
        )

        assert code == 0, f"path failed: {stderr}"
        data = json.loads(stdout)
        assert data["path"] == ["basic_vocabulary", "intermediate_vocabulary", "college_concept"]
        assert len(data["alternative_paths"]) == 2

    def test_heuristic_option(self, snapshot_file):
        code, stdout, stderr = run_cli_command(
            "path", snapshot_file, "basic_vocabulary", "elementary_concept", "--heuristic", "logarithmic"
        )
        assert code == 0, f"path failed: {stderr}"
        assert "Learning Path" in stdout


class TestMetricsCommand:
    def test_json_output(self, snapshot_file):
        code, stdout, stderr = run_cli_command(
            "metrics", snapshot_file, "elementary_concept", "middle_concept", "college_concept", "--json"
        )

        assert code == 0, f"metrics failed: {stderr}"
        data = json.loads(stdout)
        assert [a["target_node_id"] for a in data["analyses"]] == [
            "college_concept",
            "middle_concept",
            "elementary_concept",
        ]
        assert data["metrics"]["gap_distribution"] == {"low": 3, "medium": 0, "high": 0}

    def test_most_common_gaps_in_text_output(self, snapshot_file):
        code, stdout, stderr = run_cli_command(
            "metrics", snapshot_file, "college_concept", "college_concept", "elementary_concept"
        )
        assert code == 0, f"metrics failed: {stderr}"
        assert "Most common gaps: college_concept x2" in stdout


class TestPathSettings:
    """The path command falls back to GAPMAP_* settings for unset options."""

    def test_max_path_length_from_environment(self, snapshot_file):
        code, stdout, stderr = run_cli_command(
            "path", snapshot_file, "basic_vocabulary", "elementary_concept", "--json",
            env={"GAPMAP_MAX_PATH_LENGTH": "1"},
        )
        assert code == 0, f"path failed: {stderr}"
        assert json.loads(stdout)["is_fallback"] is True

    def test_cli_flag_overrides_environment(self, snapshot_file):
        code, stdout, stderr = run_cli_command(
            "path", snapshot_file, "basic_vocabulary", "elementary_concept", "--max-length", "20", "--json",
            env={"GAPMAP_MAX_PATH_LENGTH": "1"},
        )
        assert code == 0, f"path failed: {stderr}"
        assert json.loads(stdout)["is_fallback"] is False

    def test_alternatives_from_environment(self, snapshot_file):
        code, stdout, stderr = run_cli_command(
            "path", snapshot_file, "basic_vocabulary", "college_concept", "--json",
            env={"GAPMAP_INCLUDE_ALTERNATIVES": "true"},
        )
        assert code == 0, f"path failed: {stderr}"
        assert len(json.loads(stdout)["alternative_paths"]) == 2
