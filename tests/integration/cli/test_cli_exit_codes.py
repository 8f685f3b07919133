"""Integration tests for CLI exit codes.

Tests verify that:
- Stable exit codes (0,2,5,6) are returned
- Errors are reported in the JSON envelope with the exit code
"""

import json
from pathlib import Path

import pytest

from ledgerlens.cli import ExitCode, main


class TestExitCodes:
    """Test stable exit codes."""

    def test_success_exit_code(self, expenses_file: Path):
        assert main(["query", str(expenses_file), "--json"]) == ExitCode.SUCCESS

    def test_io_error_exit_code(self, tmp_path: Path, capsys):
        """Missing input file returns exit code 5."""
        exit_code = main(["query", str(tmp_path / "missing.json"), "--json"])

        result = json.loads(capsys.readouterr().out)
        assert exit_code == ExitCode.IO_ERROR
        assert result["status"] == "error"
        assert result["meta"]["exit_code"] == 5

    def test_malformed_json_exit_code(self, tmp_path: Path):
        path = tmp_path / "broken.json"
        path.write_text("[{")

        assert main(["query", str(path), "--json"]) == ExitCode.VALIDATION_ERROR

    def test_malformed_yaml_exit_code(self, tmp_path: Path):
        path = tmp_path / "broken.yaml"
        path.write_text("records: [unclosed\n")

        assert main(["query", str(path)]) == ExitCode.VALIDATION_ERROR

    def test_wrong_document_shape(self, tmp_path: Path, capsys):
        path = tmp_path / "scalar.json"
        path.write_text('"just a string"')

        exit_code = main(["query", str(path), "--json"])

        result = json.loads(capsys.readouterr().out)
        assert exit_code == ExitCode.VALIDATION_ERROR
        assert "list of records" in result["error"]

    def test_rollup_needs_mapping(self, expenses_file: Path):
        assert main(["rollup", str(expenses_file), "--json"]) == ExitCode.VALIDATION_ERROR

    @pytest.mark.parametrize(
        "args",
        [
            ["--where", "category"],
            ["--tz", "Mars/Olympus"],
            ["--now", "someday"],
            ["--bucket", "under_1000"],
        ],
    )
    def test_bad_query_arguments(self, expenses_file: Path, args):
        assert main(["query", str(expenses_file), *args, "--json"]) == ExitCode.VALIDATION_ERROR

    @pytest.mark.parametrize(
        "args",
        [
            ["--window", "quarter"],
            ["--net", "net=revenue"],
            ["--collection", "revenue=date"],
        ],
    )
    def test_bad_rollup_arguments(self, ledger_file: Path, args):
        assert main(["rollup", str(ledger_file), "--now", "2024-03-15", *args, "--json"]) == ExitCode.VALIDATION_ERROR

    def test_config_error_exit_code(self, expenses_file: Path, capsys, monkeypatch):
        """Invalid settings return exit code 6."""
        monkeypatch.setenv("LEDGERLENS_PAGE_SIZE", "0")

        exit_code = main(["query", str(expenses_file), "--json"])

        result = json.loads(capsys.readouterr().out)
        assert exit_code == ExitCode.CONFIG_ERROR
        assert "LEDGERLENS_PAGE_SIZE" in result["error"]

    def test_usage_error_exit_code(self, expenses_file: Path):
        assert main(["query", str(expenses_file), "--no-such-flag"]) == 2

    def test_help(self, capsys):
        assert main(["--help"]) == ExitCode.SUCCESS
        assert "query" in capsys.readouterr().out


class TestEnvExample:
    def test_prints_example(self, capsys):
        assert main(["env-example"]) == ExitCode.SUCCESS
        assert "LEDGERLENS_PAGE_SIZE" in capsys.readouterr().out

    def test_writes_file(self, tmp_path: Path):
        output = tmp_path / ".env"

        assert main(["env-example", "--output", str(output)]) == ExitCode.SUCCESS
        assert "LEDGERLENS_DEFAULT_TZ" in output.read_text()


pytestmark = pytest.mark.integration
