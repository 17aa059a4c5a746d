"""Tests for the decider CLI."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from decider import __version__
from decider.cli import ExitCode, app

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


runner = CliRunner()


def _last_json(output: str) -> object:
    """Parse the final line of output, which carries the command result."""
    return json.loads(output.strip().splitlines()[-1])


@pytest.fixture
def rules_path(write_ruleset: Callable[..., Path], access_ruleset_yaml: str) -> Path:
    return write_ruleset(access_ruleset_yaml)


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"decider {__version__}" in result.output


class TestEvaluate:
    def test_prints_result(self, rules_path: Path) -> None:
        result = runner.invoke(
            app, ["evaluate", "--rules", str(rules_path), "--subject", '{"hasAccess": true}']
        )

        assert result.exit_code == ExitCode.SUCCESS
        assert _last_json(result.stdout) == "User Access Granted"

    def test_absent_key_denied(self, rules_path: Path) -> None:
        result = runner.invoke(app, ["evaluate", "-r", str(rules_path), "-s", "{}"])

        assert result.exit_code == ExitCode.SUCCESS
        assert _last_json(result.stdout) == "Access Denied"

    def test_all_matches(self, rules_path: Path) -> None:
        result = runner.invoke(
            app,
            [
                "evaluate",
                "-r",
                str(rules_path),
                "-s",
                '{"hasAccess": true, "isAdmin": true}',
                "--all",
            ],
        )

        assert result.exit_code == ExitCode.SUCCESS
        assert _last_json(result.stdout) == ["Admin Access Granted", "User Access Granted"]

    def test_explain(self, rules_path: Path) -> None:
        result = runner.invoke(
            app,
            ["evaluate", "-r", str(rules_path), "-s", '{"hasAccess": false}', "--explain"],
        )

        assert result.exit_code == ExitCode.SUCCESS
        payload = _last_json(result.stdout)
        assert payload["result"] == "Access Denied"
        assert payload["disposition"] == "matched"
        assert payload["rules_evaluated"] == 3
        assert [m["id"] for m in payload["matches"]] == ["deny"]

    @pytest.mark.parametrize("extra", [[], ["--all"]])
    def test_explain_falls_back_to_default(
        self, write_ruleset: Callable[..., Path], extra: list[str]
    ) -> None:
        path = write_ruleset(
            "version: 1\n"
            "default_result: fallback\n"
            "rules:\n"
            "  - {id: admin, rule: {isAdmin: true}, result: admin}\n"
        )

        result = runner.invoke(
            app, ["evaluate", "-r", str(path), "-s", '{"isAdmin": false}', "--explain", *extra]
        )

        assert result.exit_code == ExitCode.SUCCESS
        payload = _last_json(result.stdout)
        assert payload["result"] == (["fallback"] if extra else "fallback")
        assert payload["disposition"] == "default"
        assert payload["matches"] == []

    def test_no_match_exit_code(self, rules_path: Path) -> None:
        result = runner.invoke(
            app, ["evaluate", "-r", str(rules_path), "-s", '{"hasAccess": "maybe"}']
        )

        assert result.exit_code == ExitCode.NO_MATCH
        assert "No matching rule found for the provided subject." in result.output

    def test_invalid_subject_json(self, rules_path: Path) -> None:
        result = runner.invoke(app, ["evaluate", "-r", str(rules_path), "-s", "{not json"])

        assert result.exit_code == ExitCode.INPUT_ERROR
        assert "not valid JSON" in result.output

    def test_subject_must_be_object(self, rules_path: Path) -> None:
        result = runner.invoke(app, ["evaluate", "-r", str(rules_path), "-s", "[1, 2]"])

        assert result.exit_code == ExitCode.INPUT_ERROR

    def test_missing_ruleset(self, temp_dir: Path) -> None:
        result = runner.invoke(
            app, ["evaluate", "-r", str(temp_dir / "absent.yaml"), "-s", "{}"]
        )

        assert result.exit_code == ExitCode.CONFIG_ERROR
        assert "Ruleset file not found" in result.output

    def test_all_rejected_for_simple_mode(self, write_ruleset: Callable[..., Path]) -> None:
        path = write_ruleset("version: 1\nmode: simple\nrules: []\n")

        result = runner.invoke(app, ["evaluate", "-r", str(path), "-s", "{}", "--all"])

        assert result.exit_code == ExitCode.CONFIG_ERROR


class TestValidate:
    def test_valid(self, rules_path: Path) -> None:
        result = runner.invoke(app, ["validate", "--rules", str(rules_path), "--verbose"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "Ruleset is valid" in result.output
        assert "Rules: 3" in result.output
        assert "Default result: none" in result.output

    def test_invalid(self, write_ruleset: Callable[..., Path]) -> None:
        path = write_ruleset("version: 1\nrules:\n  - {rule: [a], result: x}\n")

        result = runner.invoke(app, ["validate", "-r", str(path)])

        assert result.exit_code == ExitCode.CONFIG_ERROR
        assert "Ruleset validation failed" in result.output
