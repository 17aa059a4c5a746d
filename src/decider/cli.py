"""CLI entry point for decider.

This module provides the Typer-based CLI with commands:
- decider evaluate: Evaluate a JSON subject against a ruleset file
- decider validate: Validate a ruleset file

Exit codes:
- 0: Success
- 1: Ruleset error
- 2: Invalid subject
- 3: No matching rule
"""

from __future__ import annotations

import json
from enum import IntEnum
from pathlib import Path
from typing import Annotated, Any

import typer

from decider import __version__
from decider.config import ConfigError, ConfigValidationError, load_ruleset
from decider.errors import NoMatchError
from decider.logging import configure_logging, get_logger, log_decision
from decider.logging.audit import render_markers


class ExitCode(IntEnum):
    """CLI exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1
    INPUT_ERROR = 2
    NO_MATCH = 3


app = typer.Typer(
    name="decider",
    help="Evaluate subjects against ordered rulesets.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"decider {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Evaluate subjects against ordered rulesets."""


RulesOption = Annotated[
    Path,
    typer.Option(
        "--rules",
        "-r",
        help="Path to the YAML ruleset file.",
    ),
]

VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
]


def _to_json(value: Any) -> str:
    return json.dumps(render_markers(value), sort_keys=True, default=str)


def _fail(message: str, code: ExitCode) -> typer.Exit:
    typer.echo(typer.style(f"✗ {message}", fg=typer.colors.RED), err=True)
    return typer.Exit(code=code)


def _parse_subject(raw: str) -> dict[str, Any]:
    try:
        subject = json.loads(raw)
    except json.JSONDecodeError as e:
        raise _fail(f"Subject is not valid JSON: {e}", ExitCode.INPUT_ERROR) from e

    if not isinstance(subject, dict):
        raise _fail("Subject must be a JSON object", ExitCode.INPUT_ERROR)
    return subject


@app.command()
def evaluate(
    rules: RulesOption,
    subject: Annotated[
        str,
        typer.Option(
            "--subject",
            "-s",
            help="Subject as an inline JSON object.",
        ),
    ],
    all_matches: Annotated[
        bool,
        typer.Option(
            "--all",
            "-a",
            help="Return every matching result (full mode only).",
        ),
    ] = False,
    explain: Annotated[
        bool,
        typer.Option(
            "--explain",
            help="Print which rules matched and why.",
        ),
    ] = False,
    json_logs: Annotated[
        bool,
        typer.Option(
            "--json-logs",
            help="Emit logs as JSON.",
        ),
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Evaluate a subject against a ruleset and print the result as JSON.

    Exits with code 3 when no rule matches and the ruleset has no
    default result.
    """
    configure_logging(verbose=verbose, json_output=json_logs)
    log = get_logger("decider.cli")

    try:
        config = load_ruleset(rules)
    except ConfigError as e:
        raise _fail(str(e), ExitCode.CONFIG_ERROR) from e

    if all_matches and config.mode == "simple":
        raise _fail("--all is only supported for 'full' mode rulesets", ExitCode.CONFIG_ERROR)

    subject_data = _parse_subject(subject)
    matcher = config.build(return_all_matches=True if all_matches else None)
    log.debug("evaluating", rules=str(rules), mode=config.mode, rule_count=len(config.rules))

    outcome = matcher.explain(subject_data)
    try:
        result = matcher.resolve(outcome)
    except NoMatchError as e:
        log_decision(subject_data, outcome, None, "no_match")
        raise _fail(str(e), ExitCode.NO_MATCH) from e

    disposition = "matched" if outcome.has_matches else "default"
    log_decision(subject_data, outcome, result, disposition)

    if explain:
        typer.echo(
            _to_json(
                {
                    "result": result,
                    "disposition": disposition,
                    "rules_evaluated": outcome.rules_evaluated,
                    "matches": [
                        {
                            "index": m.index,
                            "id": m.rule.id,
                            "reason": m.match_reason,
                            "result": m.rule.result,
                        }
                        for m in outcome.matches
                    ],
                }
            )
        )
    else:
        typer.echo(_to_json(result))


@app.command()
def validate(
    rules: RulesOption,
    verbose: VerboseOption = False,
) -> None:
    """Validate a ruleset file without evaluating anything.

    Exits with code 0 if valid, or code 1 if there are errors.
    """
    configure_logging(verbose=verbose, json_output=False)
    log = get_logger("decider.cli")

    try:
        config = load_ruleset(rules)
    except ConfigValidationError as e:
        typer.echo(typer.style("✗ Ruleset validation failed", fg=typer.colors.RED), err=True)
        typer.echo(str(e), err=True)
        log.debug("validation_errors", errors=len(e.validation_errors))
        raise typer.Exit(code=ExitCode.CONFIG_ERROR) from e
    except ConfigError as e:
        raise _fail(str(e), ExitCode.CONFIG_ERROR) from e

    typer.echo(typer.style("✓ Ruleset is valid", fg=typer.colors.GREEN))

    if verbose:
        typer.echo("\nRuleset summary:")
        typer.echo(f"  Version: {config.version}")
        typer.echo(f"  Mode: {config.mode}")
        typer.echo(f"  Rules: {len(config.rules)}")
        typer.echo(f"  Strict rules: {sum(1 for r in config.rules if r.strict)}")
        if config.has_default:
            typer.echo(f"  Default result: {_to_json(config.default_result)}")
        else:
            typer.echo("  Default result: none")
        if config.return_all_matches:
            typer.echo("  Returns all matches")
