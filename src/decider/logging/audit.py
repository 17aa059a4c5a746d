"""Structured logging and decision audit events.

This module provides:
- structlog configuration for JSON or console logging to stderr
- Rendering of the MISSING / NO_DEFAULT markers in log output
- Structured log events for rule evaluation and final decisions
"""

from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import TYPE_CHECKING, Any

import structlog

from decider.rules.schema import MISSING, NO_DEFAULT

if TYPE_CHECKING:
    from collections.abc import Callable

    from structlog.typing import EventDict, WrappedLogger

    from decider.rules.schema import MatchResult

MARKER_LABELS: dict[Enum, str] = {
    MISSING: "<missing>",
    NO_DEFAULT: "<no default>",
}


def render_markers(value: Any) -> Any:
    """Replace decider markers with readable labels.

    Args:
        value: Value to render. Can be a marker, dict, list, tuple or other.

    Returns:
        Value with markers replaced
    """
    if isinstance(value, Enum) and value in MARKER_LABELS:
        return MARKER_LABELS[value]

    if isinstance(value, dict):
        return {k: render_markers(v) for k, v in value.items()}

    if isinstance(value, list | tuple):
        return [render_markers(item) for item in value]

    return value


def _marker_processor(
    _logger: WrappedLogger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """structlog processor that renders markers in log events."""
    return render_markers(event_dict)


def configure_logging(
    verbose: bool = False,
    json_output: bool = True,
) -> None:
    """Configure structured logging.

    Sets up structlog with output to stderr, including:
    - Timestamp in ISO format
    - Log level
    - Marker rendering
    - Exception formatting

    Args:
        verbose: If True, enable DEBUG level. Otherwise INFO.
        json_output: If True, output JSON. Otherwise use console format.
    """
    level = logging.DEBUG if verbose else logging.INFO

    # Library modules log through the standard library
    logging.basicConfig(
        format="%(name)s: %(message)s",
        stream=sys.stderr,
        level=level,
        force=True,
    )

    processors: list[Callable[..., Any]] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _marker_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a configured structlog logger.

    Args:
        name: Optional logger name (typically __name__)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)


def log_rule_matched(
    rule_id: str,
    index: int,
    match_reason: str,
) -> None:
    """Log a rule that matched a subject.

    Args:
        rule_id: Rule label
        index: Position of the rule in the ruleset
        match_reason: Why the rule matched
    """
    log = get_logger("decider.rules")
    log.debug(
        "rule_matched",
        rule_id=rule_id,
        index=index,
        match_reason=match_reason,
    )


def log_decision(
    subject: dict[str, Any],
    outcome: MatchResult,
    result: Any,
    disposition: str,
) -> None:
    """Log the full decision trail for a subject.

    Args:
        subject: The evaluated subject
        outcome: Explanation of the evaluation
        result: Value handed back to the caller (None when nothing was)
        disposition: 'matched', 'default' or 'no_match'
    """
    log = get_logger("decider.audit")

    for match in outcome.matches:
        log_rule_matched(match.rule.label, match.index, match.match_reason)

    log_func = log.warning if disposition == "no_match" else log.info
    log_func(
        "decision",
        subject=subject,
        rules_evaluated=outcome.rules_evaluated,
        rules_matched=len(outcome.matches),
        matched_rule_ids=outcome.matched_rule_ids,
        result=result,
        disposition=disposition,
    )
