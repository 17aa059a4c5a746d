"""Structured logging for decider.

Usage:
    from decider.logging import configure_logging, log_decision

    configure_logging(verbose=True)
    log_decision(subject, outcome, result, disposition)
"""

from decider.logging.audit import (
    configure_logging,
    get_logger,
    log_decision,
    log_rule_matched,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "log_decision",
    "log_rule_matched",
]
