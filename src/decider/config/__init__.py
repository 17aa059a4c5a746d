"""Ruleset file loading and schema.

Usage:
    from decider.config import load_ruleset

    config = load_ruleset("rules.yaml")
    evaluate = config.build()
"""

from decider.config.loader import (
    ConfigError,
    ConfigNotFoundError,
    ConfigValidationError,
    build_decider,
    load_ruleset,
    parse_ruleset,
)
from decider.config.schema import RulesetConfig

__all__ = [
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigValidationError",
    "RulesetConfig",
    "build_decider",
    "load_ruleset",
    "parse_ruleset",
]
