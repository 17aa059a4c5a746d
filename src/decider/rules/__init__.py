"""Rules engine for subject evaluation and matching."""

from decider.rules.engine import BaseDecider, Decider, SimpleDecider, decider, simple_decider
from decider.rules.matchers import (
    ExactMatcher,
    Matcher,
    PermissiveMatcher,
    match_field,
    same_value_zero,
    values_equal,
)
from decider.rules.schema import (
    MISSING,
    NO_DEFAULT,
    ExactValue,
    FieldCondition,
    Match,
    MatchResult,
    OneOf,
    Rule,
    coerce_rules,
    field_condition,
)

__all__ = [
    "MISSING",
    "NO_DEFAULT",
    "BaseDecider",
    "Decider",
    "ExactMatcher",
    "ExactValue",
    "FieldCondition",
    "Match",
    "MatchResult",
    "Matcher",
    "OneOf",
    "PermissiveMatcher",
    "Rule",
    "SimpleDecider",
    "coerce_rules",
    "decider",
    "field_condition",
    "match_field",
    "same_value_zero",
    "simple_decider",
    "values_equal",
]
