"""Rule and match result models.

This module defines:
- Rule: a predicate paired with a result and a strict flag
- ExactValue / OneOf: the two shapes a predicate field can take
- MISSING / NO_DEFAULT: markers for "absent subject key" and "no default"
- Match / MatchResult: explanation of an evaluation
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator


class _Missing(Enum):
    """Marker type for a key that is absent from a subject."""

    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"


class _NoDefault(Enum):
    """Marker type for "no default result configured"."""

    NO_DEFAULT = "NO_DEFAULT"

    def __repr__(self) -> str:
        return "NO_DEFAULT"


MISSING = _Missing.MISSING
NO_DEFAULT = _NoDefault.NO_DEFAULT

# Predicate values of these types are read as a set of acceptable values
ONE_OF_TYPES: tuple[type, ...] = (list, tuple, set, frozenset)


class ExactValue(BaseModel):
    """Predicate field that accepts exactly one value."""

    model_config = ConfigDict(frozen=True)

    value: Any


class OneOf(BaseModel):
    """Predicate field that accepts any of several values."""

    model_config = ConfigDict(frozen=True)

    choices: tuple[Any, ...]


FieldCondition = ExactValue | OneOf


def field_condition(expected: Any) -> FieldCondition:
    """Classify a raw predicate value.

    Args:
        expected: Value taken from a rule's predicate.

    Returns:
        OneOf for list/tuple/set/frozenset values, ExactValue otherwise.
    """
    if isinstance(expected, ONE_OF_TYPES):
        return OneOf(choices=tuple(expected))
    return ExactValue(value=expected)


class Rule(BaseModel):
    """A predicate paired with the result it yields.

    Rules are accepted in the authoring shape
    ``{"rule": {...}, "result": ..., "strict": False}``; the predicate is
    exposed as ``predicate``. The ``rule`` key is required: ``{}`` matches
    every subject, so it has to be written out.

    The predicate is snapshotted at construction and exposed read-only.
    Matching only reads the classified snapshots in ``conditions`` and
    ``expected_values``, so neither edits to the caller's original
    objects nor edits to values reached through ``predicate`` change
    which subjects the rule matches.

    Attributes:
        id: Optional label used in logs and explanations
        predicate: Mapping of subject attribute name to expected value(s)
        result: Opaque value returned when the rule matches
        strict: Reject subjects carrying more keys than the predicate
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    id: str | None = None
    predicate: Mapping[str, Any] = Field(..., alias="rule")
    result: Any = None
    strict: bool = False

    _conditions: Mapping[str, FieldCondition] = PrivateAttr()
    _expected_values: Mapping[str, ExactValue] = PrivateAttr()

    @field_validator("predicate", mode="before")
    @classmethod
    def check_predicate(cls, v: Any) -> dict[str, Any]:
        """Reject anything that is not a mapping."""
        if not isinstance(v, Mapping):
            msg = f"rule predicate must be a mapping, got {type(v).__name__}"
            raise ValueError(msg)
        return dict(v)

    @field_validator("predicate", mode="after")
    @classmethod
    def freeze_predicate(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        """Keep a private deep copy behind a read-only view."""
        return MappingProxyType(copy.deepcopy(dict(v)))

    def model_post_init(self, __context: Any) -> None:
        """Classify the predicate once, from copies independent of ``predicate``."""
        self._conditions = MappingProxyType(
            {key: field_condition(copy.deepcopy(value)) for key, value in self.predicate.items()}
        )
        self._expected_values = MappingProxyType(
            {key: ExactValue(value=copy.deepcopy(value)) for key, value in self.predicate.items()}
        )

    @property
    def conditions(self) -> Mapping[str, FieldCondition]:
        """Predicate fields classified as ExactValue or OneOf."""
        return self._conditions

    @property
    def expected_values(self) -> Mapping[str, ExactValue]:
        """Predicate fields taken as single values, with no set reading."""
        return self._expected_values

    @property
    def label(self) -> str:
        """Name used for this rule in log lines."""
        return self.id or repr(dict(self.predicate))


def coerce_rules(rules: Any) -> tuple[Rule, ...]:
    """Build an ordered, immutable ruleset from rules or rule mappings.

    Args:
        rules: Iterable of Rule instances or rule mappings.

    Returns:
        Tuple of Rule in the order given.
    """
    return tuple(
        rule if isinstance(rule, Rule) else Rule.model_validate(rule) for rule in rules
    )


class Match(BaseModel):
    """A rule that matched a subject."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., description="Position of the rule in the ruleset")
    rule: Rule = Field(..., description="The rule that matched")
    match_reason: str = Field(..., description="Human-readable explanation of why the rule matched")


class MatchResult(BaseModel):
    """Collection of all matches for a subject."""

    model_config = ConfigDict(frozen=True)

    subject: dict[Any, Any] = Field(
        default_factory=dict, description="The subject being evaluated"
    )
    matches: list[Match] = Field(default_factory=list, description="All rules that matched")
    rules_evaluated: int = Field(default=0, description="Total number of rules evaluated")

    @property
    def has_matches(self) -> bool:
        """Check if any rules matched."""
        return len(self.matches) > 0

    @property
    def results(self) -> list[Any]:
        """Results of the matching rules, in ruleset order."""
        return [m.rule.result for m in self.matches]

    @property
    def matched_rule_ids(self) -> list[str]:
        """Get labels of the matched rules."""
        return [m.rule.label for m in self.matches]
