"""Rule matchers for the two evaluation profiles.

This module provides matchers for evaluating a rule against a subject:
- PermissiveMatcher: set-valued predicate fields and strict mode
- ExactMatcher: exact-value predicate fields only

Both report a (matched, reason) tuple so the engine can log and explain
every decision.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from decider.rules.schema import MISSING, ExactValue, FieldCondition, OneOf

if TYPE_CHECKING:
    from collections.abc import Mapping

    from decider.rules.schema import Rule


def values_equal(expected: Any, actual: Any) -> bool:
    """Compare a predicate value with a subject value.

    Booleans only ever equal booleans, so ``True`` does not match ``1``
    and ``False`` does not match ``0``. Everything else uses ``==``.

    Args:
        expected: Value from the rule's predicate.
        actual: Value read from the subject (MISSING when absent).

    Returns:
        True if the values are equal.
    """
    if isinstance(expected, bool) or isinstance(actual, bool):
        return isinstance(expected, bool) and isinstance(actual, bool) and expected is actual
    return bool(expected == actual)


def _is_nan(value: Any) -> bool:
    return isinstance(value, float) and math.isnan(value)


def same_value_zero(choice: Any, actual: Any) -> bool:
    """Membership comparison for set-valued predicate fields.

    Same as values_equal, except that NaN is a member of a set holding NaN.
    """
    return values_equal(choice, actual) or (_is_nan(choice) and _is_nan(actual))


def match_field(condition: FieldCondition, actual: Any) -> bool:
    """Check a single subject value against a classified predicate field.

    Args:
        condition: ExactValue or OneOf.
        actual: Value read from the subject.

    Returns:
        True if the value is accepted.
    """
    if isinstance(condition, OneOf):
        return any(same_value_zero(choice, actual) for choice in condition.choices)
    return values_equal(condition.value, actual)


def _describe(condition: FieldCondition) -> str:
    if isinstance(condition, ExactValue):
        return repr(condition.value)
    return f"one of {list(condition.choices)!r}"


class Matcher(ABC):
    """Base class for rule matchers."""

    @abstractmethod
    def matches(self, rule: Rule, subject: Mapping[str, Any]) -> tuple[bool, str]:
        """Check if a subject satisfies a rule's predicate.

        Args:
            rule: Rule to evaluate.
            subject: Subject to check.

        Returns:
            Tuple of (matched, reason).
        """
        ...


class PermissiveMatcher(Matcher):
    """Matcher for the full profile.

    A predicate field holding a list, tuple, set or frozenset accepts any
    of its members. Strict rules additionally reject subjects that carry
    more keys than the predicate declares. Only the key counts are
    compared, so a subject with the same number of keys but different
    names still passes the strict check.
    """

    def matches(self, rule: Rule, subject: Mapping[str, Any]) -> tuple[bool, str]:
        """Check if a subject satisfies the rule under full semantics.

        Args:
            rule: Rule to evaluate.
            subject: Subject to check.

        Returns:
            Tuple of (matched, reason).
        """
        if rule.strict and len(subject) > len(rule.predicate):
            return False, (
                f"Strict rule declares {len(rule.predicate)} key(s) "
                f"but subject carries {len(subject)}"
            )

        for key, condition in rule.conditions.items():
            actual = subject.get(key, MISSING)
            if not match_field(condition, actual):
                return False, f"'{key}' is {actual!r}, expected {_describe(condition)}"

        if not rule.predicate:
            return True, "Empty predicate (matches all)"
        return True, f"All {len(rule.predicate)} predicate key(s) matched"


class ExactMatcher(Matcher):
    """Matcher for the simplified profile.

    Every predicate value is compared to the subject value as a whole;
    a list in the predicate is never read as a set of choices. The
    strict flag is ignored.
    """

    def matches(self, rule: Rule, subject: Mapping[str, Any]) -> tuple[bool, str]:
        """Check if a subject satisfies the rule by exact equality.

        Args:
            rule: Rule to evaluate.
            subject: Subject to check.

        Returns:
            Tuple of (matched, reason).
        """
        for key, expected in rule.expected_values.items():
            actual = subject.get(key, MISSING)
            if not values_equal(expected.value, actual):
                return False, f"'{key}' is {actual!r}, expected {expected.value!r}"

        if not rule.predicate:
            return True, "Empty predicate (matches all)"
        return True, f"All {len(rule.predicate)} predicate key(s) equal"
