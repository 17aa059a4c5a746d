"""Rule evaluation engine.

This module provides the two matcher profiles:
- Decider: set-valued fields, strict mode, first-match or all-matches
- SimpleDecider: exact-value fields, first-match only

Both are built once from a ruleset and configuration and then called
with any number of subjects. Neither mutates the ruleset or the subject,
so a single instance can be shared freely between threads.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from decider.errors import FULL_NO_MATCH_MESSAGE, SIMPLE_NO_MATCH_MESSAGE, NoMatchError
from decider.rules.matchers import ExactMatcher, Matcher, PermissiveMatcher
from decider.rules.schema import NO_DEFAULT, Match, MatchResult, coerce_rules

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

    from decider.rules.schema import Rule

logger = logging.getLogger(__name__)


class BaseDecider(ABC):
    """Shared ruleset handling for both matcher profiles."""

    matcher: Matcher
    no_match_message: str

    def __init__(
        self,
        rules: Iterable[Rule | Mapping[str, Any]],
        *,
        default_result: Any = NO_DEFAULT,
    ) -> None:
        """Initialize the decider.

        Args:
            rules: Ordered rules, as Rule instances or rule mappings.
            default_result: Value returned when no rule matches. Leave as
                NO_DEFAULT to raise NoMatchError instead.
        """
        self._rules = coerce_rules(rules)
        self._default_result = default_result

    @property
    def rules(self) -> tuple[Rule, ...]:
        """The ruleset, in priority order."""
        return self._rules

    @property
    def default_result(self) -> Any:
        """Configured fallback, or NO_DEFAULT."""
        return self._default_result

    @property
    def has_default(self) -> bool:
        """Check if a fallback result is configured."""
        return self._default_result is not NO_DEFAULT

    def __call__(self, subject: Mapping[str, Any]) -> Any:
        return self.evaluate(subject)

    @abstractmethod
    def evaluate(self, subject: Mapping[str, Any]) -> Any:
        """Evaluate a subject against the ruleset.

        Raises:
            NoMatchError: If nothing matched and no default is configured.
        """
        ...

    @abstractmethod
    def explain(self, subject: Mapping[str, Any]) -> MatchResult:
        """Evaluate a subject and report which rules matched and why.

        Never raises NoMatchError; an empty result means no rule matched.
        """
        ...

    @abstractmethod
    def _select(self, results: list[Any]) -> Any:
        """Turn the matching results, in ruleset order, into the decision."""
        ...

    def resolve(self, outcome: MatchResult) -> Any:
        """Turn an explanation from ``explain`` into the decision ``evaluate`` returns.

        Args:
            outcome: Result of ``explain`` on this decider.

        Returns:
            Same value ``evaluate`` would return for the explained subject.

        Raises:
            NoMatchError: If nothing matched and no default is configured.
        """
        return self._select(outcome.results)

    def _evaluations(self, subject: Mapping[str, Any]) -> Iterator[tuple[int, Rule, bool, str]]:
        for index, rule in enumerate(self._rules):
            matched, reason = self.matcher.matches(rule, subject)
            if matched:
                logger.debug("Rule '%s' matched: %s", rule.label, reason)
            else:
                logger.debug("Rule '%s' did not match: %s", rule.label, reason)
            yield index, rule, matched, reason

    def _results(self, subject: Mapping[str, Any], *, first_only: bool) -> list[Any]:
        results: list[Any] = []
        for _, rule, matched, _ in self._evaluations(subject):
            if matched:
                results.append(rule.result)
                if first_only:
                    break
        return results

    def _collect(self, subject: Mapping[str, Any], *, first_only: bool) -> MatchResult:
        matches: list[Match] = []
        rules_evaluated = 0

        for index, rule, matched, reason in self._evaluations(subject):
            rules_evaluated += 1
            if matched:
                matches.append(Match(index=index, rule=rule, match_reason=reason))
                if first_only:
                    break

        return MatchResult(
            subject=dict(subject),
            matches=matches,
            rules_evaluated=rules_evaluated,
        )

    def _no_match(self) -> NoMatchError:
        logger.debug("No rule matched out of %d", len(self._rules))
        return NoMatchError(self.no_match_message)


class Decider(BaseDecider):
    """Full matcher.

    Predicate fields holding a list, tuple, set or frozenset accept any of
    their members. Strict rules reject subjects with more keys than the
    predicate declares. By default the first matching rule wins; with
    ``return_all_matches`` every matching result is returned in ruleset
    order.

    Example:
        >>> evaluate = decider([
        ...     {"rule": {"hasAccess": [False, MISSING, None]}, "result": "Access Denied"},
        ...     {"rule": {"hasAccess": True}, "result": "User Access Granted"},
        ... ])
        >>> evaluate({})
        'Access Denied'
    """

    matcher = PermissiveMatcher()
    no_match_message = FULL_NO_MATCH_MESSAGE

    def __init__(
        self,
        rules: Iterable[Rule | Mapping[str, Any]],
        *,
        default_result: Any = NO_DEFAULT,
        return_all_matches: bool = False,
    ) -> None:
        """Initialize the full matcher.

        Args:
            rules: Ordered rules, as Rule instances or rule mappings.
            default_result: Value returned when no rule matches. Leave as
                NO_DEFAULT to raise NoMatchError instead.
            return_all_matches: Return a list of every matching result
                instead of the first one.
        """
        super().__init__(rules, default_result=default_result)
        self._return_all_matches = return_all_matches

    @property
    def return_all_matches(self) -> bool:
        """Whether every matching result is returned."""
        return self._return_all_matches

    def explain(self, subject: Mapping[str, Any]) -> MatchResult:
        """Evaluate a subject and report every matching rule.

        Args:
            subject: Mapping of attribute name to value.

        Returns:
            MatchResult listing all matching rules in ruleset order.
        """
        return self._collect(subject, first_only=False)

    def evaluate(self, subject: Mapping[str, Any]) -> Any:
        """Evaluate a subject against the ruleset.

        Args:
            subject: Mapping of attribute name to value.

        Returns:
            The first matching rule's result, or the list of all matching
            results when ``return_all_matches`` is set. Falls back to the
            default result (wrapped in a list in all-matches mode).

        Raises:
            NoMatchError: If nothing matched and no default is configured.
        """
        return self._select(self._results(subject, first_only=False))

    def _select(self, results: list[Any]) -> Any:
        if results:
            return results if self._return_all_matches else results[0]

        if self.has_default:
            logger.debug("No rule matched, using default result")
            if self._return_all_matches:
                return [self._default_result]
            return self._default_result

        raise self._no_match()


class SimpleDecider(BaseDecider):
    """Simplified matcher.

    Every predicate value must equal the subject's value exactly; lists
    are not read as sets of choices and the strict flag is ignored. The
    first matching rule wins.
    """

    matcher = ExactMatcher()
    no_match_message = SIMPLE_NO_MATCH_MESSAGE

    def explain(self, subject: Mapping[str, Any]) -> MatchResult:
        """Evaluate a subject, stopping at the first matching rule.

        Args:
            subject: Mapping of attribute name to value.

        Returns:
            MatchResult with at most one match.
        """
        return self._collect(subject, first_only=True)

    def evaluate(self, subject: Mapping[str, Any]) -> Any:
        """Return the result of the first rule that matches the subject.

        Raises:
            NoMatchError: If nothing matched and no default is configured.
        """
        return self._select(self._results(subject, first_only=True))

    def _select(self, results: list[Any]) -> Any:
        if results:
            return results[0]

        if self.has_default:
            logger.debug("No rule matched, using default result")
            return self._default_result

        raise self._no_match()


def decider(
    rules: Iterable[Rule | Mapping[str, Any]],
    *,
    default_result: Any = NO_DEFAULT,
    return_all_matches: bool = False,
) -> Decider:
    """Build a full matcher.

    This is a convenience function that creates a Decider.

    Args:
        rules: Ordered rules, as Rule instances or rule mappings.
        default_result: Value returned when no rule matches.
        return_all_matches: Return every matching result as a list.

    Returns:
        Callable taking a subject and returning the decision.
    """
    return Decider(
        rules,
        default_result=default_result,
        return_all_matches=return_all_matches,
    )


def simple_decider(
    rules: Iterable[Rule | Mapping[str, Any]],
    *,
    default_result: Any = NO_DEFAULT,
) -> SimpleDecider:
    """Build a simplified, exact-match matcher.

    Args:
        rules: Ordered rules, as Rule instances or rule mappings.
        default_result: Value returned when no rule matches.

    Returns:
        Callable taking a subject and returning the decision.
    """
    return SimpleDecider(rules, default_result=default_result)
