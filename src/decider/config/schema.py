"""Pydantic schema for ruleset files.

A ruleset file is a YAML mapping:

    version: 1
    mode: full              # or "simple"
    default_result: Guest   # optional; omit to raise on no match
    return_all_matches: false
    rules:
      - id: deny
        rule: {hasAccess: [false, null, !missing]}
        result: Access Denied
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from decider.rules.engine import BaseDecider, Decider, SimpleDecider
from decider.rules.schema import NO_DEFAULT, Rule


class RulesetConfig(BaseModel):
    """Top-level ruleset document.

    Attributes:
        version: Schema version (must be 1)
        mode: Matcher profile, 'full' or 'simple'
        default_result: Fallback result; absent means no fallback
        return_all_matches: Return every matching result (full mode only)
        rules: Ordered list of rules
    """

    model_config = ConfigDict(extra="forbid")

    version: Literal[1]
    mode: Literal["full", "simple"] = "full"
    default_result: Any = NO_DEFAULT
    return_all_matches: bool = False
    rules: list[Rule] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_rule_ids(self) -> RulesetConfig:
        """Ensure all explicit rule IDs are unique."""
        ids = [rule.id for rule in self.rules if rule.id is not None]
        duplicates = [id_ for id_ in ids if ids.count(id_) > 1]
        if duplicates:
            msg = f"Duplicate rule IDs found: {set(duplicates)}"
            raise ValueError(msg)
        return self

    @model_validator(mode="after")
    def validate_all_matches_mode(self) -> RulesetConfig:
        """The simplified profile only ever returns the first match."""
        if self.mode == "simple" and self.return_all_matches:
            msg = "return_all_matches is only supported in 'full' mode"
            raise ValueError(msg)
        return self

    @property
    def has_default(self) -> bool:
        """Check if a fallback result is configured."""
        return self.default_result is not NO_DEFAULT

    def build(self, *, return_all_matches: bool | None = None) -> BaseDecider:
        """Build the matcher described by this document.

        Args:
            return_all_matches: Override the document's setting (full mode).

        Returns:
            Decider or SimpleDecider.
        """
        if self.mode == "simple":
            return SimpleDecider(self.rules, default_result=self.default_result)

        all_matches = self.return_all_matches if return_all_matches is None else return_all_matches
        return Decider(
            self.rules,
            default_result=self.default_result,
            return_all_matches=all_matches,
        )
