"""Ordered rule matching.

Build a matcher once from an ordered ruleset, then call it with subjects:

    from decider import decider

    evaluate = decider(
        [
            {"rule": {"hasAccess": False}, "result": "Access Denied"},
            {"rule": {"hasAccess": True, "isAdmin": True}, "result": "Admin Access Granted"},
            {"rule": {"hasAccess": True}, "result": "User Access Granted"},
        ]
    )
    evaluate({"hasAccess": True})  # 'User Access Granted'
"""

from decider.errors import DeciderError, NoMatchError
from decider.rules import (
    MISSING,
    NO_DEFAULT,
    Decider,
    ExactValue,
    Match,
    MatchResult,
    OneOf,
    Rule,
    SimpleDecider,
    decider,
    simple_decider,
)

__version__ = "0.1.0"

__all__ = [
    "MISSING",
    "NO_DEFAULT",
    "Decider",
    "DeciderError",
    "ExactValue",
    "Match",
    "MatchResult",
    "NoMatchError",
    "OneOf",
    "Rule",
    "SimpleDecider",
    "__version__",
    "decider",
    "simple_decider",
]
