"""Shared pytest fixtures for decider tests.

This module provides common fixtures for:
- The reference access-control ruleset
- Temporary ruleset files
- Logging reset between tests
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest
import structlog

from decider import MISSING

if TYPE_CHECKING:
    from collections.abc import Callable, Generator


# ============================================================================
# Ruleset Fixtures
# ============================================================================


@pytest.fixture
def access_rules() -> list[dict[str, Any]]:
    """Return the reference access-control ruleset."""
    return [
        {"rule": {"hasAccess": [False, MISSING, None]}, "result": "Access Denied"},
        {
            "rule": {"hasAccess": True, "isAdmin": True, "isManager": True},
            "result": "Admin and Manager Access Granted",
        },
        {"rule": {"hasAccess": True, "isAdmin": True}, "result": "Admin Access Granted"},
        {"rule": {"hasAccess": True, "isManager": True}, "result": "Manager Access Granted"},
        {"rule": {"hasAccess": True}, "result": "User Access Granted"},
    ]


@pytest.fixture
def basic_rules() -> list[dict[str, Any]]:
    """Return a three-rule exact-match ruleset."""
    return [
        {"rule": {"hasAccess": False}, "result": "Access Denied"},
        {"rule": {"hasAccess": True, "isAdmin": True}, "result": "Admin Access Granted"},
        {"rule": {"hasAccess": True}, "result": "User Access Granted"},
    ]


@pytest.fixture
def prioritization_rules() -> list[dict[str, Any]]:
    """Return rules with overlapping specificity."""
    return [
        {
            "rule": {"hasAccess": True, "isAdmin": True, "isManager": True},
            "result": "Admin and Manager Access Granted",
        },
        {"rule": {"hasAccess": True, "isAdmin": True}, "result": "Admin Access Granted"},
        {"rule": {"hasAccess": True, "isManager": True}, "result": "Manager Access Granted"},
        {"rule": {"hasAccess": True}, "result": "User Access Granted"},
    ]


# ============================================================================
# Ruleset File Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory (cleaned up after test)
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


ACCESS_RULESET_YAML = """\
version: 1
mode: full
rules:
  - id: deny
    rule: {hasAccess: [false, null, !missing ]}
    result: Access Denied
  - id: admin
    rule: {hasAccess: true, isAdmin: true}
    result: Admin Access Granted
  - id: user
    rule: {hasAccess: true}
    result: User Access Granted
"""


@pytest.fixture
def access_ruleset_yaml() -> str:
    """Return the access ruleset as YAML text."""
    return ACCESS_RULESET_YAML


@pytest.fixture
def write_ruleset(temp_dir: Path) -> Callable[..., Path]:
    """Factory fixture to write ruleset files.

    Args:
        content: YAML text
        filename: Name of the ruleset file (default: rules.yaml)

    Returns:
        Path to the written ruleset file
    """

    def _write(content: str, filename: str = "rules.yaml") -> Path:
        path = temp_dir / filename
        path.write_text(content, encoding="utf-8")
        return path

    return _write


# ============================================================================
# Logging Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo configure_logging() so handlers never outlive a captured stream."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)
