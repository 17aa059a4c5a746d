"""Ruleset file loading.

This module provides:
- YAML ruleset loading with a ``!missing`` tag for absent subject keys
- Pydantic validation of the loaded document
- build_decider() to go straight from a file to a matcher
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError

from decider.config.schema import RulesetConfig
from decider.errors import DeciderError
from decider.rules.schema import MISSING

if TYPE_CHECKING:
    from decider.rules.engine import BaseDecider

MISSING_TAG = "!missing"


class ConfigError(DeciderError):
    """Raised when ruleset loading or validation fails."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        """Initialize ConfigError with message and optional path.

        Args:
            message: Error description
            path: Path to the ruleset file that caused the error
        """
        self.path = path
        super().__init__(message)


class ConfigNotFoundError(ConfigError):
    """Raised when the ruleset file does not exist."""


class ConfigValidationError(ConfigError):
    """Raised when ruleset validation fails."""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        validation_errors: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize ConfigValidationError.

        Args:
            message: Error description
            path: Path to the ruleset file
            validation_errors: List of Pydantic validation error dicts
        """
        self.validation_errors = validation_errors or []
        super().__init__(message, path)


class RulesetLoader(yaml.SafeLoader):
    """SafeLoader that understands the ``!missing`` tag."""


def _construct_missing(loader: yaml.SafeLoader, node: yaml.Node) -> Any:  # noqa: ARG001
    return MISSING


RulesetLoader.add_constructor(MISSING_TAG, _construct_missing)


def load_yaml(path: Path) -> dict[str, Any]:
    """Load and parse a YAML ruleset file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed YAML as a dictionary

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Cannot read ruleset file: {e}"
        raise ConfigError(msg, path) from e

    try:
        data = yaml.load(content, Loader=RulesetLoader)  # noqa: S506 - SafeLoader subclass
    except yaml.YAMLError as e:
        msg = f"Invalid YAML syntax: {e}"
        raise ConfigError(msg, path) from e

    if data is None:
        # Empty file
        return {}

    if not isinstance(data, dict):
        msg = "Ruleset file must contain a YAML mapping (dictionary), not a list or scalar"
        raise ConfigError(msg, path)

    return data


def parse_ruleset(raw: dict[str, Any], path: Path | None = None) -> RulesetConfig:
    """Validate a raw ruleset document.

    Args:
        raw: Parsed document.
        path: Source file, used in error messages.

    Returns:
        Validated RulesetConfig

    Raises:
        ConfigValidationError: If the document fails schema validation
    """
    try:
        return RulesetConfig.model_validate(raw)
    except ValidationError as e:
        errors = e.errors()
        error_msgs: list[str] = []
        for err in errors:
            loc = ".".join(str(loc) for loc in err["loc"])
            error_msgs.append(f"  - {loc}: {err['msg']}")

        message = (
            f"Ruleset validation failed ({len(errors)} error(s)):\n"
            + "\n".join(error_msgs)
        )
        validation_error_dicts = [dict(err) for err in errors]
        raise ConfigValidationError(
            message, path=path, validation_errors=validation_error_dicts
        ) from e


def load_ruleset(path: str | Path) -> RulesetConfig:
    """Load and validate a ruleset from a YAML file.

    Args:
        path: Path to the ruleset file.

    Returns:
        Validated RulesetConfig

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigError: If the file cannot be read or parsed
        ConfigValidationError: If the document fails schema validation

    Example:
        >>> config = load_ruleset("access.yaml")
        >>> config.build()({"hasAccess": True})
        'User Access Granted'
    """
    ruleset_path = Path(path).expanduser()
    if not ruleset_path.exists():
        msg = f"Ruleset file not found: {ruleset_path}"
        raise ConfigNotFoundError(msg, ruleset_path)

    return parse_ruleset(load_yaml(ruleset_path), ruleset_path)


def build_decider(path: str | Path, *, return_all_matches: bool | None = None) -> BaseDecider:
    """Load a ruleset file and build its matcher.

    Args:
        path: Path to the ruleset file.
        return_all_matches: Override the file's setting (full mode).

    Returns:
        Decider or SimpleDecider.
    """
    return load_ruleset(path).build(return_all_matches=return_all_matches)
