"""
Exception hierarchy for mountguard.

All mountguard exceptions inherit from MountGuardError, allowing callers to
catch all mountguard-specific exceptions with a single except clause.

Exception Categories:
    - ConfigInvalidError: Configuration document could not be parsed/validated
    - ConfigPersistError: Configuration could not be written back

Policy evaluation never raises: denials are returned as PolicyDecision
values, so there is no "denied" exception here.
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Config errors: 1xxx
ERROR_CONFIG_INVALID = 1001
ERROR_CONFIG_PERSIST_FAILED = 1002


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class MountGuardError(Exception):
    """
    Base exception for all mountguard errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Config Errors
# =============================================================================


@dataclass
class ConfigError(MountGuardError):
    """
    Base class for configuration errors.

    Attributes:
        path: Config file involved, if any
    """

    path: str | None = None

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["path"] = self.path


@dataclass
class ConfigInvalidError(ConfigError):
    """
    Raised when a config document cannot be parsed into a PolicyConfig.

    ConfigStore.load recovers from this locally by installing defaults;
    only parse_config lets it escape.
    """

    validation_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid configuration: {self.validation_error}"
        if self.code == 0:
            self.code = ERROR_CONFIG_INVALID
        if not self.suggestion:
            self.suggestion = "Fix the config file or delete it to regenerate defaults"
        super().__post_init__()
        self.context["validation_error"] = self.validation_error


@dataclass
class ConfigPersistError(ConfigError):
    """Raised when the config cannot be written. Not retried."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to save configuration: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_CONFIG_PERSIST_FAILED
        if not self.suggestion:
            self.suggestion = "Check that the config path is valid and writable"
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error
