"""
Structured error types for runindex.

The index distinguishes two regimes. A *contract violation* is a programmer
error: the caller handed the index an element that could not have come from
it, and the call fails fast with a typed error. *Missing data* is expected
while a test run is still in progress and is never an error; queries answer
with ``None`` or an empty collection instead.

Every error raised by this package extends :class:`RunIndexError` and carries:

- **Category:** What kind of error (contract, config, internal)
- **Context:** Structured metadata (element kind, element id, setting name)
- **Cause:** Chained underlying exception for root cause analysis

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────┐
        │                    RunIndexError                         │
        │              (category, context, cause)                  │
        ├─────────────────────────────────────────────────────────┤
        │  ElementNotIndexedError        ConfigError               │
        │  (CONTRACT, ValueError)        (CONFIG)                  │
        │                                     │                    │
        │                                InvalidConfigError        │
        └─────────────────────────────────────────────────────────┘

Examples:
    >>> error = ElementNotIndexedError.for_element("Scenario", "scenario-1")
    >>> error.category
    <ErrorCategory.CONTRACT: 'CONTRACT'>
    >>> error.context.element_id
    'scenario-1'

Guardrails:
    ❌ DON'T: Raise for data that simply has not arrived yet
    ✅ DO: Return ``None`` or an empty collection

    ❌ DON'T: Swallow the original exception when wrapping
    ✅ DO: Pass it as ``cause=``
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    CONTRACT = "CONTRACT"  # Caller passed an element the index never saw
    CONFIG = "CONFIG"  # Missing or invalid settings
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Typed fields cover the metadata the index knows about; anything else goes
    into ``metadata``. ``to_dict()`` serializes the non-None fields for
    logging.

    Attributes:
        element_kind: Message type of the offending element (e.g. ``"Rule"``)
        element_id: Id or uri of the offending element, when it has one
        setting: Name of the setting that failed validation
        metadata: Additional key-value pairs
    """

    element_kind: str | None = None
    element_id: str | None = None
    setting: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["element_kind", "element_id", "setting"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class RunIndexError(Exception):
    """
    Base exception for all runindex errors.

    Subclasses set ``default_category`` to classify themselves; callers may
    override it per instance.

    Examples:
        >>> error = RunIndexError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(element_kind="Pickle").context.element_kind
        'Pickle'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> RunIndexError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ConfigError("Unknown feature").with_context(setting="features")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONTRACT ERRORS
# =============================================================================


class ElementNotIndexedError(RunIndexError, ValueError):
    """
    A document element was looked up that this index never ingested.

    Raised when the lineage or the name of a GherkinDocument, Feature, Rule,
    Scenario, Examples or TableRow is requested but the element is absent from
    the lineage index. Pickles and attempts never raise this; an unresolvable
    pickle is "unknown", not a contract violation.
    """

    default_category = ErrorCategory.CONTRACT

    @classmethod
    def for_element(cls, element_kind: str, element_id: str | None = None) -> ElementNotIndexedError:
        return cls(
            "Element was not part of this index",
            context=ErrorContext(element_kind=element_kind, element_id=element_id),
        )


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(RunIndexError):
    """Configuration error. Never recoverable by retrying."""

    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """A configuration value is present but not acceptable."""

    def __init__(self, setting: str, message: str, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.context.setting = setting


def categorize_error(error: Exception) -> ErrorCategory:
    """Category of any exception; non-runindex errors are INTERNAL."""
    if isinstance(error, RunIndexError):
        return error.category
    return ErrorCategory.INTERNAL


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "RunIndexError",
    "ElementNotIndexedError",
    "ConfigError",
    "InvalidConfigError",
    "categorize_error",
]
