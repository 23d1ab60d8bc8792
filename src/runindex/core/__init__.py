"""runindex core -- ambient primitives shared by the index modules.

Architecture::

    errors.py          Structured error hierarchy (RunIndexError, ElementNotIndexedError)
    logging.py         structlog configuration + get_logger
    settings.py        pydantic-settings StoreSettings (RUNINDEX_* env vars)
    timestamps.py      Message timestamp -> datetime / timedelta (stdlib-only)

``settings`` is not imported here; it depends on :mod:`runindex.store`.
"""

from runindex.core.errors import (
    ConfigError,
    ElementNotIndexedError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigError,
    RunIndexError,
    categorize_error,
)
from runindex.core.logging import configure_logging, get_logger

__all__ = [
    "ConfigError",
    "ElementNotIndexedError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidConfigError",
    "RunIndexError",
    "categorize_error",
    "configure_logging",
    "get_logger",
]
