"""Settings for runindex.

Which optional message categories an :class:`~runindex.store.EntityStore`
retains is a memory/throughput trade-off made by the caller. ``StoreSettings``
lets that choice come from the environment (``RUNINDEX_*`` variables or a
``.env`` file) instead of being hard-coded.

Fields
──────
include_gherkin_documents : Index documents and their lineage
include_step_definitions  : Retain StepDefinition messages
include_hooks             : Retain Hook messages
include_attachments       : Retain Attachment messages
include_suggestions       : Retain Suggestion messages
log_level                 : Structlog log level
log_format                : ``json`` or ``console``

Examples:
    >>> import os
    >>> os.environ["RUNINDEX_INCLUDE_ATTACHMENTS"] = "false"
    >>> settings = StoreSettings()
    >>> StoreFeature.INCLUDE_ATTACHMENTS in settings.features()
    False
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from runindex.core.logging import LOG_FORMATS
from runindex.store import StoreFeature


class StoreSettings(BaseSettings):
    """Environment-driven store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RUNINDEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Retained categories ──────────────────────────────────────
    include_gherkin_documents: bool = Field(default=True)
    include_step_definitions: bool = Field(default=True)
    include_hooks: bool = Field(default=True)
    include_attachments: bool = Field(default=True)
    include_suggestions: bool = Field(default=True)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console", description=" or ".join(LOG_FORMATS))

    def features(self) -> frozenset[StoreFeature]:
        """The set of enabled store features."""
        enabled = {
            StoreFeature.INCLUDE_GHERKIN_DOCUMENTS: self.include_gherkin_documents,
            StoreFeature.INCLUDE_STEP_DEFINITIONS: self.include_step_definitions,
            StoreFeature.INCLUDE_HOOKS: self.include_hooks,
            StoreFeature.INCLUDE_ATTACHMENTS: self.include_attachments,
            StoreFeature.INCLUDE_SUGGESTIONS: self.include_suggestions,
        }
        return frozenset(feature for feature, on in enabled.items() if on)


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, StoreSettings] = {}


def get_settings(*, _force_reload: bool = False) -> StoreSettings:
    """Load, validate, and cache a :class:`StoreSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = StoreSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = [
    "LOG_FORMATS",
    "StoreSettings",
    "get_settings",
    "clear_settings_cache",
]
