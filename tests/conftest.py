"""
Shared pytest fixtures and configuration for runindex tests.

This module provides:
- Marker assignment by test location
- A populated store and query over the examples-tables document
- Settings and logging isolation
"""

import sys
from pathlib import Path
from typing import Generator

import pytest
import structlog

# Ensure runindex package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from runindex.core.settings import clear_settings_cache
from runindex.messages import Envelope, GherkinDocument
from runindex.query import Query
from runindex.store import ALL_FEATURES, EntityStore

from _support.builders import examples_tables_document


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        if "properties" in Path(item.fspath).name:
            item.add_marker(pytest.mark.property)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "property", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings_cache() -> Generator[None, None, None]:
    """Clear cached settings before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Undo any structlog configuration a test applied."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture
def document() -> GherkinDocument:
    return examples_tables_document()


@pytest.fixture
def store(document: GherkinDocument) -> EntityStore:
    """Store with every feature enabled and the examples-tables document indexed."""
    store = EntityStore(ALL_FEATURES)
    store.update(Envelope.of(document))
    return store


@pytest.fixture
def query(store: EntityStore) -> Query:
    return Query(store)
