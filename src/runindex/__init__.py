"""runindex -- an in-memory index over the messages of one test run.

Feed every message of a run into an :class:`EntityStore`, then ask a
:class:`Query` how the pieces relate: which pickle an attempt ran, which
feature it belongs to, its most severe step result, how long it took, and
what to call it in a flat report.

Architecture::

    messages.py        Frozen dataclasses for every message kind + Envelope
    store.py           EntityStore: update(envelope) -> per-kind tables
    lineage.py         Lineage + LineageIndex (ancestor chains of document nodes)
    reducer.py         LineageReducer / Collector folds (ascending, descending)
    naming.py          NamingStrategy display names
    status.py          SeverityRanking of step result statuses
    query.py           Query facade (read side)
    core/              errors, logging, settings, timestamps

Usage::

    store = EntityStore(ALL_FEATURES)
    for envelope in envelopes:
        store.update(envelope)
    query = Query(store)
    query.count_most_severe_test_step_result_status()
"""

__version__ = "0.1.0"

from runindex.core.errors import ElementNotIndexedError, RunIndexError
from runindex.lineage import Lineage, LineageIndex
from runindex.messages import Envelope, TestStepResultStatus
from runindex.naming import ExampleName, FeatureName, NamingStrategy, Strategy
from runindex.query import Query
from runindex.reducer import FirstLocationCollector, LineageReducer, TraversalOrder
from runindex.status import DEFAULT_RANKING, SeverityRanking
from runindex.store import ALL_FEATURES, EntityStore, StoreFeature

__all__ = [
    "ALL_FEATURES",
    "DEFAULT_RANKING",
    "ElementNotIndexedError",
    "EntityStore",
    "Envelope",
    "ExampleName",
    "FeatureName",
    "FirstLocationCollector",
    "Lineage",
    "LineageIndex",
    "LineageReducer",
    "NamingStrategy",
    "Query",
    "RunIndexError",
    "SeverityRanking",
    "Strategy",
    "StoreFeature",
    "TestStepResultStatus",
    "TraversalOrder",
]
