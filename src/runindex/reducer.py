"""
Folds over a :class:`~runindex.lineage.Lineage`.

A collector is any object with a ``finish()`` method plus any subset of the
visit methods below. The reducer calls only the methods a collector defines;
there is no base class to inherit no-ops from.

Visit methods:
    ::

        add_document(document)
        add_feature(feature)
        add_rule(rule)
        add_scenario(scenario)
        add_examples(examples, index)
        add_example(example, index)
        add_pickle(pickle)

Orders:
    ::

        DESCENDING  document ─► feature ─► rule ─► scenario ─► examples ─► example ─► pickle
        ASCENDING   pickle ─► example ─► examples ─► scenario ─► rule ─► feature ─► document

A reducer holds a collector factory, not a collector, and creates a fresh
collector for every :meth:`LineageReducer.reduce` call. One reducer can be
shared by any number of threads.

Examples:
    >>> reducer = LineageReducer.ascending(FirstLocationCollector, short_circuit=True)
    >>> reducer.reduce(lineage)
    Location(line=12, column=3)
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from enum import Enum
from typing import Any, Generic, Protocol, TypeVar

from runindex.lineage import Lineage
from runindex.messages import (
    Examples,
    Feature,
    Location,
    Pickle,
    Rule,
    Scenario,
    TableRow,
)

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Collector(Protocol[T_co]):
    """The one required capability of a collector."""

    def finish(self) -> T_co: ...


class TraversalOrder(str, Enum):
    DESCENDING = "descending"
    ASCENDING = "ascending"


def _visits(lineage: Lineage, pickle: Pickle | None, order: TraversalOrder) -> Iterator[tuple[str, tuple[Any, ...]]]:
    """Visits for ``lineage`` in root-to-leaf order, reversed for ASCENDING."""
    visits: list[tuple[str, tuple[Any, ...]]] = [("add_document", (lineage.document,))]
    if lineage.feature is not None:
        visits.append(("add_feature", (lineage.feature,)))
    if lineage.rule is not None:
        visits.append(("add_rule", (lineage.rule,)))
    if lineage.scenario is not None:
        visits.append(("add_scenario", (lineage.scenario,)))
    if lineage.examples is not None:
        visits.append(("add_examples", (lineage.examples, lineage.examples_index or 0)))
    if lineage.example is not None:
        visits.append(("add_example", (lineage.example, lineage.example_index or 0)))
    if pickle is not None:
        visits.append(("add_pickle", (pickle,)))
    if order is TraversalOrder.ASCENDING:
        visits.reverse()
    return iter(visits)


class LineageReducer(Generic[T]):
    """
    Reduces a lineage, optionally with a pickle, to a value of type ``T``.

    Args:
        collector_factory: Zero-argument callable returning a fresh collector
        order: Visiting order
        short_circuit: Stop visiting once the collector's ``is_complete()``
            returns true. Collectors without ``is_complete`` are always
            visited in full.
    """

    def __init__(
        self,
        collector_factory: Callable[[], Collector[T]],
        order: TraversalOrder = TraversalOrder.DESCENDING,
        short_circuit: bool = False,
    ):
        self._collector_factory = collector_factory
        self._order = order
        self._short_circuit = short_circuit

    @classmethod
    def descending(cls, collector_factory: Callable[[], Collector[T]]) -> LineageReducer[T]:
        return cls(collector_factory, TraversalOrder.DESCENDING)

    @classmethod
    def ascending(cls, collector_factory: Callable[[], Collector[T]], short_circuit: bool = False) -> LineageReducer[T]:
        return cls(collector_factory, TraversalOrder.ASCENDING, short_circuit)

    @property
    def order(self) -> TraversalOrder:
        return self._order

    def reduce(self, lineage: Lineage, pickle: Pickle | None = None) -> T:
        collector = self._collector_factory()
        is_complete = getattr(collector, "is_complete", None) if self._short_circuit else None
        for method_name, args in _visits(lineage, pickle, self._order):
            if is_complete is not None and is_complete():
                break
            visit = getattr(collector, method_name, None)
            if visit is not None:
                visit(*args)
        return collector.finish()


class FirstLocationCollector:
    """
    Location of the first node visited that has one.

    Ascending, that is the most specific node; descending, the feature.
    Documents and pickles have no location.
    """

    def __init__(self) -> None:
        self._location: Location | None = None

    def _offer(self, location: Location) -> None:
        if self._location is None:
            self._location = location

    def add_feature(self, feature: Feature) -> None:
        self._offer(feature.location)

    def add_rule(self, rule: Rule) -> None:
        self._offer(rule.location)

    def add_scenario(self, scenario: Scenario) -> None:
        self._offer(scenario.location)

    def add_examples(self, examples: Examples, index: int) -> None:
        self._offer(examples.location)

    def add_example(self, example: TableRow, index: int) -> None:
        self._offer(example.location)

    def is_complete(self) -> bool:
        return self._location is not None

    def finish(self) -> Location | None:
        return self._location


__all__ = [
    "Collector",
    "TraversalOrder",
    "LineageReducer",
    "FirstLocationCollector",
]
