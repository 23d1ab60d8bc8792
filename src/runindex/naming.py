"""
Display names for document nodes and pickles.

Reports that flatten a run (JUnit XML, TeamCity, console summaries) need one
string per test. A :class:`NamingStrategy` builds that string from a
:class:`~runindex.lineage.Lineage` by reducing it in descending order.

Options:
    ::

        Strategy     LONG   "Feature - Rule - Scenario - Examples - #1.2"
                     SHORT  the most specific piece only
        FeatureName  INCLUDE | EXCLUDE the feature name from LONG names
        ExampleName  NUMBER                              "#1.2"
                     PICKLE                              "Eating 5 cucumbers"
                     NUMBER_AND_PICKLE_IF_PARAMETERIZED  "#1.2: Eating 5 cucumbers"

Examples:
    >>> naming = (
    ...     NamingStrategy.strategy(Strategy.LONG)
    ...     .example_name(ExampleName.NUMBER_AND_PICKLE_IF_PARAMETERIZED)
    ...     .build()
    ... )
    >>> naming.reduce(lineage, pickle)
    'Basic feature - Eating <eat> cucumbers - These are passing - #1.1: Eating 5 cucumbers'
"""

from __future__ import annotations

from enum import Enum

from runindex.messages import Examples, Feature, Pickle, Rule, Scenario, TableRow
from runindex.reducer import LineageReducer, TraversalOrder

DELIMITER = " - "


class Strategy(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"


class FeatureName(str, Enum):
    INCLUDE = "INCLUDE"
    EXCLUDE = "EXCLUDE"


class ExampleName(str, Enum):
    NUMBER = "NUMBER"
    PICKLE = "PICKLE"
    NUMBER_AND_PICKLE_IF_PARAMETERIZED = "NUMBER_AND_PICKLE_IF_PARAMETERIZED"


class NamingCollector:
    """Accumulates name pieces root to leaf."""

    def __init__(self, strategy: Strategy, feature_name: FeatureName, example_name: ExampleName):
        self._strategy = strategy
        self._feature_name = feature_name
        self._example_name = example_name
        self._parts: list[str] = []
        self._scenario_name: str | None = None
        self._examples_index = 0
        self._is_example = False
        self._pickle_name: str | None = None

    def add_feature(self, feature: Feature) -> None:
        # SHORT names a bare feature by its own name
        if self._feature_name is FeatureName.INCLUDE or self._strategy is Strategy.SHORT:
            self._parts.append(feature.name)

    def add_rule(self, rule: Rule) -> None:
        self._parts.append(rule.name)

    def add_scenario(self, scenario: Scenario) -> None:
        self._scenario_name = scenario.name
        self._parts.append(scenario.name)

    def add_examples(self, examples: Examples, index: int) -> None:
        self._examples_index = index
        self._parts.append(examples.name)

    def add_example(self, example: TableRow, index: int) -> None:
        self._is_example = True
        self._parts.append(f"#{self._examples_index + 1}.{index + 1}")

    def add_pickle(self, pickle: Pickle) -> None:
        self._pickle_name = pickle.name

        if self._scenario_name is None:
            self._parts.append(pickle.name)
            return

        if not self._is_example:
            return

        if self._example_name is ExampleName.PICKLE:
            self._parts[-1] = pickle.name
        elif self._example_name is ExampleName.NUMBER_AND_PICKLE_IF_PARAMETERIZED:
            if pickle.name != self._scenario_name:
                self._parts[-1] = f"{self._parts[-1]}: {pickle.name}"

    def finish(self) -> str:
        if self._strategy is Strategy.SHORT:
            return self._short_name()
        return DELIMITER.join(part for part in self._parts if part)

    def _short_name(self) -> str:
        if self._pickle_name is not None:
            if self._is_example and self._example_name is ExampleName.NUMBER:
                return self._parts[-1]
            return self._pickle_name
        return self._parts[-1] if self._parts else ""


class NamingStrategy(LineageReducer[str]):
    """A descending :class:`LineageReducer` producing display names.

    Build one with :meth:`strategy`.
    """

    def __init__(
        self,
        strategy: Strategy,
        feature_name: FeatureName = FeatureName.INCLUDE,
        example_name: ExampleName = ExampleName.NUMBER,
    ):
        super().__init__(
            lambda: NamingCollector(strategy, feature_name, example_name),
            TraversalOrder.DESCENDING,
        )
        self.name_strategy = strategy
        self.feature_name = feature_name
        self.example_name = example_name

    @staticmethod
    def strategy(strategy: Strategy) -> NamingStrategyBuilder:
        return NamingStrategyBuilder(strategy)

    def __repr__(self) -> str:
        return f"NamingStrategy({self.name_strategy.value}, {self.feature_name.value}, {self.example_name.value})"


class NamingStrategyBuilder:
    def __init__(self, strategy: Strategy):
        self._strategy = strategy
        self._feature_name = FeatureName.INCLUDE
        self._example_name = ExampleName.NUMBER

    def feature_name(self, feature_name: FeatureName) -> NamingStrategyBuilder:
        self._feature_name = feature_name
        return self

    def example_name(self, example_name: ExampleName) -> NamingStrategyBuilder:
        self._example_name = example_name
        return self

    def build(self) -> NamingStrategy:
        return NamingStrategy(self._strategy, self._feature_name, self._example_name)


__all__ = [
    "Strategy",
    "FeatureName",
    "ExampleName",
    "NamingCollector",
    "NamingStrategy",
    "NamingStrategyBuilder",
]
