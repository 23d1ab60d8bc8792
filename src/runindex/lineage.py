"""
Ancestor chains of document nodes.

A :class:`GherkinDocument` arrives as one nested message; nodes inside it do
not point at their parents. :class:`LineageIndex` walks the document once and
publishes, for every addressable node, a :class:`Lineage` value naming all of
its ancestors. Pickles are resolved through their lineage anchor, the last of
their ``ast_node_ids``.

Keys:
    ::

        GherkinDocument  ─► uri
        Feature          ─► object identity (features carry no id)
        Rule / Scenario / Examples / TableRow ─► id

Examples:
    >>> index = LineageIndex()
    >>> index.add_document(document)
    5
    >>> index.find(scenario).rule is rule
    True
    >>> index.find_by_pickle(pickle).example_index
    0
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from runindex.core.errors import ElementNotIndexedError
from runindex.core.logging import get_logger
from runindex.messages import (
    Background,
    Examples,
    Feature,
    GherkinDocument,
    Pickle,
    Rule,
    Scenario,
    TableRow,
)

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Lineage:
    """
    All ancestors of one document node, the node itself included.

    Built only through the ``with_*`` methods, each of which returns a new
    value extended by one field. ``background`` is the feature's background
    and is set only outside rules; ``rule_background`` is the enclosing
    rule's. The two are never both set.
    """

    document: GherkinDocument
    feature: Feature | None = None
    background: Background | None = None
    rule: Rule | None = None
    rule_background: Background | None = None
    scenario: Scenario | None = None
    examples: Examples | None = None
    examples_index: int | None = None
    example: TableRow | None = None
    example_index: int | None = None

    def with_feature(self, feature: Feature) -> Lineage:
        return replace(self, feature=feature)

    def with_background(self, background: Background) -> Lineage:
        return replace(self, background=background)

    def with_rule(self, rule: Rule) -> Lineage:
        return replace(self, rule=rule)

    def with_rule_background(self, background: Background) -> Lineage:
        return replace(self, rule_background=background)

    def with_scenario(self, scenario: Scenario) -> Lineage:
        return replace(self, scenario=scenario)

    def with_examples(self, examples: Examples, index: int) -> Lineage:
        return replace(self, examples=examples, examples_index=index)

    def with_example(self, example: TableRow, index: int) -> Lineage:
        return replace(self, example=example, example_index=index)


class LineageIndex:
    """
    Lineage of every node of every indexed document.

    Not synchronized; :class:`~runindex.store.EntityStore` guards it with its
    own lock.
    """

    def __init__(self) -> None:
        self._by_key: dict[str, Lineage] = {}
        self._by_feature: dict[int, Lineage] = {}

    def __len__(self) -> int:
        return len(self._by_key) + len(self._by_feature)

    def add_document(self, document: GherkinDocument) -> int:
        """Publish the lineage of ``document`` and all of its nodes.

        Returns the number of lineages published.
        """
        published = 0

        def publish(key: str, lineage: Lineage) -> None:
            nonlocal published
            self._by_key[key] = lineage
            published += 1

        root = Lineage(document)
        publish(document.uri, root)

        feature = document.feature
        if feature is None:
            return published

        feature_lineage = root.with_feature(feature)
        for child in feature.children:
            if child.background is not None:
                feature_lineage = feature_lineage.with_background(child.background)
        self._by_feature[id(feature)] = feature_lineage
        published += 1

        def add_scenario(parent: Lineage, scenario: Scenario) -> None:
            scenario_lineage = parent.with_scenario(scenario)
            publish(scenario.id, scenario_lineage)
            for examples_index, examples in enumerate(scenario.examples):
                examples_lineage = scenario_lineage.with_examples(examples, examples_index)
                publish(examples.id, examples_lineage)
                for example_index, example in enumerate(examples.table_body):
                    publish(example.id, examples_lineage.with_example(example, example_index))

        for child in feature.children:
            if child.scenario is not None:
                add_scenario(feature_lineage, child.scenario)
            elif child.rule is not None:
                rule = child.rule
                rule_lineage = root.with_feature(feature).with_rule(rule)
                for rule_child in rule.children:
                    if rule_child.background is not None:
                        rule_lineage = rule_lineage.with_rule_background(rule_child.background)
                publish(rule.id, rule_lineage)
                for rule_child in rule.children:
                    if rule_child.scenario is not None:
                        add_scenario(rule_lineage, rule_child.scenario)

        return published

    def find(self, element: Any) -> Lineage:
        """Lineage of a document node.

        Raises:
            ElementNotIndexedError: ``element`` was never indexed
        """
        lineage = self._lookup(element)
        if lineage is None:
            element_id = getattr(element, "id", None) or getattr(element, "uri", None)
            logger.debug("element_not_indexed", kind=type(element).__name__, element_id=element_id)
            raise ElementNotIndexedError.for_element(type(element).__name__, element_id)
        return lineage

    def find_by_id(self, node_id: str) -> Lineage | None:
        return self._by_key.get(node_id)

    def find_by_pickle(self, pickle: Pickle) -> Lineage | None:
        """Lineage of the node ``pickle`` was compiled from, if indexed."""
        if not pickle.ast_node_ids:
            return None
        return self._by_key.get(pickle.ast_node_ids[-1])

    def _lookup(self, element: Any) -> Lineage | None:
        if isinstance(element, GherkinDocument):
            return self._by_key.get(element.uri)
        if isinstance(element, Feature):
            return self._by_feature.get(id(element))
        if isinstance(element, (Rule, Scenario, Examples, TableRow)):
            return self._by_key.get(element.id)
        raise TypeError(f"Not a document node: {type(element).__name__}")


__all__ = ["Lineage", "LineageIndex"]
