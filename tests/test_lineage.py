"""Tests for runindex.lineage."""

import pytest

from runindex.core.errors import ElementNotIndexedError
from runindex.lineage import Lineage, LineageIndex
from runindex.messages import (
    Background,
    Feature,
    FeatureChild,
    GherkinDocument,
    Location,
    Pickle,
    Rule,
    RuleChild,
    Scenario,
)

from _support.builders import examples_tables_document, outline_pickle, scenario_pickle


def _nodes(document: GherkinDocument):
    feature = document.feature
    background, outline, rule, plain = (
        feature.children[0].background,
        feature.children[1].scenario,
        feature.children[2].rule,
        feature.children[3].scenario,
    )
    return feature, background, outline, rule, plain


@pytest.fixture
def index(document) -> LineageIndex:
    index = LineageIndex()
    index.add_document(document)
    return index


class TestLineageValue:
    """Lineage is extended one field at a time."""

    def test_with_methods_return_new_values(self, document):
        root = Lineage(document)
        extended = root.with_feature(document.feature)
        assert root.feature is None
        assert extended.feature is document.feature
        assert extended.document is document

    def test_with_examples_sets_index(self, document):
        examples = document.feature.children[1].scenario.examples[1]
        lineage = Lineage(document).with_examples(examples, 1)
        assert lineage.examples is examples
        assert lineage.examples_index == 1


class TestAddDocument:
    """Test publishing lineages from one document."""

    def test_returns_number_of_published_nodes(self, document):
        # document, feature, outline, 2 examples, 3 rows, rule, scenario in rule, plain scenario
        assert LineageIndex().add_document(document) == 11

    def test_document_lineage(self, index, document):
        lineage = index.find(document)
        assert lineage == Lineage(document)

    def test_feature_lineage_records_background(self, index, document):
        feature, background, *_ = _nodes(document)
        lineage = index.find(feature)
        assert lineage.feature is feature
        assert lineage.background is background
        assert lineage.scenario is None

    def test_rule_scenario_lineage(self, index, document):
        feature, _, _, rule, _ = _nodes(document)
        scenario = rule.children[1].scenario
        lineage = index.find(scenario)
        assert lineage.feature is feature
        assert lineage.background is None
        assert lineage.rule is rule
        assert lineage.rule_background is rule.children[0].background
        assert lineage.scenario is scenario
        assert lineage.examples is None
        assert lineage.example is None

    def test_rule_lineage_has_rule_background(self, index, document):
        _, _, _, rule, _ = _nodes(document)
        lineage = index.find(rule)
        assert lineage.rule is rule
        assert lineage.background is None
        assert lineage.rule_background is rule.children[0].background
        assert lineage.scenario is None

    def test_example_row_lineage(self, index, document):
        _, _, outline, _, _ = _nodes(document)
        failing = outline.examples[1]
        row = failing.table_body[0]
        lineage = index.find(row)
        assert lineage.scenario is outline
        assert lineage.examples is failing
        assert lineage.examples_index == 1
        assert lineage.example is row
        assert lineage.example_index == 0
        assert lineage.rule is None

    def test_plain_scenario_has_no_rule_or_examples(self, index, document):
        *_, plain = _nodes(document)
        lineage = index.find(plain)
        assert lineage.rule is None
        assert lineage.rule_background is None
        assert lineage.examples is None
        assert lineage.examples_index is None

    def test_featureless_document(self):
        document = GherkinDocument(uri="empty.feature")
        index = LineageIndex()
        assert index.add_document(document) == 1
        assert index.find(document) == Lineage(document)

    def test_backgrounds_never_both_set(self, index, document):
        _, background, *_ = _nodes(document)
        node_ids = (
            "scenario-outline", "examples-passing", "row-1", "row-3",
            "rule", "scenario-in-rule", "plain-scenario",
        )
        for node_id in node_ids:
            lineage = index.find_by_id(node_id)
            assert lineage.background is None or lineage.rule_background is None, node_id
        assert index.find_by_id("row-1").background is background
        assert index.find_by_id("scenario-in-rule").rule_background is not None

    def test_rule_without_background_drops_feature_background(self):
        scenario = Scenario(location=Location(5), keyword="Scenario", name="inner", id="inner")
        rule = Rule(location=Location(4), keyword="Rule", name="bare", id="bare", children=(RuleChild(scenario=scenario),))
        background = Background(location=Location(2), keyword="Background", name="", id="bg")
        feature = Feature(
            location=Location(1),
            language="en",
            keyword="Feature",
            name="f",
            children=(FeatureChild(background=background), FeatureChild(rule=rule)),
        )
        index = LineageIndex()
        index.add_document(GherkinDocument(uri="bare.feature", feature=feature))
        assert index.find(feature).background is background
        lineage = index.find(scenario)
        assert lineage.background is None
        assert lineage.rule_background is None

    def test_find_by_id(self, index):
        assert index.find_by_id("row-2").example_index == 1
        assert index.find_by_id("missing") is None


class TestFind:
    """Node lookups are contract checked."""

    def test_unknown_scenario_raises(self, index):
        stranger = Scenario(location=Location(1), keyword="Scenario", name="?", id="stranger")
        with pytest.raises(ElementNotIndexedError) as exc_info:
            index.find(stranger)
        assert exc_info.value.context.element_kind == "Scenario"
        assert exc_info.value.context.element_id == "stranger"

    def test_equal_but_distinct_feature_raises(self, index, document):
        copy = Feature(**{name: getattr(document.feature, name) for name in Feature.__dataclass_fields__})
        assert copy == document.feature
        with pytest.raises(ElementNotIndexedError):
            index.find(copy)

    def test_unknown_document_raises(self, index):
        with pytest.raises(ElementNotIndexedError):
            index.find(GherkinDocument(uri="other.feature"))

    def test_non_node_is_type_error(self, index):
        with pytest.raises(TypeError):
            index.find("row-1")


class TestFindByPickle:
    """Pickles resolve through their last ast node id."""

    def test_outline_pickle_resolves_to_row(self, index):
        lineage = index.find_by_pickle(outline_pickle("row-2", "2"))
        assert lineage.example.id == "row-2"

    def test_scenario_pickle_resolves_to_scenario(self, index):
        lineage = index.find_by_pickle(scenario_pickle("plain-scenario", "A plain scenario", "step-plain"))
        assert lineage.scenario.id == "plain-scenario"

    def test_unknown_pickle_is_none(self, index):
        pickle = Pickle(id="p", uri="x", name="x", language="en", ast_node_ids=("nowhere",))
        assert index.find_by_pickle(pickle) is None

    def test_pickle_without_ast_nodes_is_none(self, index):
        pickle = Pickle(id="p", uri="x", name="x", language="en", ast_node_ids=())
        assert index.find_by_pickle(pickle) is None


class TestReindexing:
    """Adding the same document twice is harmless."""

    def test_second_add_replaces_by_id(self):
        index = LineageIndex()
        first = examples_tables_document()
        second = examples_tables_document()
        index.add_document(first)
        index.add_document(second)
        assert index.find_by_id("row-1").document is second
