"""
Message builders shared by the test suite.

``examples_tables_document()`` returns one document exercising every node
kind::

    Feature: Examples Tables
      Background                                   (background)
      Scenario Outline: Eating <eat> cucumbers     (scenario-outline)
        Examples: These are passing                (examples-passing)
          | eat |                                  (row-header)
          |  5  |                                  (row-1)
          |  2  |                                  (row-2)
        Examples: These are failing                (examples-failing)
          | 20  |                                  (row-3)
      Rule: Eating rules                           (rule)
        Background                                 (rule-background)
        Scenario: Eating in a rule                 (scenario-in-rule)
      Scenario: A plain scenario                   (plain-scenario)
"""

from __future__ import annotations

from runindex.messages import (
    Background,
    Duration,
    Envelope,
    Examples,
    Feature,
    FeatureChild,
    GherkinDocument,
    Location,
    Pickle,
    PickleStep,
    Rule,
    RuleChild,
    Scenario,
    Step,
    TableCell,
    TableRow,
    TestCase,
    TestCaseFinished,
    TestCaseStarted,
    TestStep,
    TestStepFinished,
    TestStepResult,
    TestStepResultStatus,
    TestStepStarted,
    Timestamp,
)

URI = "features/examples-tables.feature"
FEATURE_NAME = "Examples Tables"


def row(row_id: str, line: int, value: str) -> TableRow:
    return TableRow(location=Location(line, 7), cells=(TableCell(Location(line, 9), value),), id=row_id)


def step(step_id: str, line: int, text: str, keyword: str = "Given ") -> Step:
    return Step(location=Location(line, 5), keyword=keyword, text=text, id=step_id)


def examples_tables_document(uri: str = URI) -> GherkinDocument:
    background = Background(
        location=Location(3, 3),
        keyword="Background",
        name="",
        id="background",
        steps=(step("step-background", 4, "there are 12 cucumbers"),),
    )
    outline = Scenario(
        location=Location(6, 3),
        keyword="Scenario Outline",
        name="Eating <eat> cucumbers",
        id="scenario-outline",
        steps=(step("step-eat", 7, "I eat <eat> cucumbers", "When "),),
        examples=(
            Examples(
                location=Location(9, 5),
                keyword="Examples",
                name="These are passing",
                id="examples-passing",
                table_header=row("row-header", 10, "eat"),
                table_body=(row("row-1", 11, "5"), row("row-2", 12, "2")),
            ),
            Examples(
                location=Location(14, 5),
                keyword="Examples",
                name="These are failing",
                id="examples-failing",
                table_header=row("row-header-failing", 15, "eat"),
                table_body=(row("row-3", 16, "20"),),
            ),
        ),
    )
    rule_background = Background(
        location=Location(19, 5),
        keyword="Background",
        name="",
        id="rule-background",
        steps=(step("step-rule-background", 20, "the rules apply"),),
    )
    scenario_in_rule = Scenario(
        location=Location(22, 5),
        keyword="Scenario",
        name="Eating in a rule",
        id="scenario-in-rule",
        steps=(step("step-in-rule", 23, "I eat 1 cucumber", "When "),),
    )
    rule = Rule(
        location=Location(18, 3),
        keyword="Rule",
        name="Eating rules",
        id="rule",
        children=(RuleChild(background=rule_background), RuleChild(scenario=scenario_in_rule)),
    )
    plain = Scenario(
        location=Location(25, 3),
        keyword="Scenario",
        name="A plain scenario",
        id="plain-scenario",
        steps=(step("step-plain", 26, "nothing happens"),),
    )
    feature = Feature(
        location=Location(1, 1),
        language="en",
        keyword="Feature",
        name=FEATURE_NAME,
        children=(
            FeatureChild(background=background),
            FeatureChild(scenario=outline),
            FeatureChild(rule=rule),
            FeatureChild(scenario=plain),
        ),
    )
    return GherkinDocument(uri=uri, feature=feature)


def outline_pickle(row_id: str, eat: str) -> Pickle:
    return Pickle(
        id=f"pickle-{row_id}",
        uri=URI,
        name=f"Eating {eat} cucumbers",
        language="en",
        ast_node_ids=("scenario-outline", row_id),
        steps=(PickleStep(id=f"pickle-step-{row_id}", text=f"I eat {eat} cucumbers", ast_node_ids=("step-eat", row_id)),),
    )


def scenario_pickle(scenario_id: str, name: str, step_id: str) -> Pickle:
    return Pickle(
        id=f"pickle-{scenario_id}",
        uri=URI,
        name=name,
        language="en",
        ast_node_ids=(scenario_id,),
        steps=(PickleStep(id=f"pickle-step-{scenario_id}", text=name, ast_node_ids=(step_id,)),),
    )


def build_test_case(pickle: Pickle, step_count: int, test_case_id: str | None = None) -> TestCase:
    test_case_id = test_case_id or f"test-case-{pickle.id}"
    pickle_step_id = pickle.steps[0].id if pickle.steps else None
    return TestCase(
        id=test_case_id,
        pickle_id=pickle.id,
        test_steps=tuple(
            TestStep(id=f"{test_case_id}-step-{i}", pickle_step_id=pickle_step_id, step_definition_ids=())
            for i in range(step_count)
        ),
    )


def attempt(
    started_id: str,
    test_case: TestCase,
    statuses: list[TestStepResultStatus],
    *,
    attempt_number: int = 0,
    will_be_retried: bool = False,
    start: int = 0,
    finish: bool = True,
) -> list[Envelope]:
    """Envelopes of one attempt: started, one started/finished pair per status, finished.

    Each step takes one second, starting at ``start`` seconds.
    """
    envelopes = [
        Envelope.of(
            TestCaseStarted(
                id=started_id,
                test_case_id=test_case.id,
                attempt=attempt_number,
                timestamp=Timestamp(seconds=start),
            )
        )
    ]
    for i, status in enumerate(statuses):
        test_step_id = test_case.test_steps[i].id
        envelopes.append(
            Envelope.of(
                TestStepStarted(
                    test_case_started_id=started_id,
                    test_step_id=test_step_id,
                    timestamp=Timestamp(seconds=start + i),
                )
            )
        )
        envelopes.append(
            Envelope.of(
                TestStepFinished(
                    test_case_started_id=started_id,
                    test_step_id=test_step_id,
                    test_step_result=TestStepResult(duration=Duration(seconds=1), status=status),
                    timestamp=Timestamp(seconds=start + i + 1),
                )
            )
        )
    if finish:
        envelopes.append(
            Envelope.of(
                TestCaseFinished(
                    test_case_started_id=started_id,
                    timestamp=Timestamp(seconds=start + len(statuses)),
                    will_be_retried=will_be_retried,
                )
            )
        )
    return envelopes
