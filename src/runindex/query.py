"""
Read side of the index.

:class:`Query` answers "given one message, find another" questions over an
:class:`~runindex.store.EntityStore` while the run is still in progress. Data
that has not arrived yet, or belongs to a disabled category, is reported as
``None`` or an empty collection. Only node lookups that could not have come
from the store raise :class:`~runindex.core.errors.ElementNotIndexedError`.

Every method takes the store's lock for the duration of its table reads and
returns copies, never live tables. A query may combine tables read at slightly
different moments; since ids are unique per attempt and the tables only grow,
that shows up as "not yet visible", never as a contradiction.

Examples:
    >>> query = Query(store)
    >>> [query.find_most_severe_test_step_result_by(s).status for s in query.find_all_test_case_started()]
    [<TestStepResultStatus.PASSED: 'PASSED'>, <TestStepResultStatus.FAILED: 'FAILED'>]
    >>> query.find_name_of(pickle, NamingStrategy.strategy(Strategy.SHORT).build())
    '#1.1'
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from typing import Any

from runindex.core.timestamps import between, to_timedelta
from runindex.lineage import Lineage
from runindex.messages import (
    Attachment,
    Examples,
    Feature,
    GherkinDocument,
    Hook,
    Location,
    Meta,
    Pickle,
    PickleStep,
    Rule,
    Scenario,
    Step,
    StepDefinition,
    Suggestion,
    TableRow,
    TestCase,
    TestCaseFinished,
    TestCaseStarted,
    TestRunFinished,
    TestRunHookFinished,
    TestRunHookStarted,
    TestRunStarted,
    TestStep,
    TestStepFinished,
    TestStepResult,
    TestStepResultStatus,
    TestStepStarted,
    UndefinedParameterType,
)
from runindex.naming import NamingStrategy
from runindex.status import DEFAULT_RANKING, SeverityRanking
from runindex.store import EntityStore

DocumentNode = GherkinDocument | Feature | Rule | Scenario | Examples | TableRow


class Query:
    """
    Derived queries over one store.

    Args:
        store: The store to read
        severity: Ranking used to pick the most severe step result
    """

    def __init__(self, store: EntityStore, severity: SeverityRanking = DEFAULT_RANKING):
        self._store = store
        self._severity = severity

    @property
    def store(self) -> EntityStore:
        return self._store

    # =========================================================================
    # RESULTS
    # =========================================================================

    def find_most_severe_test_step_result_by(
        self, element: TestCaseStarted | TestCaseFinished
    ) -> TestStepResult | None:
        """Worst step result recorded so far for one attempt."""
        finished = self.find_test_steps_finished_by(element)
        return self._severity.most_severe_result(step.test_step_result for step in finished)

    def count_most_severe_test_step_result_status(self) -> dict[TestStepResultStatus, int]:
        """
        Number of attempts per most severe status.

        Every status is present. Statuses seen among the counted attempts come
        first, in the order they were first seen; the rest follow in
        declaration order with a count of zero.
        """
        counts: dict[TestStepResultStatus, int] = {}
        for started in self.find_all_test_case_started():
            result = self.find_most_severe_test_step_result_by(started)
            if result is not None:
                counts[result.status] = counts.get(result.status, 0) + 1
        for status in TestStepResultStatus:
            counts.setdefault(status, 0)
        return counts

    # =========================================================================
    # ATTEMPTS
    # =========================================================================

    def find_all_test_case_started(self) -> list[TestCaseStarted]:
        """Attempts in arrival order, leaving out those that will be retried."""
        with self._store.lock:
            finished = self._store.test_case_finished_by_test_case_started_id
            return [
                started
                for started in self._store.test_case_started_by_id.values()
                if not (started.id in finished and finished[started.id].will_be_retried)
            ]

    def count_test_cases_started(self) -> int:
        return len(self.find_all_test_case_started())

    def find_all_test_case_started_order_by(self, key: Callable[[TestCaseStarted], Any]) -> list[TestCaseStarted]:
        """:meth:`find_all_test_case_started` sorted by ``key``.

        Attempts whose key is ``None`` come last, in arrival order.
        """
        keyed = [(key(started), started) for started in self.find_all_test_case_started()]
        ordered = sorted((item for item in keyed if item[0] is not None), key=lambda item: item[0])
        return [started for _, started in ordered] + [started for k, started in keyed if k is None]

    def find_all_test_case_started_grouped_by_feature(self) -> dict[Feature | None, list[TestCaseStarted]]:
        """
        Attempts grouped by the feature they belong to.

        Groups and their members keep first-seen order. Attempts whose feature
        cannot be resolved share the ``None`` group.
        """
        groups: dict[int | None, tuple[Feature | None, list[TestCaseStarted]]] = {}
        for started in self.find_all_test_case_started():
            feature = self.find_feature_by(started)
            key = None if feature is None else id(feature)
            groups.setdefault(key, (feature, []))[1].append(started)
        return {feature: members for feature, members in groups.values()}

    def find_all_test_case_finished(self) -> list[TestCaseFinished]:
        with self._store.lock:
            return list(self._store.test_case_finished_by_test_case_started_id.values())

    def find_test_case_started_by(
        self, element: TestCaseFinished | TestStepStarted | TestStepFinished
    ) -> TestCaseStarted | None:
        with self._store.lock:
            return self._store.test_case_started_by_id.get(element.test_case_started_id)

    def find_test_case_finished_by(self, test_case_started: TestCaseStarted) -> TestCaseFinished | None:
        with self._store.lock:
            return self._store.test_case_finished_by_test_case_started_id.get(test_case_started.id)

    def find_test_case_duration_by(self, element: TestCaseStarted | TestCaseFinished) -> timedelta | None:
        """Time from an attempt's start to its finish, once both are known."""
        if isinstance(element, TestCaseFinished):
            started = self.find_test_case_started_by(element)
            finished: TestCaseFinished | None = element
        else:
            started = element
            finished = self.find_test_case_finished_by(element)
        if started is None or finished is None:
            return None
        return between(started.timestamp, finished.timestamp)

    # =========================================================================
    # TEST CASES AND STEPS
    # =========================================================================

    def find_test_case_by(
        self, element: TestCaseStarted | TestCaseFinished | TestStepStarted | TestStepFinished
    ) -> TestCase | None:
        started = element if isinstance(element, TestCaseStarted) else self.find_test_case_started_by(element)
        if started is None:
            return None
        with self._store.lock:
            return self._store.test_case_by_id.get(started.test_case_id)

    def find_all_test_steps(self) -> list[TestStep]:
        with self._store.lock:
            return list(self._store.test_step_by_id.values())

    def find_test_step_by(self, element: TestStepStarted | TestStepFinished) -> TestStep | None:
        with self._store.lock:
            return self._store.test_step_by_id.get(element.test_step_id)

    def find_all_test_step_started(self) -> list[TestStepStarted]:
        with self._store.lock:
            return [step for steps in self._store.test_steps_started_by_test_case_started_id.values() for step in steps]

    def find_all_test_step_finished(self) -> list[TestStepFinished]:
        with self._store.lock:
            return [step for steps in self._store.test_steps_finished_by_test_case_started_id.values() for step in steps]

    def find_test_steps_started_by(self, element: TestCaseStarted | TestCaseFinished) -> list[TestStepStarted]:
        with self._store.lock:
            return list(self._store.test_steps_started_by_test_case_started_id.get(_started_id(element), ()))

    def find_test_steps_finished_by(self, element: TestCaseStarted | TestCaseFinished) -> list[TestStepFinished]:
        with self._store.lock:
            return list(self._store.test_steps_finished_by_test_case_started_id.get(_started_id(element), ()))

    def find_test_step_finished_and_test_step_by(
        self, test_case_started: TestCaseStarted
    ) -> list[tuple[TestStepFinished, TestStep]]:
        """Finished steps paired with their planned step; unplanned ones are left out."""
        pairs = []
        for finished in self.find_test_steps_finished_by(test_case_started):
            test_step = self.find_test_step_by(finished)
            if test_step is not None:
                pairs.append((finished, test_step))
        return pairs

    def find_test_step_duration_by(self, test_step_finished: TestStepFinished) -> timedelta:
        return to_timedelta(test_step_finished.test_step_result.duration)

    # =========================================================================
    # PICKLES AND DOCUMENTS
    # =========================================================================

    def find_all_pickles(self) -> list[Pickle]:
        with self._store.lock:
            return list(self._store.pickle_by_id.values())

    def find_all_pickle_steps(self) -> list[PickleStep]:
        with self._store.lock:
            return list(self._store.pickle_step_by_id.values())

    def find_pickle_by(self, element: TestCaseStarted | TestCaseFinished | TestStepStarted) -> Pickle | None:
        test_case = self.find_test_case_by(element)
        if test_case is None:
            return None
        with self._store.lock:
            return self._store.pickle_by_id.get(test_case.pickle_id)

    def find_pickle_step_by(self, test_step: TestStep) -> PickleStep | None:
        if test_step.pickle_step_id is None:
            return None
        with self._store.lock:
            return self._store.pickle_step_by_id.get(test_step.pickle_step_id)

    def find_step_by(self, pickle_step: PickleStep) -> Step | None:
        """The document step a pickle step was compiled from."""
        if not pickle_step.ast_node_ids:
            return None
        with self._store.lock:
            return self._store.step_by_id.get(pickle_step.ast_node_ids[0])

    def find_lineage_by(self, element: DocumentNode | Pickle | TestCaseStarted) -> Lineage | None:
        """
        Lineage of a document node, a pickle or an attempt.

        Raises:
            ElementNotIndexedError: ``element`` is a document node that was
                never indexed
        """
        if isinstance(element, TestCaseStarted):
            pickle = self.find_pickle_by(element)
            return None if pickle is None else self.find_lineage_by(pickle)
        with self._store.lock:
            if isinstance(element, Pickle):
                return self._store.lineage.find_by_pickle(element)
            return self._store.lineage.find(element)

    def find_feature_by(self, test_case_started: TestCaseStarted) -> Feature | None:
        lineage = self.find_lineage_by(test_case_started)
        return None if lineage is None else lineage.feature

    def find_location_of(self, pickle: Pickle) -> Location | None:
        """Location of the example row a pickle came from, else of its scenario."""
        lineage = self.find_lineage_by(pickle)
        if lineage is None:
            return None
        if lineage.example is not None:
            return lineage.example.location
        if lineage.scenario is not None:
            return lineage.scenario.location
        return None

    def find_name_of(
        self,
        element: DocumentNode | Pickle | TestCaseStarted,
        naming_strategy: NamingStrategy,
    ) -> str | None:
        """
        Display name of a document node, a pickle or an attempt.

        A pickle whose lineage is unknown is named by its own name. An attempt
        is named by its pickle, and is unnamed (``None``) when that pickle is
        unknown.

        Raises:
            ElementNotIndexedError: ``element`` is a document node that was
                never indexed
        """
        if isinstance(element, TestCaseStarted):
            pickle = self.find_pickle_by(element)
            return None if pickle is None else self.find_name_of(pickle, naming_strategy)
        if isinstance(element, Pickle):
            lineage = self.find_lineage_by(element)
            if lineage is None:
                return element.name
            return naming_strategy.reduce(lineage, element)
        return naming_strategy.reduce(self.find_lineage_by(element))

    # =========================================================================
    # GLUE
    # =========================================================================

    def find_all_step_definitions(self) -> list[StepDefinition]:
        with self._store.lock:
            return list(self._store.step_definition_by_id.values())

    def find_step_definitions_by(self, test_step: TestStep) -> list[StepDefinition]:
        """Step definitions matching a step; unknown ids are left out."""
        with self._store.lock:
            by_id = self._store.step_definition_by_id
            return [by_id[i] for i in test_step.step_definition_ids or () if i in by_id]

    def find_unambiguous_step_definition_by(self, test_step: TestStep) -> StepDefinition | None:
        """The step definition of a step matched by exactly one."""
        ids = test_step.step_definition_ids
        if ids is None or len(ids) != 1:
            return None
        with self._store.lock:
            return self._store.step_definition_by_id.get(ids[0])

    def find_hook_by(self, element: TestStep | TestRunHookStarted | TestRunHookFinished) -> Hook | None:
        if isinstance(element, TestRunHookFinished):
            started = self.find_test_run_hook_started_by(element)
            return None if started is None else self.find_hook_by(started)
        hook_id = element.hook_id
        if hook_id is None:
            return None
        with self._store.lock:
            return self._store.hook_by_id.get(hook_id)

    def find_suggestions_by(self, element: PickleStep | Pickle) -> list[Suggestion]:
        steps = element.steps if isinstance(element, Pickle) else (element,)
        with self._store.lock:
            by_step = self._store.suggestions_by_pickle_step_id
            return [suggestion for step in steps for suggestion in by_step.get(step.id, ())]

    def find_all_undefined_parameter_types(self) -> list[UndefinedParameterType]:
        with self._store.lock:
            return list(self._store.undefined_parameter_types)

    def find_attachments_by(self, element: TestStepFinished | TestRunHookFinished) -> list[Attachment]:
        """Attachments of one step of one attempt, or of one run-level hook."""
        with self._store.lock:
            if isinstance(element, TestRunHookFinished):
                return list(
                    self._store.attachments_by_test_run_hook_started_id.get(element.test_run_hook_started_id, ())
                )
            return [
                attachment
                for attachment in self._store.attachments_by_test_case_started_id.get(element.test_case_started_id, ())
                if attachment.test_step_id == element.test_step_id
            ]

    # =========================================================================
    # TEST RUN
    # =========================================================================

    def find_meta(self) -> Meta | None:
        with self._store.lock:
            return self._store.meta

    def find_test_run_started(self) -> TestRunStarted | None:
        with self._store.lock:
            return self._store.test_run_started

    def find_test_run_finished(self) -> TestRunFinished | None:
        with self._store.lock:
            return self._store.test_run_finished

    def find_test_run_duration(self) -> timedelta | None:
        with self._store.lock:
            started = self._store.test_run_started
            finished = self._store.test_run_finished
        if started is None or finished is None:
            return None
        return between(started.timestamp, finished.timestamp)

    def find_all_test_run_hook_started(self) -> list[TestRunHookStarted]:
        with self._store.lock:
            return list(self._store.test_run_hook_started_by_id.values())

    def find_all_test_run_hook_finished(self) -> list[TestRunHookFinished]:
        with self._store.lock:
            return list(self._store.test_run_hook_finished_by_test_run_hook_started_id.values())

    def find_test_run_hook_started_by(self, test_run_hook_finished: TestRunHookFinished) -> TestRunHookStarted | None:
        with self._store.lock:
            return self._store.test_run_hook_started_by_id.get(test_run_hook_finished.test_run_hook_started_id)

    def find_test_run_hook_finished_by(self, test_run_hook_started: TestRunHookStarted) -> TestRunHookFinished | None:
        with self._store.lock:
            return self._store.test_run_hook_finished_by_test_run_hook_started_id.get(test_run_hook_started.id)


def _started_id(element: TestCaseStarted | TestCaseFinished) -> str:
    if isinstance(element, TestCaseFinished):
        return element.test_case_started_id
    return element.id


__all__ = ["Query"]
