"""
In-memory tables of one test run.

:class:`EntityStore` is the write side of the index. Each :meth:`EntityStore.update`
call takes one :class:`~runindex.messages.Envelope`, dispatches on the type of
the message it carries and applies the matching table mutation under the
store's lock. :class:`~runindex.query.Query` reads the same tables under the
same lock.

Tables:
    ::

        test_case_started_by_id                        id ─► TestCaseStarted (arrival order)
        test_case_finished_by_test_case_started_id     id ─► TestCaseFinished
        test_steps_started_by_test_case_started_id     id ─► [TestStepStarted]
        test_steps_finished_by_test_case_started_id    id ─► [TestStepFinished]
        pickle_by_id / pickle_step_by_id               id ─► Pickle / PickleStep
        test_case_by_id / test_step_by_id              id ─► TestCase / TestStep
        step_by_id                                     id ─► Step (documents)
        hook_by_id                                     id ─► Hook (hooks)
        step_definition_by_id                          id ─► StepDefinition (step definitions)
        attachments_by_test_case_started_id            id ─► [Attachment] (attachments)
        attachments_by_test_run_hook_started_id        id ─► [Attachment] (attachments)
        suggestions_by_pickle_step_id                  id ─► [Suggestion] (suggestions)
        test_run_hook_started_by_id                    id ─► TestRunHookStarted
        test_run_hook_finished_by_test_run_hook_started_id
        undefined_parameter_types                      [UndefinedParameterType]
        meta / test_run_started / test_run_finished    latest value wins
        lineage                                        LineageIndex (documents)

Optional categories, shown in parentheses, are retained only when their
:class:`StoreFeature` is enabled. A disabled category is never written.

Examples:
    >>> store = EntityStore.builder().feature(StoreFeature.INCLUDE_GHERKIN_DOCUMENTS, True).build()
    >>> store.update(Envelope.of(document))
    >>> store.update(Envelope(test_case_started=started))
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from enum import Enum
from typing import TYPE_CHECKING, Any

from runindex.core.logging import get_logger
from runindex.lineage import LineageIndex
from runindex.messages import (
    Attachment,
    Envelope,
    Feature,
    GherkinDocument,
    Hook,
    Meta,
    Pickle,
    PickleStep,
    Scenario,
    Step,
    StepDefinition,
    Suggestion,
    TestCase,
    TestCaseFinished,
    TestCaseStarted,
    TestRunFinished,
    TestRunHookFinished,
    TestRunHookStarted,
    TestRunStarted,
    TestStep,
    TestStepFinished,
    TestStepStarted,
    UndefinedParameterType,
)

if TYPE_CHECKING:
    from runindex.core.settings import StoreSettings

logger = get_logger(__name__)


class StoreFeature(str, Enum):
    """Optional message categories. Disable to reduce memory usage."""

    INCLUDE_GHERKIN_DOCUMENTS = "INCLUDE_GHERKIN_DOCUMENTS"
    INCLUDE_STEP_DEFINITIONS = "INCLUDE_STEP_DEFINITIONS"
    INCLUDE_HOOKS = "INCLUDE_HOOKS"
    INCLUDE_ATTACHMENTS = "INCLUDE_ATTACHMENTS"
    INCLUDE_SUGGESTIONS = "INCLUDE_SUGGESTIONS"


ALL_FEATURES: frozenset[StoreFeature] = frozenset(StoreFeature)

# Message types retained only when their feature is enabled
_GATED: dict[type, StoreFeature] = {
    GherkinDocument: StoreFeature.INCLUDE_GHERKIN_DOCUMENTS,
    StepDefinition: StoreFeature.INCLUDE_STEP_DEFINITIONS,
    Hook: StoreFeature.INCLUDE_HOOKS,
    Attachment: StoreFeature.INCLUDE_ATTACHMENTS,
    Suggestion: StoreFeature.INCLUDE_SUGGESTIONS,
}


class EntityStore:
    """
    Thread-safe tables of every message of a test run.

    Args:
        features: Optional categories to retain. Pass :data:`ALL_FEATURES` to
            keep everything.

    Tables are public for :class:`~runindex.query.Query`; read them only
    while holding :attr:`lock` and never mutate them.
    """

    def __init__(self, features: Iterable[StoreFeature]):
        self._features = frozenset(features)
        self._lock = threading.RLock()

        self.test_case_started_by_id: dict[str, TestCaseStarted] = {}
        self.test_case_finished_by_test_case_started_id: dict[str, TestCaseFinished] = {}
        self.test_steps_started_by_test_case_started_id: dict[str, list[TestStepStarted]] = {}
        self.test_steps_finished_by_test_case_started_id: dict[str, list[TestStepFinished]] = {}
        self.pickle_by_id: dict[str, Pickle] = {}
        self.pickle_step_by_id: dict[str, PickleStep] = {}
        self.test_case_by_id: dict[str, TestCase] = {}
        self.test_step_by_id: dict[str, TestStep] = {}
        self.step_by_id: dict[str, Step] = {}
        self.hook_by_id: dict[str, Hook] = {}
        self.step_definition_by_id: dict[str, StepDefinition] = {}
        self.attachments_by_test_case_started_id: dict[str, list[Attachment]] = {}
        self.attachments_by_test_run_hook_started_id: dict[str, list[Attachment]] = {}
        self.suggestions_by_pickle_step_id: dict[str, list[Suggestion]] = {}
        self.test_run_hook_started_by_id: dict[str, TestRunHookStarted] = {}
        self.test_run_hook_finished_by_test_run_hook_started_id: dict[str, TestRunHookFinished] = {}
        self.undefined_parameter_types: list[UndefinedParameterType] = []
        self.lineage = LineageIndex()

        self.meta: Meta | None = None
        self.test_run_started: TestRunStarted | None = None
        self.test_run_finished: TestRunFinished | None = None

        self._handlers: dict[type, Callable[[Any], None]] = {
            Meta: self._update_meta,
            TestRunStarted: self._update_test_run_started,
            TestRunFinished: self._update_test_run_finished,
            TestCaseStarted: self._update_test_case_started,
            TestCaseFinished: self._update_test_case_finished,
            TestStepStarted: self._update_test_step_started,
            TestStepFinished: self._update_test_step_finished,
            Pickle: self._update_pickle,
            TestCase: self._update_test_case,
            TestRunHookStarted: self._update_test_run_hook_started,
            TestRunHookFinished: self._update_test_run_hook_finished,
            UndefinedParameterType: self._update_undefined_parameter_type,
            GherkinDocument: self._update_gherkin_document,
            StepDefinition: self._update_step_definition,
            Hook: self._update_hook,
            Attachment: self._update_attachment,
            Suggestion: self._update_suggestion,
        }

    # ── Construction ─────────────────────────────────────────────

    @staticmethod
    def builder() -> EntityStoreBuilder:
        return EntityStoreBuilder()

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> EntityStore:
        """Store retaining the categories enabled in ``settings``."""
        return cls(settings.features())

    @property
    def features(self) -> frozenset[StoreFeature]:
        return self._features

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    # ── Ingestion ────────────────────────────────────────────────

    def update(self, envelope: Envelope) -> None:
        """Apply the message carried by ``envelope``.

        Unknown message kinds and disabled categories are ignored.
        """
        message = envelope.message
        kind = type(message)
        handler = self._handlers.get(kind)
        if handler is None:
            logger.debug("message_ignored", kind=kind.__name__, reason="unknown")
            return
        feature = _GATED.get(kind)
        if feature is not None and feature not in self._features:
            logger.debug("message_ignored", kind=kind.__name__, reason="disabled", feature=feature.value)
            return
        with self._lock:
            handler(message)

    def _update_meta(self, meta: Meta) -> None:
        self.meta = meta

    def _update_test_run_started(self, event: TestRunStarted) -> None:
        self.test_run_started = event

    def _update_test_run_finished(self, event: TestRunFinished) -> None:
        self.test_run_finished = event

    def _update_test_case_started(self, event: TestCaseStarted) -> None:
        self.test_case_started_by_id[event.id] = event

    def _update_test_case_finished(self, event: TestCaseFinished) -> None:
        self.test_case_finished_by_test_case_started_id[event.test_case_started_id] = event

    def _update_test_step_started(self, event: TestStepStarted) -> None:
        self.test_steps_started_by_test_case_started_id.setdefault(event.test_case_started_id, []).append(event)

    def _update_test_step_finished(self, event: TestStepFinished) -> None:
        self.test_steps_finished_by_test_case_started_id.setdefault(event.test_case_started_id, []).append(event)

    def _update_pickle(self, pickle: Pickle) -> None:
        self.pickle_by_id[pickle.id] = pickle
        for step in pickle.steps:
            self.pickle_step_by_id[step.id] = step

    def _update_test_case(self, test_case: TestCase) -> None:
        self.test_case_by_id[test_case.id] = test_case
        for test_step in test_case.test_steps:
            self.test_step_by_id[test_step.id] = test_step

    def _update_test_run_hook_started(self, event: TestRunHookStarted) -> None:
        self.test_run_hook_started_by_id[event.id] = event

    def _update_test_run_hook_finished(self, event: TestRunHookFinished) -> None:
        self.test_run_hook_finished_by_test_run_hook_started_id[event.test_run_hook_started_id] = event

    def _update_undefined_parameter_type(self, event: UndefinedParameterType) -> None:
        self.undefined_parameter_types.append(event)

    def _update_gherkin_document(self, document: GherkinDocument) -> None:
        nodes = self.lineage.add_document(document)
        if document.feature is not None:
            self._update_feature(document.feature)
        logger.debug("document_indexed", uri=document.uri, nodes=nodes)

    def _update_feature(self, feature: Feature) -> None:
        for child in feature.children:
            if child.background is not None:
                self._update_steps(child.background.steps)
            if child.scenario is not None:
                self._update_scenario(child.scenario)
            if child.rule is not None:
                for rule_child in child.rule.children:
                    if rule_child.background is not None:
                        self._update_steps(rule_child.background.steps)
                    if rule_child.scenario is not None:
                        self._update_scenario(rule_child.scenario)

    def _update_scenario(self, scenario: Scenario) -> None:
        self._update_steps(scenario.steps)

    def _update_steps(self, steps: Iterable[Step]) -> None:
        for step in steps:
            self.step_by_id[step.id] = step

    def _update_step_definition(self, step_definition: StepDefinition) -> None:
        self.step_definition_by_id[step_definition.id] = step_definition

    def _update_hook(self, hook: Hook) -> None:
        self.hook_by_id[hook.id] = hook

    def _update_attachment(self, attachment: Attachment) -> None:
        if attachment.test_case_started_id is not None:
            self.attachments_by_test_case_started_id.setdefault(attachment.test_case_started_id, []).append(attachment)
        if attachment.test_run_hook_started_id is not None:
            self.attachments_by_test_run_hook_started_id.setdefault(attachment.test_run_hook_started_id, []).append(
                attachment
            )

    def _update_suggestion(self, suggestion: Suggestion) -> None:
        self.suggestions_by_pickle_step_id.setdefault(suggestion.pickle_step_id, []).append(suggestion)

    def __repr__(self) -> str:
        enabled = ", ".join(sorted(f.value for f in self._features))
        return f"EntityStore(features=[{enabled}])"


class EntityStoreBuilder:
    """Toggles features one at a time; starts with none enabled."""

    def __init__(self) -> None:
        self._features: set[StoreFeature] = set()

    def feature(self, feature: StoreFeature, enabled: bool) -> EntityStoreBuilder:
        if enabled:
            self._features.add(feature)
        else:
            self._features.discard(feature)
        return self

    def build(self) -> EntityStore:
        return EntityStore(self._features)


__all__ = ["StoreFeature", "ALL_FEATURES", "EntityStore", "EntityStoreBuilder"]
