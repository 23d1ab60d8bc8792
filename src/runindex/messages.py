"""
Typed messages of a test run.

Every message is a frozen, slotted dataclass mirroring one entity of the
external message schema. Nested collections are tuples, so a message can be
shared between threads and used as a dict key. Decoding the wire format into
these types happens upstream; this module only describes their shape.

Architecture:
    ::

        Envelope ──► exactly one of
          │
          ├── document structure   GherkinDocument ─► Feature ─► FeatureChild
          │                                            │           ├── Background
          │                                            │           ├── Scenario ─► Examples ─► TableRow
          │                                            │           └── Rule ─► RuleChild
          ├── compilation          Pickle ─► PickleStep
          ├── planning             TestCase ─► TestStep, Hook, StepDefinition
          ├── execution            TestCaseStarted/Finished, TestStepStarted/Finished
          ├── run boundaries       TestRunStarted/Finished, TestRunHookStarted/Finished
          └── auxiliary            Attachment, Suggestion, Meta, UndefinedParameterType

Examples:
    >>> started = TestCaseStarted(id="tcs-1", test_case_id="tc-1", attempt=0,
    ...                           timestamp=Timestamp(seconds=10))
    >>> Envelope.of(started).test_case_started is started
    True
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any


# =============================================================================
# SHARED VALUES
# =============================================================================


@dataclass(frozen=True, slots=True)
class Location:
    line: int
    column: int | None = None


@dataclass(frozen=True, slots=True)
class Timestamp:
    """Seconds and nanoseconds since the Unix epoch."""

    seconds: int
    nanos: int = 0


@dataclass(frozen=True, slots=True)
class Duration:
    seconds: int
    nanos: int = 0


@dataclass(frozen=True, slots=True)
class SourceReference:
    uri: str | None = None
    location: Location | None = None


@dataclass(frozen=True, slots=True)
class Tag:
    location: Location
    name: str
    id: str


# =============================================================================
# GHERKIN DOCUMENT
# =============================================================================


@dataclass(frozen=True, slots=True)
class Step:
    location: Location
    keyword: str
    text: str
    id: str


@dataclass(frozen=True, slots=True)
class TableCell:
    location: Location
    value: str


@dataclass(frozen=True, slots=True)
class TableRow:
    location: Location
    cells: tuple[TableCell, ...]
    id: str


@dataclass(frozen=True, slots=True)
class Examples:
    location: Location
    keyword: str
    name: str
    id: str
    description: str = ""
    tags: tuple[Tag, ...] = ()
    table_header: TableRow | None = None
    table_body: tuple[TableRow, ...] = ()


@dataclass(frozen=True, slots=True)
class Background:
    location: Location
    keyword: str
    name: str
    id: str
    description: str = ""
    steps: tuple[Step, ...] = ()


@dataclass(frozen=True, slots=True)
class Scenario:
    location: Location
    keyword: str
    name: str
    id: str
    description: str = ""
    tags: tuple[Tag, ...] = ()
    steps: tuple[Step, ...] = ()
    examples: tuple[Examples, ...] = ()


@dataclass(frozen=True, slots=True)
class RuleChild:
    """Exactly one of ``background`` or ``scenario`` is set."""

    background: Background | None = None
    scenario: Scenario | None = None


@dataclass(frozen=True, slots=True)
class Rule:
    location: Location
    keyword: str
    name: str
    id: str
    description: str = ""
    tags: tuple[Tag, ...] = ()
    children: tuple[RuleChild, ...] = ()


@dataclass(frozen=True, slots=True)
class FeatureChild:
    """Exactly one of ``rule``, ``background`` or ``scenario`` is set."""

    rule: Rule | None = None
    background: Background | None = None
    scenario: Scenario | None = None


@dataclass(frozen=True, slots=True)
class Feature:
    location: Location
    language: str
    keyword: str
    name: str
    description: str = ""
    tags: tuple[Tag, ...] = ()
    children: tuple[FeatureChild, ...] = ()


@dataclass(frozen=True, slots=True)
class GherkinDocument:
    uri: str
    feature: Feature | None = None


# =============================================================================
# PICKLES
# =============================================================================


@dataclass(frozen=True, slots=True)
class PickleStep:
    id: str
    text: str
    ast_node_ids: tuple[str, ...]
    type: str | None = None


@dataclass(frozen=True, slots=True)
class PickleTag:
    name: str
    ast_node_id: str


@dataclass(frozen=True, slots=True)
class Pickle:
    """
    A compiled scenario or example row.

    The last entry of ``ast_node_ids`` is the id of the node the pickle was
    compiled from; for an example row it is the row id, otherwise the
    scenario id.
    """

    id: str
    uri: str
    name: str
    language: str
    ast_node_ids: tuple[str, ...]
    steps: tuple[PickleStep, ...] = ()
    tags: tuple[PickleTag, ...] = ()


# =============================================================================
# TEST PLAN
# =============================================================================


@dataclass(frozen=True, slots=True)
class TestStep:
    """Either ``hook_id`` or ``pickle_step_id`` is set."""

    __test__ = False

    id: str
    hook_id: str | None = None
    pickle_step_id: str | None = None
    step_definition_ids: tuple[str, ...] | None = None


@dataclass(frozen=True, slots=True)
class TestCase:
    __test__ = False

    id: str
    pickle_id: str
    test_steps: tuple[TestStep, ...] = ()
    test_run_started_id: str | None = None


@dataclass(frozen=True, slots=True)
class Hook:
    id: str
    source_reference: SourceReference
    name: str | None = None
    tag_expression: str | None = None
    type: str | None = None


@dataclass(frozen=True, slots=True)
class StepDefinitionPattern:
    source: str
    type: str = "CUCUMBER_EXPRESSION"


@dataclass(frozen=True, slots=True)
class StepDefinition:
    id: str
    pattern: StepDefinitionPattern
    source_reference: SourceReference


@dataclass(frozen=True, slots=True)
class Snippet:
    language: str
    code: str


@dataclass(frozen=True, slots=True)
class Suggestion:
    id: str
    pickle_step_id: str
    snippets: tuple[Snippet, ...] = ()


@dataclass(frozen=True, slots=True)
class UndefinedParameterType:
    expression: str
    name: str


# =============================================================================
# EXECUTION
# =============================================================================


class TestStepResultStatus(str, Enum):
    """Outcome of one executed step, listed in the schema's declaration order."""

    __test__ = False

    UNKNOWN = "UNKNOWN"
    PASSED = "PASSED"
    SKIPPED = "SKIPPED"
    PENDING = "PENDING"
    UNDEFINED = "UNDEFINED"
    AMBIGUOUS = "AMBIGUOUS"
    FAILED = "FAILED"


@dataclass(frozen=True, slots=True)
class TestStepResult:
    __test__ = False

    duration: Duration
    status: TestStepResultStatus
    message: str | None = None


@dataclass(frozen=True, slots=True)
class TestCaseStarted:
    """One attempt at running a test case. Retries get a new ``id``."""

    __test__ = False

    id: str
    test_case_id: str
    attempt: int
    timestamp: Timestamp
    worker_id: str | None = None


@dataclass(frozen=True, slots=True)
class TestCaseFinished:
    __test__ = False

    test_case_started_id: str
    timestamp: Timestamp
    will_be_retried: bool = False


@dataclass(frozen=True, slots=True)
class TestStepStarted:
    __test__ = False

    test_case_started_id: str
    test_step_id: str
    timestamp: Timestamp


@dataclass(frozen=True, slots=True)
class TestStepFinished:
    __test__ = False

    test_case_started_id: str
    test_step_id: str
    test_step_result: TestStepResult
    timestamp: Timestamp


@dataclass(frozen=True, slots=True)
class TestRunStarted:
    __test__ = False

    timestamp: Timestamp
    id: str | None = None


@dataclass(frozen=True, slots=True)
class TestRunFinished:
    __test__ = False

    timestamp: Timestamp
    success: bool = True
    message: str | None = None
    test_run_started_id: str | None = None


@dataclass(frozen=True, slots=True)
class TestRunHookStarted:
    __test__ = False

    id: str
    test_run_started_id: str
    hook_id: str
    timestamp: Timestamp


@dataclass(frozen=True, slots=True)
class TestRunHookFinished:
    __test__ = False

    test_run_hook_started_id: str
    result: TestStepResult
    timestamp: Timestamp


@dataclass(frozen=True, slots=True)
class Attachment:
    """
    Output captured during a step or a run-level hook.

    Step attachments carry ``test_case_started_id`` and ``test_step_id``;
    run-level hook attachments carry ``test_run_hook_started_id``.
    """

    body: str
    media_type: str
    content_encoding: str = "IDENTITY"
    file_name: str | None = None
    test_case_started_id: str | None = None
    test_step_id: str | None = None
    test_run_hook_started_id: str | None = None
    timestamp: Timestamp | None = None


@dataclass(frozen=True, slots=True)
class Product:
    name: str
    version: str | None = None


@dataclass(frozen=True, slots=True)
class Meta:
    protocol_version: str
    implementation: Product
    runtime: Product
    os: Product
    cpu: Product


# =============================================================================
# ENVELOPE
# =============================================================================


@dataclass(frozen=True, slots=True)
class Envelope:
    """
    Carrier for exactly one message.

    Use :meth:`of` to wrap a bare message; :attr:`message` returns whichever
    field is set.
    """

    attachment: Attachment | None = None
    gherkin_document: GherkinDocument | None = None
    hook: Hook | None = None
    meta: Meta | None = None
    pickle: Pickle | None = None
    step_definition: StepDefinition | None = None
    suggestion: Suggestion | None = None
    test_case: TestCase | None = None
    test_case_finished: TestCaseFinished | None = None
    test_case_started: TestCaseStarted | None = None
    test_run_finished: TestRunFinished | None = None
    test_run_hook_finished: TestRunHookFinished | None = None
    test_run_hook_started: TestRunHookStarted | None = None
    test_run_started: TestRunStarted | None = None
    test_step_finished: TestStepFinished | None = None
    test_step_started: TestStepStarted | None = None
    undefined_parameter_type: UndefinedParameterType | None = None

    @classmethod
    def of(cls, message: Any) -> Envelope:
        """Wrap ``message`` in the envelope field matching its type."""
        field_name = _ENVELOPE_FIELDS.get(type(message))
        if field_name is None:
            raise TypeError(f"Not an envelope message: {type(message).__name__}")
        return cls(**{field_name: message})

    @property
    def message(self) -> Any:
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                return value
        return None


_ENVELOPE_FIELDS: dict[type, str] = {
    Attachment: "attachment",
    GherkinDocument: "gherkin_document",
    Hook: "hook",
    Meta: "meta",
    Pickle: "pickle",
    StepDefinition: "step_definition",
    Suggestion: "suggestion",
    TestCase: "test_case",
    TestCaseFinished: "test_case_finished",
    TestCaseStarted: "test_case_started",
    TestRunFinished: "test_run_finished",
    TestRunHookFinished: "test_run_hook_finished",
    TestRunHookStarted: "test_run_hook_started",
    TestRunStarted: "test_run_started",
    TestStepFinished: "test_step_finished",
    TestStepStarted: "test_step_started",
    UndefinedParameterType: "undefined_parameter_type",
}
