"""
Property tests for replay and interleaving.

Feeding a run into a fresh store twice gives the same answers; interleaving
independent attempts, as parallel workers do, changes nothing per attempt.
"""

from hypothesis import given, settings, strategies as st
from hypothesis.strategies import composite

from runindex.messages import Envelope, TestStepResultStatus
from runindex.query import Query
from runindex.store import ALL_FEATURES, EntityStore

from _support.builders import attempt, build_test_case, examples_tables_document, outline_pickle, scenario_pickle

PICKLES = [
    outline_pickle("row-1", "5"),
    outline_pickle("row-2", "2"),
    outline_pickle("row-3", "20"),
    scenario_pickle("plain-scenario", "A plain scenario", "step-plain"),
    scenario_pickle("scenario-in-rule", "Eating in a rule", "step-in-rule"),
]
TEST_CASES = [build_test_case(pickle, 3) for pickle in PICKLES]
SETUP = (
    [Envelope.of(examples_tables_document())]
    + [Envelope.of(pickle) for pickle in PICKLES]
    + [Envelope.of(test_case) for test_case in TEST_CASES]
)

# =============================================================================
# STRATEGIES (Generators)
# =============================================================================


@composite
def attempts(draw):
    """Per-attempt envelope sequences with distinct started ids."""
    count = draw(st.integers(min_value=1, max_value=6))
    sequences = []
    for n in range(count):
        test_case = draw(st.sampled_from(TEST_CASES))
        statuses = draw(st.lists(st.sampled_from(TestStepResultStatus), max_size=3))
        sequences.append(
            attempt(
                f"tcs-{n}",
                test_case,
                statuses,
                will_be_retried=draw(st.booleans()),
                finish=draw(st.booleans()),
                start=draw(st.integers(min_value=0, max_value=1000)),
            )
        )
    return sequences


@composite
def interleaved(draw, sequences):
    """One merge of ``sequences`` that keeps each sequence's own order."""
    queues = [list(sequence) for sequence in sequences]
    merged = []
    while any(queues):
        i = draw(st.sampled_from([i for i, queue in enumerate(queues) if queue]))
        merged.append(queues[i].pop(0))
    return merged


def _query(envelopes) -> Query:
    store = EntityStore(ALL_FEATURES)
    for envelope in SETUP + list(envelopes):
        store.update(envelope)
    return Query(store)


def _per_attempt(query: Query) -> dict:
    results = {}
    for started in query.store.test_case_started_by_id.values():
        most_severe = query.find_most_severe_test_step_result_by(started)
        pickle = query.find_pickle_by(started)
        results[started.id] = (
            None if most_severe is None else most_severe.status,
            query.find_test_case_duration_by(started),
            query.find_test_case_by(started).id,
            None if pickle is None else pickle.id,
            query.find_location_of(pickle),
            [f.test_step_id for f in query.find_test_steps_finished_by(started)],
        )
    return results


def _everything(query: Query) -> tuple:
    return (
        _per_attempt(query),
        [s.id for s in query.find_all_test_case_started()],
        list(query.count_most_severe_test_step_result_status().items()),
        [(None if f is None else f.name, [s.id for s in members])
         for f, members in query.find_all_test_case_started_grouped_by_feature().items()],
        query.find_all_test_step_finished(),
    )


# =============================================================================
# PROPERTIES
# =============================================================================


@given(attempts())
@settings(max_examples=50)
def test_replay_is_idempotent(sequences):
    """Two fresh stores fed the same messages answer identically."""
    envelopes = [envelope for sequence in sequences for envelope in sequence]
    assert _everything(_query(envelopes)) == _everything(_query(envelopes))


@given(st.data())
@settings(max_examples=50)
def test_interleaving_does_not_change_attempts(data):
    """Per-attempt answers do not depend on how attempts interleave."""
    sequences = data.draw(attempts())
    sequential = _query(envelope for sequence in sequences for envelope in sequence)
    mixed = _query(data.draw(interleaved(sequences)))

    assert _per_attempt(sequential) == _per_attempt(mixed)
    assert sorted(s.id for s in sequential.find_all_test_case_started()) == sorted(
        s.id for s in mixed.find_all_test_case_started()
    )
    assert sequential.count_most_severe_test_step_result_status() == mixed.count_most_severe_test_step_result_status()
