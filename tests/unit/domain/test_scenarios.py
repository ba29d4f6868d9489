"""End-to-end scenarios across rules, workflows and flowables."""

import pytest

from rulework import (
    NOTHING,
    PreconditionViolationError,
    describe,
    flow,
    not_,
    rule,
    wrap,
)
from tests.helpers.counters import (
    Counter,
    DuplicateWorkflow,
    IncrementWorkflow,
    NegativeCounterRule,
    PositiveCounterRule,
)


def test_guarded_increment_rejects_zero_counter():
    """A counter at zero fails a described positivity precondition."""
    workflow = IncrementWorkflow(describe(PositiveCounterRule(), "Counter must be positive"))
    candidate = Counter()
    with pytest.raises(PreconditionViolationError) as exc:
        workflow.execute(candidate)
    assert str(exc.value) == "Counter must be positive"
    assert candidate.counter == 0


def test_not_negative_precondition_allows_two_increments():
    """Zero is not negative, so two guarded increments succeed."""
    workflow = IncrementWorkflow(not_(NegativeCounterRule()))
    candidate = Counter()
    result = wrap(candidate).then(workflow).then(workflow)
    assert result.value is candidate
    assert candidate.counter == 2


def test_chain_changes_candidate_type():
    """Two increments then a duplication yield two counters at two."""
    candidate = Counter()
    result = (
        wrap(candidate)
        .then(IncrementWorkflow())
        .then(IncrementWorkflow())
        .then(DuplicateWorkflow())
    )
    assert [c.counter for c in result.value] == [2, 2]


def test_same_rule_in_memory_and_as_filter():
    """One rule both checks a single candidate and filters a collection."""
    from rulework.adapters.query import filter_candidates  # pylint: disable=import-outside-toplevel

    between = PositiveCounterRule() & rule(lambda c: c.counter < 10, candidate_type=Counter)
    counters = [Counter(counter=v) for v in (-3, 1, 9, 10)]
    assert filter_candidates(counters, between) == counters[1:3]
    assert between.is_satisfied(counters[1]) is True


def test_flow_on_bare_candidate():
    """flow chains in-place workflows without a wrapper."""
    candidate = flow(flow(Counter(), IncrementWorkflow()), IncrementWorkflow())
    assert candidate.counter == 2


def test_chain_starting_from_none_does_nothing():
    """Wrapping None short-circuits the whole pipeline."""
    assert wrap(None).then(IncrementWorkflow()).then(DuplicateWorkflow()) is NOTHING
