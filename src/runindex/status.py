"""
Severity ranking of step result statuses.

The "worst" result of an attempt is chosen by an explicit rank table, never by
the order in which :class:`TestStepResultStatus` declares its members. A
schema that reorders its enumerators therefore cannot silently change which
result is most severe; pass a custom :class:`SeverityRanking` to
:class:`~runindex.query.Query` when the schema's ranking differs.

Examples:
    >>> from runindex.messages import TestStepResultStatus as S
    >>> DEFAULT_RANKING.most_severe([S.PASSED, S.FAILED, S.SKIPPED])
    <TestStepResultStatus.FAILED: 'FAILED'>
"""

from __future__ import annotations

from collections.abc import Iterable

from runindex.messages import TestStepResult, TestStepResultStatus


class SeverityRanking:
    """A total order over :class:`TestStepResultStatus`, least severe first."""

    def __init__(self, order: Iterable[TestStepResultStatus]):
        self._order = tuple(order)
        self._rank = {status: rank for rank, status in enumerate(self._order)}
        missing = set(TestStepResultStatus) - set(self._rank)
        if missing or len(self._rank) != len(self._order):
            raise ValueError(
                "Severity order must list every status exactly once, "
                f"missing {sorted(s.value for s in missing)}"
            )

    @property
    def order(self) -> tuple[TestStepResultStatus, ...]:
        return self._order

    def rank(self, status: TestStepResultStatus) -> int:
        return self._rank[status]

    def most_severe(self, statuses: Iterable[TestStepResultStatus]) -> TestStepResultStatus | None:
        return max(statuses, key=self.rank, default=None)

    def most_severe_result(self, results: Iterable[TestStepResult]) -> TestStepResult | None:
        """The first result whose status ranks highest, or ``None``."""
        return max(results, key=lambda result: self.rank(result.status), default=None)

    def __repr__(self) -> str:
        return f"SeverityRanking({' < '.join(s.value for s in self._order)})"


DEFAULT_RANKING = SeverityRanking(
    (
        TestStepResultStatus.UNKNOWN,
        TestStepResultStatus.PASSED,
        TestStepResultStatus.SKIPPED,
        TestStepResultStatus.PENDING,
        TestStepResultStatus.UNDEFINED,
        TestStepResultStatus.AMBIGUOUS,
        TestStepResultStatus.FAILED,
    )
)

__all__ = ["SeverityRanking", "DEFAULT_RANKING"]
