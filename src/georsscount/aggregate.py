"""Per-URL reduction of feed metrics.

Pure business logic: receives ``(url, MetricTuple)`` pairs, returns ordered
:class:`AggregatedRow` results. No knowledge of archives, workers or I/O.

Every observation of a URL is summed elementwise, ``updated_at`` included.
Rows come out shortest URL first, ties broken by code-point order.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING

from georsscount.models.metrics import AggregatedRow, MetricTuple

if TYPE_CHECKING:
    from collections.abc import Iterable

OrderingKey = str | bytes | None


def _decode_key(key: OrderingKey) -> str | None:
    if isinstance(key, bytes):
        try:
            return key.decode("utf-8")
        except UnicodeDecodeError:
            return None
    return key


def compare_shortest(a: OrderingKey, b: OrderingKey) -> int:
    """Three-way compare: absent keys first, then by length, then by code point.

    Byte keys are decoded as UTF-8; undecodable ones count as absent.
    """
    s1 = _decode_key(a)
    s2 = _decode_key(b)
    if s1 is None:
        return 0 if s2 is None else -1
    if s2 is None:
        return 1
    if len(s1) != len(s2):
        return len(s1) - len(s2)
    return (s1 > s2) - (s1 < s2)


shortest_first = functools.cmp_to_key(compare_shortest)


def sum_metrics(observations: Iterable[MetricTuple]) -> MetricTuple | None:
    """Elementwise sum in arrival order; ``None`` when nothing was observed."""
    total: MetricTuple | None = None
    for metrics in observations:
        total = metrics if total is None else total + metrics
    return total


class RecordAggregator:
    """Running per-URL sums, fed incrementally and merged across workers."""

    def __init__(self) -> None:
        self._sums: dict[str | None, MetricTuple] = {}

    def __len__(self) -> int:
        return len(self._sums)

    def add(self, url: str | None, metrics: MetricTuple) -> None:
        current = self._sums.get(url)
        self._sums[url] = metrics if current is None else current + metrics

    def add_all(self, pairs: Iterable[tuple[str | None, MetricTuple]]) -> None:
        for url, metrics in pairs:
            self.add(url, metrics)

    def merge(self, other: RecordAggregator) -> None:
        """Fold another aggregator's partial sums into this one."""
        self.add_all(other._sums.items())

    def rows(self) -> list[AggregatedRow]:
        """All summed rows in output order."""
        return [
            AggregatedRow(url=url, metrics=self._sums[url])
            for url in sorted(self._sums, key=shortest_first)
        ]


def aggregate(pairs: Iterable[tuple[str | None, MetricTuple]]) -> list[AggregatedRow]:
    """Group *pairs* by URL, sum each group and return the ordered rows."""
    aggregator = RecordAggregator()
    aggregator.add_all(pairs)
    return aggregator.rows()


def format_row(row: AggregatedRow) -> str:
    """``url<TAB>updated_at<TAB>geo_tag_count<TAB>location_count``"""
    fields = [row.url or "", *(str(value) for value in row.metrics.values())]
    return "\t".join(fields)
