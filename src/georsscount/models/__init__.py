from __future__ import annotations

from georsscount.models.job import JobCounters
from georsscount.models.metrics import AggregatedRow, MetricTuple

__all__ = [
    # metrics
    "MetricTuple",
    "AggregatedRow",
    # job
    "JobCounters",
]
