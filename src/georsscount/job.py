"""Job driver: archives in, ordered per-URL rows out.

Each archive is processed independently (inline, or in a process pool when
``job.workers > 1``) into a partial :class:`RecordAggregator` plus counters.
Once every archive has finished the partials are merged and the rows are
ordered; no row is produced before that barrier.

A failure on one record is logged, counted under ``exceptions`` and skipped.
Only an archive that cannot be read at all stops the run.
"""

from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from georsscount.aggregate import RecordAggregator
from georsscount.document import ParsedDocument
from georsscount.errors import GeoRssCountError
from georsscount.logs import setup_logging
from georsscount.models.job import JobCounters
from georsscount.records import iter_archive_records

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

    from georsscount.config import ScanSettings, Settings
    from georsscount.models.metrics import AggregatedRow, MetricTuple
    from georsscount.protocols import RecordSourceProtocol
    from georsscount.records import ArchiveResponse

log = structlog.get_logger()


@dataclass
class ArchiveResult:
    """Partial output of one archive (or of a whole run, once merged)."""

    aggregator: RecordAggregator = field(default_factory=RecordAggregator)
    counters: JobCounters = field(default_factory=JobCounters)

    def merge(self, other: ArchiveResult) -> None:
        self.aggregator.merge(other.aggregator)
        self.counters.merge(other.counters)


@dataclass
class JobResult:
    rows: list[AggregatedRow]
    counters: JobCounters


def inspect_record(
    record: ArchiveResponse,
    counters: JobCounters,
    scan: ScanSettings,
) -> tuple[str | None, MetricTuple] | None:
    """Run one response record through the pipeline.

    Returns the ``(url, metrics)`` pair for GeoRSS feeds, ``None`` otherwise.
    Counters are bumped as the record passes each stage.
    """
    counters.records_in += 1
    doc = ParsedDocument(record.stream, url=record.url, scan=scan)
    if not doc.is_feed:
        return None

    counters.feeds_in += 1
    if not doc.is_georss:
        return None

    counters.georss_in += 1
    return record.url, doc.metrics()


def process_records(records: Iterable[ArchiveResponse], scan: ScanSettings) -> ArchiveResult:
    """Inspect every response record, isolating per-record failures."""
    result = ArchiveResult()
    for record in records:
        # Only responses are inspected, not requests or metadata
        if not record.is_response:
            continue
        try:
            pair = inspect_record(record, result.counters, scan)
        except GeoRssCountError as exc:
            result.counters.exceptions += 1
            log.warning("record_failed", url=record.url, **exc.to_dict())
            continue
        except Exception:
            result.counters.exceptions += 1
            log.warning("record_failed", url=record.url, exc_info=True)
            continue

        if pair is not None:
            result.aggregator.add(*pair)
    return result


def process_archive(
    path: Path,
    scan: ScanSettings,
    source: RecordSourceProtocol = iter_archive_records,
) -> ArchiveResult:
    """Process one archive file into partial sums and counters."""
    structlog.contextvars.bind_contextvars(archive=str(path))
    try:
        result = process_records(source(path), scan)
        log.info("archive_complete", **result.counters.report())
        return result
    finally:
        structlog.contextvars.unbind_contextvars("archive")


def run_job(
    paths: Sequence[Path],
    settings: Settings,
    source: RecordSourceProtocol = iter_archive_records,
) -> JobResult:
    """Scan every archive in *paths* and return the ordered, summed rows."""
    total = ArchiveResult()
    workers = min(settings.job.workers, max(len(paths), 1))

    log.info("job_starting", archive_count=len(paths), workers=workers)

    if workers == 1:
        for path in paths:
            total.merge(process_archive(path, settings.scan, source))
    else:
        with ProcessPoolExecutor(
            max_workers=workers,
            initializer=setup_logging,
            initargs=(settings.logging,),
        ) as pool:
            futures = {
                pool.submit(process_archive, path, settings.scan, source): path for path in paths
            }
            for future in as_completed(futures):
                # ArchiveReadError from a worker is re-raised here and ends the run
                total.merge(future.result())

    rows = total.aggregator.rows()
    log.info("job_complete", url_count=len(rows), **total.counters.report())
    return JobResult(rows=rows, counters=total.counters)
