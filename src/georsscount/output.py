"""Tab-delimited output sink for aggregated rows."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from georsscount.aggregate import format_row

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from typing import TextIO

    from georsscount.models.metrics import AggregatedRow

log = structlog.get_logger()

STDOUT = "-"


@contextmanager
def open_sink(path: str) -> Iterator[TextIO]:
    """Open *path* for writing, or yield stdout (left open) for ``"-"``."""
    if path == STDOUT:
        yield sys.stdout
        return

    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8", newline="\n") as fh:
        yield fh


def write_rows(rows: Iterable[AggregatedRow], sink: TextIO) -> int:
    """Write one line per row, in the order given. Returns the row count."""
    count = 0
    for row in rows:
        sink.write(format_row(row))
        sink.write("\n")
        count += 1
    return count


def write_output(rows: Iterable[AggregatedRow], path: str) -> int:
    with open_sink(path) as sink:
        count = write_rows(rows, sink)
    log.info("output_written", path=path, row_count=count)
    return count
