"""WARC archive record provider.

Opens ``.warc`` / ``.warc.gz`` files with warcio and hands each record to the
pipeline as an :class:`ArchiveResponse`. HTTP parsing is left to
:mod:`georsscount.headers`, so records are read with ``no_record_parse`` and
the untouched HTTP block (status line, headers, body) is passed through.
"""

from __future__ import annotations

import glob
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from warcio.archiveiterator import ArchiveIterator
from warcio.exceptions import ArchiveLoadFailed

from georsscount.errors import ArchiveReadError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from typing import BinaryIO

log = structlog.get_logger()

RESPONSE_RECORD = "response"
WARC_FORMAT = "warc"
_ARCHIVE_SUFFIXES = ("*.warc", "*.warc.gz")


@dataclass
class ArchiveResponse:
    """One archive record. ``stream`` is valid only until the next record is read."""

    url: str | None
    record_type: str
    stream: BinaryIO

    @property
    def is_response(self) -> bool:
        return self.record_type == RESPONSE_RECORD


def iter_archive_records(path: Path) -> Iterator[ArchiveResponse]:
    """Yield every record of the archive at *path*.

    Raises ArchiveReadError if the file cannot be opened or is not a readable
    WARC stream.
    """
    try:
        fh = open(path, "rb")  # noqa: SIM115
    except OSError as exc:
        raise ArchiveReadError(f"Cannot open archive {path}: {exc}") from exc

    with fh:
        try:
            for record in ArchiveIterator(fh, no_record_parse=True):
                # warcio falls back to ARC and reads any multi-word line as a header
                if record.format != WARC_FORMAT:
                    raise ArchiveReadError(
                        f"Not a WARC archive {path}: found a {record.format!r} record"
                    )
                yield ArchiveResponse(
                    url=record.rec_headers.get_header("WARC-Target-URI"),
                    record_type=record.rec_type,
                    stream=record.raw_stream,
                )
        except ArchiveLoadFailed as exc:
            raise ArchiveReadError(f"Unreadable archive {path}: {exc}") from exc


def expand_inputs(patterns: Iterable[str]) -> list[Path]:
    """Resolve files, directories and glob patterns to a sorted list of archives.

    Directories contribute every ``*.warc`` / ``*.warc.gz`` directly inside
    them. A pattern that matches nothing is an error.
    """
    found: set[Path] = set()
    for pattern in patterns:
        path = Path(pattern)
        if path.is_dir():
            matches = [p for suffix in _ARCHIVE_SUFFIXES for p in path.glob(suffix)]
        elif path.is_file():
            matches = [path]
        else:
            matches = [Path(p) for p in glob.glob(pattern) if Path(p).is_file()]

        if not matches:
            raise ArchiveReadError(f"No archives found for input {pattern!r}")
        found.update(matches)

    paths = sorted(found)
    log.info("inputs_resolved", archive_count=len(paths))
    return paths
