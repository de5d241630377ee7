"""Protocol interfaces for swappable components.

The job driver references these protocols, not the WARC implementation. This
allows:
- Tests to feed in-memory records without building archives
- Other container formats to be plugged in without changing the pipeline
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from georsscount.records import ArchiveResponse


class RecordSourceProtocol(Protocol):
    """Yields the records of one archive, in archive order."""

    def __call__(self, path: Path) -> Iterator[ArchiveResponse]: ...
