from __future__ import annotations

from pydantic import BaseModel


class JobCounters(BaseModel):
    """Operational counters for a scan, mergeable across workers."""

    records_in: int = 0  # "response" records seen
    feeds_in: int = 0
    georss_in: int = 0
    exceptions: int = 0  # Records abandoned on an unexpected failure

    def merge(self, other: JobCounters) -> None:
        self.records_in += other.records_in
        self.feeds_in += other.feeds_in
        self.georss_in += other.georss_in
        self.exceptions += other.exceptions

    def report(self) -> dict[str, int]:
        """Counters under their report names (``records-in`` etc.)."""
        return {
            "records-in": self.records_in,
            "feeds-in": self.feeds_in,
            "georss-in": self.georss_in,
            "exceptions": self.exceptions,
        }
