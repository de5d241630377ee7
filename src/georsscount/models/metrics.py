from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class MetricTuple(BaseModel):
    """Feed metrics for one observation of a URL."""

    model_config = ConfigDict(frozen=True)

    updated_at: int = -1  # Epoch seconds of the newest date, -1 when unknown
    geo_tag_count: int = 0
    location_count: int = 0  # Distinct geo tag texts

    @classmethod
    def of(cls, updated_at: int, geo_tag_count: int, location_count: int) -> MetricTuple:
        return cls(
            updated_at=updated_at,
            geo_tag_count=geo_tag_count,
            location_count=location_count,
        )

    def __add__(self, other: MetricTuple) -> MetricTuple:
        # Elementwise, updated_at included: sums of epochs are kept as-is
        return MetricTuple.of(
            self.updated_at + other.updated_at,
            self.geo_tag_count + other.geo_tag_count,
            self.location_count + other.location_count,
        )

    def values(self) -> tuple[int, int, int]:
        return (self.updated_at, self.geo_tag_count, self.location_count)


class AggregatedRow(BaseModel):
    """Summed metrics for one distinct URL across the corpus."""

    model_config = ConfigDict(frozen=True)

    url: str | None
    metrics: MetricTuple
