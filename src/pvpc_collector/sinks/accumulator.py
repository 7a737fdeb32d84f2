from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

import polars as pl

from pvpc_collector.core.models import Sample


@runtime_checkable
class Accumulator(Protocol):
    """Metric sink owned by the host agent."""

    def add_fields(
        self,
        measurement: str,
        fields: Mapping[str, float],
        tags: Mapping[str, str] | None = None,
        timestamp: datetime | None = None,
    ) -> None: ...


class InMemoryAccumulator:
    """Collects samples in insertion order.

    A sample without a timestamp is stamped with ``clock()`` at insertion, the
    way an agent stamps points with collection time.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock
        self._samples: list[Sample] = []

    @property
    def samples(self) -> list[Sample]:
        return list(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def add_fields(
        self,
        measurement: str,
        fields: Mapping[str, float],
        tags: Mapping[str, str] | None = None,
        timestamp: datetime | None = None,
    ) -> None:
        if timestamp is None and self._clock is not None:
            timestamp = self._clock()
        self._samples.append(
            Sample(
                measurement=measurement,
                fields=dict(fields),
                tags=dict(tags or {}),
                timestamp=timestamp,
            )
        )

    def to_frame(self) -> pl.DataFrame:
        """One row per sample: ``measurement``, ``timestamp`` (UTC), tag columns, then field columns."""
        tag_keys = sorted({key for sample in self._samples for key in sample.tags})
        field_keys = sorted({key for sample in self._samples for key in sample.fields})
        columns: dict[str, list[object]] = {
            "measurement": [sample.measurement for sample in self._samples],
            "timestamp": [_as_utc(sample.timestamp) for sample in self._samples],
        }
        for key in tag_keys:
            columns[key] = [sample.tags.get(key) for sample in self._samples]
        for key in field_keys:
            columns[key] = [sample.fields.get(key) for sample in self._samples]

        schema: dict[str, pl.DataType] = {
            "measurement": pl.Utf8(),
            "timestamp": pl.Datetime(time_unit="us", time_zone="UTC"),
        }
        schema.update({key: pl.Utf8() for key in tag_keys})
        schema.update({key: pl.Float64() for key in field_keys})
        return pl.DataFrame(columns, schema=schema)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value.astimezone(UTC)
