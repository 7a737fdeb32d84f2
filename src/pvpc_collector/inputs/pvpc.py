from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Final

import httpx

from pvpc_collector.core.config import Settings
from pvpc_collector.core.time_utils import local_now, resolve_date_range, to_local
from pvpc_collector.sinks.accumulator import Accumulator
from pvpc_collector.sources.ree import ReeClient

logger = logging.getLogger(__name__)

PRICE_FIELD: Final[str] = "price"
GEO_ID_TAG: Final[str] = "geo_id"

_SAMPLE_CONFIG: Final[str] = """\
## Time aggregation of the requested data.
PVPC_TIME_TRUNC=hour

## Time range in ISO 8601 format. If omitted, today's prices are requested.
# PVPC_START_DATE=2021-12-26T00:00:00Z
# PVPC_END_DATE=2021-12-26T23:59:00Z

## End of the default range when no dates are set: "today" or "tomorrow" (23:00 local).
# PVPC_WINDOW_END=today

## Id of the autonomous community/electrical system. Optional, 0 means all.
PVPC_GEO_ID=8741

## HTTP request timeout.
PVPC_HTTP_TIMEOUT=10s
"""


class PriceCollector:
    """Gathers hourly PVPC prices and emits one ``pvpc`` point per hour."""

    def __init__(
        self,
        settings: Settings,
        clock: Callable[[], datetime] = local_now,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._clock = clock
        self._client = ReeClient(
            base_url=settings.base_url,
            timeout_seconds=settings.http_timeout,
            transport=transport,
        )

    @staticmethod
    def description() -> str:
        return "Gather Spanish electricity hourly prices."

    @staticmethod
    def sample_config() -> str:
        return _SAMPLE_CONFIG

    def close(self) -> None:
        self._client.close()

    def date_range(self) -> tuple[datetime, datetime]:
        return resolve_date_range(
            start=self._settings.start_date,
            end=self._settings.end_date,
            now=self._clock(),
            window_end=self._settings.window_end,
        )

    def request_url(self) -> str:
        start, end = self.date_range()
        return self._client.build_url(
            time_trunc=self._settings.time_trunc,
            start=start,
            end=end,
            geo_id=self._settings.geo_id,
        )

    def tags(self) -> dict[str, str]:
        if self._settings.geo_id == 0:
            return {}
        return {GEO_ID_TAG: str(self._settings.geo_id)}

    def collect(self, acc: Accumulator) -> int:
        """Fetch the configured range and emit every price of the first entity into ``acc``.

        The response is decoded completely before the first ``add_fields`` call,
        so a :class:`TransportError` or :class:`DecodeError` leaves ``acc``
        untouched. Returns the number of samples emitted.
        """
        start, end = self.date_range()
        envelope = self._client.fetch(
            time_trunc=self._settings.time_trunc,
            start=start,
            end=end,
            geo_id=self._settings.geo_id,
        )

        entries = envelope.first_values()
        if not entries:
            logger.info(
                "no prices returned",
                extra={"start": start.isoformat(), "end": end.isoformat(), "entities": len(envelope.entities)},
            )
            return 0

        tags = self.tags()
        for entry in entries:
            timestamp = None if entry.timestamp is None else to_local(entry.timestamp)
            acc.add_fields(self._settings.measurement, {PRICE_FIELD: entry.value}, tags, timestamp)

        logger.info("collected prices", extra={"count": len(entries), "title": envelope.entities[0].attributes.title})
        return len(entries)
