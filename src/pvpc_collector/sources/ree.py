from __future__ import annotations

import logging
import time
from datetime import datetime

import httpx

from pvpc_collector.core.config import DEFAULT_BASE_URL
from pvpc_collector.core.errors import TransportError
from pvpc_collector.core.models import PriceEnvelope
from pvpc_collector.core.time_utils import format_query_instant

logger = logging.getLogger(__name__)


class ReeClient:
    """Thin client for the REE real-time market prices endpoint.

    One ``httpx.Client`` is held for the lifetime of the instance. Requests are
    never retried and carry no authentication. ``timeout_seconds`` bounds each
    network operation and is also the total deadline for a request, body read
    included.

    :class:`TransportError` covers requests that cannot complete (DNS, connect,
    timeout, deadline) and also responses with a 4xx/5xx status, which carry
    ``status_code``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._timeout_seconds = timeout_seconds
        self._client = httpx.Client(timeout=timeout_seconds, transport=transport)

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def build_params(time_trunc: str, start: datetime, end: datetime, geo_id: int = 0) -> dict[str, str]:
        params = {
            "time_trunc": time_trunc,
            "start_date": format_query_instant(start),
            "end_date": format_query_instant(end),
        }
        if geo_id != 0:
            params["geo_id"] = str(geo_id)
        return params

    def build_url(self, time_trunc: str, start: datetime, end: datetime, geo_id: int = 0) -> str:
        params = self.build_params(time_trunc=time_trunc, start=start, end=end, geo_id=geo_id)
        return str(httpx.URL(self._base_url, params=params))

    def fetch(self, time_trunc: str, start: datetime, end: datetime, geo_id: int = 0) -> PriceEnvelope:
        url = self.build_url(time_trunc=time_trunc, start=start, end=end, geo_id=geo_id)
        logger.debug("requesting prices", extra={"url": url})
        deadline = time.monotonic() + self._timeout_seconds
        try:
            with self._client.stream("GET", url) as response:
                chunks: list[bytes] = []
                self._check_deadline(url, deadline)
                for chunk in response.iter_bytes():
                    chunks.append(chunk)
                    self._check_deadline(url, deadline)
        except httpx.HTTPError as exc:
            raise TransportError(f"GET {url} failed: {exc}") from exc

        if response.is_error:
            raise TransportError(
                f"GET {url} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return PriceEnvelope.from_bytes(b"".join(chunks))

    def _check_deadline(self, url: str, deadline: float) -> None:
        if time.monotonic() > deadline:
            raise TransportError(f"GET {url} exceeded {self._timeout_seconds:g}s deadline")
