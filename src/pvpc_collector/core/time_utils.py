from __future__ import annotations

from datetime import datetime, time, timedelta

from pvpc_collector.core.enums import WindowEnd

QUERY_FORMAT = "%Y-%m-%dT%H:%M"
WINDOW_END_HOUR = 23


def local_now() -> datetime:
    return datetime.now().astimezone()


def to_local(value: datetime) -> datetime:
    return value.astimezone()


def local_midnight(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def default_window(now: datetime, window_end: WindowEnd = WindowEnd.TODAY) -> tuple[datetime, datetime]:
    start = local_midnight(now)
    end_day = now.date()
    if window_end is WindowEnd.TOMORROW:
        end_day += timedelta(days=1)
    end = datetime.combine(end_day, time(hour=WINDOW_END_HOUR), tzinfo=now.tzinfo)
    return start, end


def resolve_date_range(
    start: datetime | None,
    end: datetime | None,
    now: datetime,
    window_end: WindowEnd = WindowEnd.TODAY,
) -> tuple[datetime, datetime]:
    """Return the explicit range when both bounds are set, otherwise the default window.

    A single configured bound is discarded together with the missing one.
    """
    if start is None or end is None:
        return default_window(now, window_end)
    return start, end


def format_query_instant(value: datetime) -> str:
    return value.strftime(QUERY_FORMAT)
