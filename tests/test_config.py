from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from pvpc_collector.core.config import DEFAULT_BASE_URL, Settings, parse_duration_seconds
from pvpc_collector.core.enums import WindowEnd


def test_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.time_trunc == "hour"
    assert settings.geo_id == 0
    assert settings.start_date is None
    assert settings.end_date is None
    assert settings.http_timeout == 10.0
    assert settings.window_end is WindowEnd.TODAY
    assert settings.measurement == "pvpc"
    assert settings.base_url == DEFAULT_BASE_URL


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PVPC_GEO_ID", "8741")
    monkeypatch.setenv("PVPC_HTTP_TIMEOUT", "2500ms")
    monkeypatch.setenv("PVPC_WINDOW_END", "tomorrow")
    monkeypatch.setenv("PVPC_START_DATE", "2021-12-26T00:00:00Z")
    monkeypatch.setenv("PVPC_END_DATE", "2021-12-26T23:59:00Z")

    settings = Settings(_env_file=None)

    assert settings.geo_id == 8741
    assert settings.http_timeout == 2.5
    assert settings.window_end is WindowEnd.TOMORROW
    assert settings.start_date == datetime(2021, 12, 26, 0, 0, tzinfo=UTC)
    assert settings.end_date == datetime(2021, 12, 26, 23, 59, tzinfo=UTC)


def test_dotenv_file_is_read(tmp_path) -> None:
    env_file = tmp_path / "pvpc.env"
    env_file.write_text("PVPC_TIME_TRUNC=day\nPVPC_GEO_ID=8\n", encoding="utf-8")

    settings = Settings(_env_file=env_file)

    assert settings.time_trunc == "day"
    assert settings.geo_id == 8


def test_blank_dates_are_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PVPC_START_DATE", "")
    monkeypatch.setenv("PVPC_END_DATE", " ")

    settings = Settings(_env_file=None)

    assert settings.start_date is None
    assert settings.end_date is None


def test_naive_dates_are_local() -> None:
    settings = Settings(_env_file=None, start_date="2021-12-26T00:00:00", end_date="2021-12-26T23:00:00")

    assert settings.start_date is not None
    assert settings.start_date.tzinfo is not None
    assert settings.start_date.strftime("%Y-%m-%dT%H:%M") == "2021-12-26T00:00"


@pytest.mark.parametrize(
    ("raw", "seconds"),
    [(10, 10.0), (1.5, 1.5), ("10", 10.0), ("10s", 10.0), ("500ms", 0.5), ("1m", 60.0), ("1h", 3600.0)],
)
def test_parse_duration_seconds(raw: str | float, seconds: float) -> None:
    assert parse_duration_seconds(raw) == seconds


@pytest.mark.parametrize(
    "overrides",
    [
        {"geo_id": -1},
        {"geo_id": 2**32},
        {"time_trunc": "  "},
        {"http_timeout": "ten seconds"},
        {"http_timeout": 0},
        {"window_end": "yesterday"},
        {"start_date": "2021-12-27T00:00:00Z", "end_date": "2021-12-26T00:00:00Z"},
    ],
)
def test_invalid_settings_are_rejected(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)
