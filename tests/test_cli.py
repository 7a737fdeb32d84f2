import pytest
from typer.testing import CliRunner

from pvpc_collector.cli.app import app

runner = CliRunner()


def test_sample_config_lists_settings() -> None:
    result = runner.invoke(app, ["sample-config"])

    assert result.exit_code == 0
    assert "Gather Spanish electricity hourly prices." in result.output
    assert "PVPC_GEO_ID=8741" in result.output


def test_show_url_uses_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PVPC_GEO_ID", "8741")
    monkeypatch.setenv("PVPC_START_DATE", "2021-12-26T00:00:00Z")
    monkeypatch.setenv("PVPC_END_DATE", "2021-12-26T23:59:00Z")

    result = runner.invoke(app, ["show-url"])

    assert result.exit_code == 0
    assert "apidatos.ree.es" in result.output
    assert "geo_id=8741" in result.output
    assert "time_trunc=hour" in result.output


def test_invalid_configuration_exits_with_usage_code(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PVPC_GEO_ID", "-3")

    result = runner.invoke(app, ["show-url"])

    assert result.exit_code == 2
    assert "Invalid configuration" in result.output
