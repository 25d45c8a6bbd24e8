from __future__ import annotations

from typing import Any, Dict, List

import pytest
import typer
from typer.testing import CliRunner

from cli.app import app
from models.records import Granularity


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.report_calls: List[Granularity] = []
        self.report_payload: List[Dict[str, Any]] = [
            {
                "index": 1,
                "period": "2024-05-15T04:00:00.000Z",
                "totalWattHours": 0.5556,
                "averageVolt": 230.0,
                "averageCurrent": 0.45,
                "averageWatts": 100.0,
                "maxWatts": 100.0,
                "minWatts": 100.0,
                "totalCount": 2,
            }
        ]
        self.latest_payload: Dict[str, Any] = {
            "updateTime": "2024-05-15T12:00:03Z",
            "switchStatus": True,
            "country": "KE",
            "town": "Nairobi",
            "volt": 230.0,
            "current": 0.45,
            "watts": 100.0,
            "wattHours": 0.2778,
        }
        self.fail = False
        self.closed = False

    def get_report(self, granularity: Granularity) -> List[Dict[str, Any]]:
        self.report_calls.append(granularity)
        if self.fail:
            typer.secho("Request failed with status 500: No device data available", err=True)
            raise typer.Exit(code=1)
        return self.report_payload

    def get_latest(self) -> Dict[str, Any]:
        return self.latest_payload

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def _install_stub(monkeypatch, stub: StubClient) -> None:
    def factory(config):
        stub.config = config
        return stub

    monkeypatch.setattr("cli.app.ApiClient", factory)


def test_report_command(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["report", "10seconds"])

    assert result.exit_code == 0
    assert "Aggregates per 10seconds" in result.stdout
    assert "2024-05-15T04:00:00.000Z" in result.stdout
    assert "0.5556" in result.stdout
    assert stub.report_calls == [Granularity.ten_seconds]
    assert stub.closed is True


def test_report_rejects_unknown_granularity(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["report", "fortnight"])

    assert result.exit_code != 0
    assert stub.report_calls == []


def test_report_failure_exits_non_zero(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    stub.fail = True
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["report", "day"])

    assert result.exit_code == 1


def test_base_url_option(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["--base-url", "http://plug.local:5000/", "report", "hour"])

    assert result.exit_code == 0
    assert stub.config.base_url == "http://plug.local:5000"


def test_latest_command(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["latest"])

    assert result.exit_code == 0
    assert "Latest Reading" in result.stdout
    assert "town: Nairobi" in result.stdout
    assert stub.closed is True
