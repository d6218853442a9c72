"""
Test suite for the command-line interface.
"""

import json

import pytest

from aggregator import cli
from aggregator import config as config_module
from aggregator.core.report import AggregationReport, BatchFailure


@pytest.fixture(autouse=True)
def restore_global_config(monkeypatch):
    """main() installs its config globally; undo that after each test."""
    monkeypatch.setattr(config_module, "_config", None)


class TestParser:

    def test_run_options(self):
        args = cli.create_parser().parse_args(
            ["run", "--host", "api.local", "--port", "4000", "--devices", "30", "--log-level", "DEBUG"]
        )

        config = cli.build_config(args)

        assert config.api_host == "api.local"
        assert config.api_port == 4000
        assert config.device_count == 30
        assert config.log_level == "DEBUG"

    def test_serve_options(self):
        args = cli.create_parser().parse_args(["serve", "--port", "8000", "--log-json"])

        config = cli.build_config(args)

        assert config.server_port == 8000
        assert config.log_json is True

    def test_no_command_exits(self, monkeypatch):
        monkeypatch.setattr("sys.argv", ["energygrid-aggregator"])

        with pytest.raises(SystemExit) as exc:
            cli.main()

        assert exc.value.code == 1


class TestRunCommand:

    def test_prints_report(self, monkeypatch, capsys):
        async def fake_aggregate(config=None, **kwargs):
            return AggregationReport(
                total_devices=20,
                execution_time_seconds=1.234,
                data=[{"sn": f"SN-{i:03d}"} for i in range(10)],
                errors=[BatchFailure(2, ("SN-010",), "boom", 500)],
            )

        monkeypatch.setattr(cli, "aggregate_device_data", fake_aggregate)
        monkeypatch.setattr(cli, "setup_logging", lambda *a, **k: None)
        monkeypatch.setattr("sys.argv", ["energygrid-aggregator", "run", "--devices", "20"])

        with pytest.raises(SystemExit) as exc:
            cli.main()

        assert exc.value.code == 0
        report = json.loads(capsys.readouterr().out)
        assert report["totalDevices"] == 20
        assert report["fetchedDevices"] == 10
        assert report["failedBatches"] == 1
        assert report["executionTimeSeconds"] == 1.23

    def test_fatal_error_exits_nonzero(self, monkeypatch):
        async def failing_aggregate(config=None, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(cli, "aggregate_device_data", failing_aggregate)
        monkeypatch.setattr(cli, "setup_logging", lambda *a, **k: None)
        monkeypatch.setattr("sys.argv", ["energygrid-aggregator", "run"])

        with pytest.raises(SystemExit) as exc:
            cli.main()

        assert exc.value.code == 1
