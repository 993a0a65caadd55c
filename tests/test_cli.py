"""
Tests for the trendpath command line.
"""

import json
import logging

import pytest

from trendpath.cli import format_report, main
from trendpath.utils.logging_config import APP_LOGGER_NAME
from trendpath.workflows.trend_path import run_trend_path
from conftest import BURGER_HISTORY, FLAT_HISTORY


@pytest.fixture(autouse=True)
def reset_app_logger():
    yield
    logger = logging.getLogger(APP_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def base_args(tmp_path):
    return ["--settings", str(tmp_path / "missing.json"), "--log-dir", str(tmp_path / "logs")]


@pytest.fixture
def input_file(tmp_path):
    path = tmp_path / "input.json"
    path.write_text(json.dumps({
        "products": {
            "Burger": {"stock": 100, "demand_history": list(BURGER_HISTORY)},
            "Water": {"stock": 200, "demand_history": list(FLAT_HISTORY)},
        },
        "edges": [
            ["Kitchen", "Burger", 5.0],
            ["Kitchen", "Water", 1.0],
            ["Kitchen", "Water", -1.0],
        ],
    }), encoding="utf-8")
    return path


class TestRunCommand:

    def test_text_report(self, base_args, input_file, capsys):
        assert main(base_args + ["run", str(input_file)]) == 0

        out = capsys.readouterr().out
        assert "Trend-Path Results" in out
        assert "Product: Burger [SPIKE]" in out
        assert "Kitchen -> Burger" in out
        assert "YES - RESTOCK SOON!" in out
        assert "Code: TP_INPUT" in out

    def test_json_output(self, base_args, input_file, capsys):
        assert main(base_args + ["--json", "run", str(input_file)]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["main_supplier"] == "Kitchen"
        assert data["products"]["Burger"]["is_spike"] is True
        assert data["products"]["Water"]["depletion_periods"] == 10
        assert [i["code"] for i in data["issues"]] == ["TP_INPUT"]

    def test_source_mode_override(self, base_args, input_file, capsys):
        assert main(base_args + ["--json", "--source-mode", "per_product", "run", str(input_file)]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["source_mode"] == "per_product"
        assert data["products"]["Burger"]["path"] == ["Burger"]

    def test_missing_input_file(self, base_args, tmp_path, capsys):
        assert main(base_args + ["run", str(tmp_path / "nope.json")]) == 1
        assert "Cannot load input" in capsys.readouterr().out

    def test_invalid_workers(self, base_args, input_file, capsys):
        assert main(base_args + ["--workers", "-2", "run", str(input_file)]) == 1

    def test_zero_workers_rejected(self, base_args, input_file, capsys):
        assert main(base_args + ["--workers", "0", "run", str(input_file)]) == 1
        assert "Invalid --workers" in capsys.readouterr().out

    def test_undecodable_input_file(self, base_args, tmp_path, capsys):
        bad = tmp_path / "bad.json"
        bad.write_bytes(b'{"products": {"\xff": {"stock": 1, "demand_history": [1]}}}')

        assert main(base_args + ["run", str(bad)]) == 1
        assert "not UTF-8" in capsys.readouterr().out

    def test_settings_file_is_used(self, tmp_path, input_file, capsys):
        settings_path = tmp_path / "settings.json"
        settings_path.write_text(json.dumps({"trend_path": {"per_spike_increment": {"value": 0.5}}}))

        args = ["--settings", str(settings_path), "--log-dir", str(tmp_path / "logs"), "--json"]
        assert main(args + ["run", str(input_file)]) == 0

        burger = json.loads(capsys.readouterr().out)["products"]["Burger"]
        assert burger["adjusted_forecast"] == pytest.approx(burger["baseline_forecast"] * 1.5)


class TestDemoCommand:

    def test_demo_json(self, base_args, capsys):
        assert main(base_args + ["--json", "demo", "--seed", "3", "--hours", "48"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert set(data["products"]) == {"Burger", "Fries", "Soda", "Chicken", "Salad"}
        assert data["main_supplier"] == "Warehouse"
        for name, outcome in data["products"].items():
            assert outcome["path"][0] == "Warehouse"
            assert outcome["path"][-1] == name

    def test_demo_is_reproducible(self, base_args, capsys):
        main(base_args + ["--json", "demo", "--seed", "11"])
        first = capsys.readouterr().out
        main(base_args + ["--json", "demo", "--seed", "11"])

        assert capsys.readouterr().out == first

    def test_command_required(self, base_args):
        with pytest.raises(SystemExit):
            main(base_args)


class TestFormatReport:

    def test_no_path_and_never_depletes(self, settings):
        from trendpath.domain.models import Product

        result = run_trend_path([Product("Idle", (0,) * 10, 5)], [], settings)

        report = format_report(result, include_issues=False)
        assert "Periods to depletion: never" in report
        assert "Earliest depletion: never" in report
        assert "Issues:" not in report
