"""
Tests for Trend-Path settings: normalisation, validation and persistence.

Validates:
- Missing or corrupt settings.json falls back to defaults
- Out-of-range values are clamped, garbage falls back to defaults
- Escalation windows never exceed the normal windows
- TrendPathSettings rejects invalid combinations
- save_settings preserves unrelated sections
"""

import json
import math

import pytest

from trendpath.domain.models import SourceMode
from trendpath.settings import (
    DEFAULT_SHORT_WINDOW,
    DEFAULT_SPIKE_PENALTY,
    SETTINGS_SECTION,
    TrendPathSettings,
    load_settings,
    save_settings,
    validate_trend_path_settings,
)


def section_value(settings_dict, name):
    return settings_dict[SETTINGS_SECTION][name]["value"]


class TestValidateSettings:

    def test_empty_settings_get_defaults(self):
        normalized = validate_trend_path_settings({})

        assert section_value(normalized, "short_window") == DEFAULT_SHORT_WINDOW
        assert section_value(normalized, "spike_penalty") == DEFAULT_SPIKE_PENALTY
        assert section_value(normalized, "source_mode") == "main_supplier"

    def test_other_sections_untouched(self):
        normalized = validate_trend_path_settings({"ui": {"theme": "dark"}})

        assert normalized["ui"] == {"theme": "dark"}

    def test_values_are_clamped(self):
        normalized = validate_trend_path_settings({
            SETTINGS_SECTION: {
                "spike_penalty": {"value": -3},
                "max_workers": {"value": 500},
            }
        })

        assert section_value(normalized, "spike_penalty") == 0.0
        assert section_value(normalized, "max_workers") == 64

    def test_garbage_falls_back_to_default(self):
        normalized = validate_trend_path_settings({
            SETTINGS_SECTION: {
                "short_window": {"value": "abc"},
                "epsilon": {"value": float("nan")},
                "source_mode": {"value": "bogus"},
            }
        })

        assert section_value(normalized, "short_window") == DEFAULT_SHORT_WINDOW
        assert section_value(normalized, "epsilon") == 1e-3
        assert section_value(normalized, "source_mode") == "main_supplier"

    def test_bare_values_accepted(self):
        normalized = validate_trend_path_settings({SETTINGS_SECTION: {"forecast_window": 12}})

        assert section_value(normalized, "forecast_window") == 12

    def test_escalation_windows_capped(self):
        normalized = validate_trend_path_settings({
            SETTINGS_SECTION: {
                "short_window": {"value": 2},
                "viral_short_window": {"value": 10},
            }
        })

        assert section_value(normalized, "viral_short_window") == 2

    def test_interpolation_bounds_ordered(self):
        normalized = validate_trend_path_settings({
            SETTINGS_SECTION: {
                "min_base_sensitivity": {"value": 2.0},
                "max_base_sensitivity": {"value": 1.5},
            }
        })

        assert section_value(normalized, "max_base_sensitivity") == 2.0

    def test_entries_carry_bounds_and_description(self):
        entry = validate_trend_path_settings({})[SETTINGS_SECTION]["spike_penalty"]

        assert entry["min"] == 0.0
        assert entry["description"]


class TestTrendPathSettings:

    def test_defaults(self):
        settings = TrendPathSettings()

        assert settings.min_history == 8
        assert settings.source_mode == SourceMode.MAIN_SUPPLIER
        assert settings.max_workers == 1

    def test_source_mode_from_string(self):
        assert TrendPathSettings(source_mode="per_product").source_mode == SourceMode.PER_PRODUCT

    @pytest.mark.parametrize("kwargs", [
        {"short_window": 0},
        {"viral_short_window": 4},
        {"min_volatility": 0.1, "max_volatility": 0.05},
        {"epsilon": 0.0},
        {"spike_penalty": -1.0},
        {"source_mode": "nowhere"},
    ])
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            TrendPathSettings(**kwargs)

    def test_from_settings_dict(self):
        settings = TrendPathSettings.from_settings_dict({
            SETTINGS_SECTION: {"spike_penalty": {"value": 7.5}, "source_mode": "per_product"}
        })

        assert settings.spike_penalty == 7.5
        assert settings.source_mode == SourceMode.PER_PRODUCT

    def test_settings_dict_round_trip(self):
        original = TrendPathSettings(forecast_window=12, per_spike_increment=0.3)

        assert TrendPathSettings.from_settings_dict(original.to_settings_dict()) == original


class TestLoadSave:

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_settings(tmp_path / "missing.json") == TrendPathSettings()

    def test_corrupt_file_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")

        assert load_settings(path) == TrendPathSettings()

    def test_undecodable_file_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_bytes(b'{"trend_path": {"spike_penalty": "\xff\xfe"}}')

        assert load_settings(path) == TrendPathSettings()

    def test_save_over_undecodable_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_bytes(b"\xff\xfe garbage")

        assert save_settings(TrendPathSettings(spike_penalty=3.0), path) is True
        assert load_settings(path).spike_penalty == 3.0

    def test_non_object_file_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        assert load_settings(path) == TrendPathSettings()

    def test_save_preserves_other_sections(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"ui": {"theme": "dark"}}), encoding="utf-8")

        assert save_settings(TrendPathSettings(spike_penalty=7.5), path) is True

        stored = json.loads(path.read_text(encoding="utf-8"))
        assert stored["ui"] == {"theme": "dark"}
        assert load_settings(path).spike_penalty == 7.5

    def test_save_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"

        assert save_settings(TrendPathSettings(), path) is True
        assert math.isclose(load_settings(path).epsilon, 1e-3)
