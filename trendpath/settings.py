"""
Trend-Path configuration: defaults, settings.json normalisation and loading.

Settings live in the ``"trend_path"`` section of settings.json. Every entry is
an object with a ``"value"`` plus bounds and a description, e.g.::

    {"trend_path": {"spike_penalty": {"value": 5.0, "min": 0.0, ...}}}

Normalisation never raises: unparseable values fall back to defaults and
numbers are clamped into their valid range.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json
import logging
import math

from .domain.models import SourceMode

logger = logging.getLogger(__name__)

SETTINGS_SECTION = "trend_path"

# Demand windows (observations, hourly data)
DEFAULT_SHORT_WINDOW = 3
DEFAULT_PREVIOUS_WINDOW = 5
DEFAULT_LONG_TERM_WINDOW = 48
DEFAULT_VIRAL_SHORT_WINDOW = 1
DEFAULT_VIRAL_PREVIOUS_WINDOW = 2

# Virality
DEFAULT_BASE_VIRAL = 2.0
DEFAULT_VIRAL_SENSITIVITY = 1.5

# Dynamic spike threshold
DEFAULT_MIN_BASE_SENSITIVITY = 0.75
DEFAULT_MAX_BASE_SENSITIVITY = 1.5
DEFAULT_MIN_VOLATILITY = 0.0
DEFAULT_MAX_VOLATILITY = 0.05
DEFAULT_MAX_SIGMA_SCALE = 100.0  # assumed sigma ceiling used for normalisation
DEFAULT_EPSILON = 1e-3

# Graph / forecast
DEFAULT_SPIKE_PENALTY = 5.0
DEFAULT_FORECAST_WINDOW = 24
DEFAULT_PER_SPIKE_INCREMENT = 0.2
DEFAULT_DEPLETION_WARNING_THRESHOLD = 2
DEFAULT_SOURCE_MODE = SourceMode.MAIN_SUPPLIER.value
DEFAULT_MAX_WORKERS = 1


# name -> (default, type, min, max, description)
_NUMERIC_FIELDS = {
    "short_window": (DEFAULT_SHORT_WINDOW, int, 1, 168,
                     "Most recent observations averaged as short-term demand"),
    "previous_window": (DEFAULT_PREVIOUS_WINDOW, int, 1, 168,
                        "Observations before the short window used as baseline"),
    "long_term_window": (DEFAULT_LONG_TERM_WINDOW, int, 1, 10000,
                         "Observations used for long-term volatility"),
    "viral_short_window": (DEFAULT_VIRAL_SHORT_WINDOW, int, 1, 168,
                           "Short window after viral escalation (<= short_window)"),
    "viral_previous_window": (DEFAULT_VIRAL_PREVIOUS_WINDOW, int, 1, 168,
                              "Previous window after viral escalation (<= previous_window)"),
    "base_viral": (DEFAULT_BASE_VIRAL, float, 0.0, 100.0,
                   "Constant part of the viral growth threshold"),
    "viral_sensitivity": (DEFAULT_VIRAL_SENSITIVITY, float, 0.0, 100.0,
                          "Weight of sigma / long-term sigma in the viral threshold"),
    "min_base_sensitivity": (DEFAULT_MIN_BASE_SENSITIVITY, float, 0.0, 10.0,
                             "Base sensitivity at zero volatility"),
    "max_base_sensitivity": (DEFAULT_MAX_BASE_SENSITIVITY, float, 0.0, 10.0,
                             "Base sensitivity at max_sigma_scale volatility"),
    "min_volatility": (DEFAULT_MIN_VOLATILITY, float, 0.0, 10.0,
                       "Volatility factor at zero volatility"),
    "max_volatility": (DEFAULT_MAX_VOLATILITY, float, 0.0, 10.0,
                       "Volatility factor at max_sigma_scale volatility"),
    "max_sigma_scale": (DEFAULT_MAX_SIGMA_SCALE, float, 1e-3, 1e9,
                        "Assumed sigma ceiling used to normalise volatility"),
    "epsilon": (DEFAULT_EPSILON, float, 1e-12, 1.0,
                "Floor substituted for near-zero divisors"),
    "spike_penalty": (DEFAULT_SPIKE_PENALTY, float, 0.0, 1e9,
                      "Cost added to an edge whose destination is spiking"),
    "forecast_window": (DEFAULT_FORECAST_WINDOW, int, 1, 10000,
                        "Observations averaged for the baseline forecast"),
    "per_spike_increment": (DEFAULT_PER_SPIKE_INCREMENT, float, 0.0, 10.0,
                            "Forecast uplift per spiking node on the supply path"),
    "depletion_warning_threshold": (DEFAULT_DEPLETION_WARNING_THRESHOLD, int, 0, 100000,
                                    "Warn when any product depletes in fewer periods than this"),
    "max_workers": (DEFAULT_MAX_WORKERS, int, 1, 64,
                    "Worker processes for spike detection (1 = sequential)"),
}

_SOURCE_MODE_DESCRIPTION = (
    "Path source: 'main_supplier' (single root supplier) or "
    "'per_product' (each product is its own source)"
)


def _coerce(raw: Any, kind: type, default: Any, lo: Any, hi: Any) -> Any:
    try:
        value = kind(raw)
    except (ValueError, TypeError, OverflowError):
        return default
    if isinstance(value, float) and not math.isfinite(value):
        return default
    return max(lo, min(hi, value))


def validate_trend_path_settings(settings: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate and normalize the trend_path settings section.

    Applies fallback defaults and clamps values to valid ranges.
    Returns a normalized settings dict (does not raise exceptions).

    Args:
        settings: Full settings dict (the "trend_path" section may be missing)

    Returns:
        Normalized settings dict with a complete trend_path section
    """
    section = settings.get(SETTINGS_SECTION) or {}
    if not isinstance(section, dict):
        section = {}

    def raw_value(name: str, default: Any) -> Any:
        entry = section.get(name, {})
        if isinstance(entry, dict):
            return entry.get("value", default)
        return entry  # bare values are accepted too

    values: Dict[str, Any] = {}
    for name, (default, kind, lo, hi, _desc) in _NUMERIC_FIELDS.items():
        values[name] = _coerce(raw_value(name, default), kind, default, lo, hi)

    # Escalation windows must fit inside the normal windows
    values["viral_short_window"] = min(values["viral_short_window"], values["short_window"])
    values["viral_previous_window"] = min(values["viral_previous_window"], values["previous_window"])

    # Interpolation bounds must be ordered
    if values["min_base_sensitivity"] > values["max_base_sensitivity"]:
        values["max_base_sensitivity"] = values["min_base_sensitivity"]
    if values["min_volatility"] > values["max_volatility"]:
        values["max_volatility"] = values["min_volatility"]

    source_mode_raw = raw_value("source_mode", DEFAULT_SOURCE_MODE)
    try:
        source_mode = SourceMode(source_mode_raw).value
    except ValueError:
        source_mode = DEFAULT_SOURCE_MODE

    normalized_section: Dict[str, Any] = {}
    for name, (_default, _kind, lo, hi, desc) in _NUMERIC_FIELDS.items():
        normalized_section[name] = {
            "value": values[name],
            "min": lo,
            "max": hi,
            "description": desc,
        }
    normalized_section["source_mode"] = {
        "value": source_mode,
        "choices": [mode.value for mode in SourceMode],
        "description": _SOURCE_MODE_DESCRIPTION,
    }

    normalized_settings = dict(settings)
    normalized_settings[SETTINGS_SECTION] = normalized_section
    return normalized_settings


@dataclass(frozen=True)
class TrendPathSettings:
    """Immutable, validated parameter set for one Trend-Path run."""
    short_window: int = DEFAULT_SHORT_WINDOW
    previous_window: int = DEFAULT_PREVIOUS_WINDOW
    long_term_window: int = DEFAULT_LONG_TERM_WINDOW
    viral_short_window: int = DEFAULT_VIRAL_SHORT_WINDOW
    viral_previous_window: int = DEFAULT_VIRAL_PREVIOUS_WINDOW
    base_viral: float = DEFAULT_BASE_VIRAL
    viral_sensitivity: float = DEFAULT_VIRAL_SENSITIVITY
    min_base_sensitivity: float = DEFAULT_MIN_BASE_SENSITIVITY
    max_base_sensitivity: float = DEFAULT_MAX_BASE_SENSITIVITY
    min_volatility: float = DEFAULT_MIN_VOLATILITY
    max_volatility: float = DEFAULT_MAX_VOLATILITY
    max_sigma_scale: float = DEFAULT_MAX_SIGMA_SCALE
    epsilon: float = DEFAULT_EPSILON
    spike_penalty: float = DEFAULT_SPIKE_PENALTY
    forecast_window: int = DEFAULT_FORECAST_WINDOW
    per_spike_increment: float = DEFAULT_PER_SPIKE_INCREMENT
    depletion_warning_threshold: int = DEFAULT_DEPLETION_WARNING_THRESHOLD
    source_mode: SourceMode = SourceMode.MAIN_SUPPLIER
    max_workers: int = DEFAULT_MAX_WORKERS

    def __post_init__(self):
        if isinstance(self.source_mode, str):
            object.__setattr__(self, "source_mode", SourceMode(self.source_mode))
        for name in ("short_window", "previous_window", "long_term_window",
                     "viral_short_window", "viral_previous_window",
                     "forecast_window", "max_workers"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")
        if self.viral_short_window > self.short_window:
            raise ValueError("viral_short_window cannot exceed short_window")
        if self.viral_previous_window > self.previous_window:
            raise ValueError("viral_previous_window cannot exceed previous_window")
        if self.min_base_sensitivity > self.max_base_sensitivity:
            raise ValueError("min_base_sensitivity cannot exceed max_base_sensitivity")
        if self.min_volatility > self.max_volatility:
            raise ValueError("min_volatility cannot exceed max_volatility")
        if self.epsilon <= 0:
            raise ValueError("epsilon must be positive")
        if self.max_sigma_scale <= 0:
            raise ValueError("max_sigma_scale must be positive")
        if self.spike_penalty < 0:
            raise ValueError("spike_penalty cannot be negative")
        if self.per_spike_increment < 0:
            raise ValueError("per_spike_increment cannot be negative")
        if self.depletion_warning_threshold < 0:
            raise ValueError("depletion_warning_threshold cannot be negative")

    @property
    def min_history(self) -> int:
        """Observations needed before spike detection can run."""
        return self.short_window + self.previous_window

    @classmethod
    def from_settings_dict(cls, settings: Dict[str, Any]) -> "TrendPathSettings":
        """Build from a (possibly partial or invalid) settings.json dict."""
        section = validate_trend_path_settings(settings)[SETTINGS_SECTION]
        return cls(**{f.name: section[f.name]["value"] for f in fields(cls)})

    def to_settings_dict(self) -> Dict[str, Any]:
        """Return the normalized settings.json representation."""
        raw = {f.name: {"value": getattr(self, f.name)} for f in fields(self)}
        raw["source_mode"] = {"value": self.source_mode.value}
        return validate_trend_path_settings({SETTINGS_SECTION: raw})


def load_settings(path: Optional[Union[str, Path]] = None) -> TrendPathSettings:
    """
    Load settings from settings.json.

    A missing or unreadable file yields the defaults (logged, never raised).
    """
    if path is None:
        from .utils.paths import get_settings_path  # noqa: PLC0415
        settings_path = get_settings_path()
    else:
        settings_path = Path(path)

    if not settings_path.exists():
        logger.debug("No settings file at %s, using defaults", settings_path)
        return TrendPathSettings()

    try:
        with open(settings_path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        logger.warning("Cannot read settings file %s (%s); using defaults", settings_path, e)
        return TrendPathSettings()

    if not isinstance(raw, dict):
        logger.warning("Settings file %s is not a JSON object; using defaults", settings_path)
        return TrendPathSettings()

    return TrendPathSettings.from_settings_dict(raw)


def save_settings(settings: TrendPathSettings, path: Optional[Union[str, Path]] = None) -> bool:
    """
    Write *settings* into the trend_path section of settings.json.

    Other sections of an existing file are preserved.

    Returns:
        True if successful, False otherwise
    """
    if path is None:
        from .utils.paths import get_settings_path  # noqa: PLC0415
        settings_path = get_settings_path()
    else:
        settings_path = Path(path)

    existing: Dict[str, Any] = {}
    if settings_path.exists():
        try:
            with open(settings_path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
            if isinstance(loaded, dict):
                existing = loaded
        except (json.JSONDecodeError, UnicodeDecodeError, OSError):
            pass  # Start with empty settings

    existing[SETTINGS_SECTION] = settings.to_settings_dict()[SETTINGS_SECTION]

    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        with open(settings_path, 'w', encoding='utf-8') as f:
            json.dump(existing, f, indent=2)
        return True
    except OSError as e:
        logger.error("Cannot write settings file %s: %s", settings_path, e)
        return False
