from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from lumedit.core.units import FEET_PER_METER


SETTINGS_ENV_VAR = "LUMEDIT_SETTINGS"


class SettingsError(ValueError):
    pass


@dataclass(frozen=True)
class EditorSettings:
    default_format: str = "IESNA:LM-63-2002"
    decimals: int = 3
    fixed_decimals: bool = False
    dimension_tolerance: float = 1e-3
    wattage_tolerance: float = 1e-3
    lumens_tolerance: float = 0.1
    feet_per_meter: float = FEET_PER_METER


_DEFAULT_SETTINGS = EditorSettings()

# File layout: section -> key -> EditorSettings field
_SECTIONS: Dict[str, Dict[str, str]] = {
    "writer": {
        "default_format": "default_format",
        "decimals": "decimals",
        "fixed_decimals": "fixed_decimals",
    },
    "tolerances": {
        "dimension": "dimension_tolerance",
        "wattage": "wattage_tolerance",
        "lumens": "lumens_tolerance",
    },
    "units": {
        "feet_per_meter": "feet_per_meter",
    },
}


def default_settings() -> EditorSettings:
    return _DEFAULT_SETTINGS


def _deep_merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = dict(base)
    for key, value in overlay.items():
        if isinstance(value, Mapping) and isinstance(out.get(key), Mapping):
            out[key] = _deep_merge(out[key], value)
        else:
            out[key] = value
    return out


def _defaults_as_sections() -> Dict[str, Dict[str, Any]]:
    return {
        section: {key: getattr(_DEFAULT_SETTINGS, field) for key, field in keys.items()}
        for section, keys in _SECTIONS.items()
    }


def settings_from_mapping(data: Mapping[str, Any]) -> EditorSettings:
    unknown = [k for k in data if k not in _SECTIONS]
    if unknown:
        raise SettingsError(f"Unknown settings section(s): {', '.join(sorted(unknown))}")
    for section, values in data.items():
        if not isinstance(values, Mapping):
            raise SettingsError(f"Settings section '{section}' must be a mapping")
        bad = [k for k in values if k not in _SECTIONS[section]]
        if bad:
            raise SettingsError(f"Unknown key(s) in '{section}': {', '.join(sorted(bad))}")

    merged = _deep_merge(_defaults_as_sections(), data)
    kwargs: Dict[str, Any] = {}
    for section, keys in _SECTIONS.items():
        for key, field in keys.items():
            kwargs[field] = merged[section][key]

    try:
        settings = EditorSettings(
            default_format=str(kwargs["default_format"]),
            decimals=int(kwargs["decimals"]),
            fixed_decimals=bool(kwargs["fixed_decimals"]),
            dimension_tolerance=float(kwargs["dimension_tolerance"]),
            wattage_tolerance=float(kwargs["wattage_tolerance"]),
            lumens_tolerance=float(kwargs["lumens_tolerance"]),
            feet_per_meter=float(kwargs["feet_per_meter"]),
        )
    except (TypeError, ValueError) as e:
        raise SettingsError(f"Invalid settings value: {e}") from e

    if settings.decimals < 0:
        raise SettingsError("writer.decimals must be >= 0")
    if settings.feet_per_meter <= 0:
        raise SettingsError("units.feet_per_meter must be > 0")
    return settings


def load_settings(path: str | Path | None = None) -> EditorSettings:
    """
    Load settings from a JSON file, falling back to $LUMEDIT_SETTINGS and then
    to the built-in defaults. Missing keys keep their default values.
    """
    if path is None:
        env = os.environ.get(SETTINGS_ENV_VAR, "").strip()
        if not env:
            return _DEFAULT_SETTINGS
        path = env

    p = Path(path).expanduser()
    if not p.is_file():
        raise SettingsError(f"Settings file not found: {p}")
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SettingsError(f"Invalid settings file at {p}: {e}") from e
    if not isinstance(data, dict):
        raise SettingsError(f"Invalid settings file at {p}: expected mapping")
    return settings_from_mapping(data)


def resolve_settings(settings: Optional[EditorSettings]) -> EditorSettings:
    return settings if settings is not None else _DEFAULT_SETTINGS
