from __future__ import annotations

from typing import Union

from lumedit.models.document import UnitsType


FEET_PER_METER = 3.28084

UnitsLike = Union[UnitsType, int, str]


def units_type_from_name(unit: UnitsLike) -> UnitsType:
    if isinstance(unit, UnitsType):
        return unit
    if isinstance(unit, int):
        return UnitsType(unit)
    u = str(unit).strip().lower()
    if u in {"feet", "foot", "ft"}:
        return UnitsType.FEET
    if u in {"meters", "metres", "meter", "metre", "m"}:
        return UnitsType.METERS
    raise ValueError(f"Unknown length unit: {unit!r} (expected 'feet' or 'meters')")


def units_name(units: UnitsLike) -> str:
    return "feet" if units_type_from_name(units) == UnitsType.FEET else "meters"


def convert_length(
    value: float,
    from_units: UnitsLike,
    to_units: UnitsLike,
    feet_per_meter: float = FEET_PER_METER,
) -> float:
    src = units_type_from_name(from_units)
    dst = units_type_from_name(to_units)
    if src == dst:
        return float(value)
    if dst == UnitsType.FEET:
        return float(value) * feet_per_meter
    return float(value) / feet_per_meter
