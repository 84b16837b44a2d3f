from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import IntEnum
from typing import Any, List, Literal, Optional, Tuple


Dimension = Literal["length", "width", "height"]

DIMENSIONS: Tuple[Dimension, ...] = ("length", "width", "height")


class PhotometricType(IntEnum):
    C = 1
    B = 2
    A = 3


class UnitsType(IntEnum):
    FEET = 1
    METERS = 2


@dataclass
class IESMetadata:
    # None = keyword absent (omitted on output); "" = present but blank.
    format: Optional[str] = None
    test: Optional[str] = None
    test_lab: Optional[str] = None
    test_date: Optional[str] = None
    issue_date: Optional[str] = None
    lamp_position: Optional[str] = None
    other: Optional[str] = None
    near_field: Optional[str] = None
    manufacturer: Optional[str] = None
    luminaire_description: Optional[str] = None
    lamp_catalog_number: Optional[str] = None
    luminaire_catalog_number: Optional[str] = None
    ballast_catalog_number: Optional[str] = None
    ballast_description: Optional[str] = None
    color_temperature: Optional[float] = None
    color_rendering_index: Optional[float] = None
    luminous_opening_length: Optional[float] = None
    luminous_opening_width: Optional[float] = None
    luminous_opening_height: Optional[float] = None
    # Unrecognized [KEYWORD] lines, in file order.
    extra_keywords: List[Tuple[str, str]] = field(default_factory=list)


@dataclass
class PhotometricData:
    number_of_lamps: int
    lumens_per_lamp: float
    multiplier: float
    total_lumens: float
    number_of_vertical_angles: int
    number_of_horizontal_angles: int
    photometric_type: PhotometricType
    units_type: UnitsType
    length: float
    width: float
    height: float
    ballast_factor: float
    ballast_lamp_photometric_factor: float
    input_watts: float
    vertical_angles: List[float]
    horizontal_angles: List[float]
    candela_values: List[List[float]]  # [H][V]

    def dimension(self, which: Dimension) -> float:
        if which not in DIMENSIONS:
            raise KeyError(which)
        return float(getattr(self, which))


@dataclass
class IESDocument:
    file_name: str
    metadata: IESMetadata
    photometric_data: PhotometricData


METADATA_FIELDS: Tuple[str, ...] = tuple(f.name for f in fields(IESMetadata))

_OPENING_FIELD = {
    "length": "luminous_opening_length",
    "width": "luminous_opening_width",
    "height": "luminous_opening_height",
}


def opening_field(which: Dimension) -> str:
    return _OPENING_FIELD[which]


def merge_metadata(original: IESMetadata, **updates: Any) -> IESMetadata:
    """
    Return a copy of `original` with every explicitly supplied field replaced.

    `None` leaves a field untouched; an empty string is a real value and
    clears the field's text while keeping the keyword present.
    """
    unknown = [k for k in updates if k not in METADATA_FIELDS]
    if unknown:
        raise KeyError(f"Unknown metadata field(s): {', '.join(sorted(unknown))}")

    values = {name: getattr(original, name) for name in METADATA_FIELDS}
    values["extra_keywords"] = list(original.extra_keywords)
    for key, value in updates.items():
        if value is None:
            continue
        if isinstance(value, float) and value != value:
            continue
        if key == "extra_keywords":
            value = [(str(k), str(v)) for k, v in value]
        values[key] = value
    return IESMetadata(**values)
