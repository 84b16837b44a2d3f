from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from lumedit.models.derived import DerivedProperties, PlaneSymmetry, Symmetry
from lumedit.models.document import PhotometricData


def infer_symmetry(horizontal_deg: Sequence[float]) -> Symmetry:
    # conservative inference based on typical LM-63 practice
    if len(horizontal_deg) == 1:
        return "FULL"
    hmin, hmax = horizontal_deg[0], horizontal_deg[-1]
    if abs(hmin - 0.0) < 1e-9 and abs(hmax - 90.0) < 1e-6:
        return "QUADRANT"
    if abs(hmin - 0.0) < 1e-9 and abs(hmax - 180.0) < 1e-6:
        return "BILATERAL"
    if abs(hmin - 0.0) < 1e-9 and abs(hmax - 360.0) < 1e-6:
        return "NONE"
    return "UNKNOWN"


def peak_intensity(candela_values: Sequence[Sequence[float]]) -> Tuple[float, Tuple[int, int]]:
    """Peak candela and its (horizontal, vertical) index."""
    arr = np.asarray(candela_values, dtype=float)
    if arr.size == 0:
        return 0.0, (0, 0)
    hi, vi = np.unravel_index(int(np.argmax(arr)), arr.shape)
    return float(arr[hi, vi]), (int(hi), int(vi))


def _threshold_angle(
    candela_values: Sequence[Sequence[float]],
    vertical_angles: Sequence[float],
    fraction: float,
) -> float:
    peak, _ = peak_intensity(candela_values)
    limit = peak * fraction
    first_plane: List[float] = list(candela_values[0]) if candela_values else []
    for i, value in enumerate(first_plane):
        if value <= limit:
            return float(vertical_angles[i]) * 2.0
    return 180.0


def beam_angle(candela_values: Sequence[Sequence[float]], vertical_angles: Sequence[float]) -> float:
    return _threshold_angle(candela_values, vertical_angles, 0.5)


def field_angle(candela_values: Sequence[Sequence[float]], vertical_angles: Sequence[float]) -> float:
    return _threshold_angle(candela_values, vertical_angles, 0.1)


def light_output_ratio(total_lumens: float, lumens_per_lamp: float, number_of_lamps: int) -> float:
    lamp_lumens = lumens_per_lamp * number_of_lamps
    return float(round(total_lumens / lamp_lumens * 100.0)) if lamp_lumens > 0 else 100.0


def plane_symmetry(candela_values: Sequence[Sequence[float]], tolerance: float = 0.1) -> PlaneSymmetry:
    if len(candela_values) <= 1:
        return "rotational"
    arr = np.asarray(candela_values, dtype=float)
    ref = arr[0]
    with np.errstate(divide="ignore", invalid="ignore"):
        rel = np.abs(arr[1:] - ref) / np.abs(ref)
    # 0/0 means both samples are dark: treat as matching.
    rel = np.where(np.isnan(rel), 0.0, rel)
    return "symmetric" if bool(np.all(rel <= tolerance)) else "asymmetric"


def center_beam_intensity(candela_values: Sequence[Sequence[float]]) -> float:
    if not candela_values or not candela_values[0]:
        return 0.0
    return float(candela_values[0][0])


def calculate_properties(data: PhotometricData) -> DerivedProperties:
    peak, (hi, vi) = peak_intensity(data.candela_values)
    efficacy = round(data.total_lumens / data.input_watts, 2) if data.input_watts > 0 else 0.0
    return DerivedProperties(
        peak_intensity=round(peak, 2),
        peak_location=(float(data.horizontal_angles[hi]), float(data.vertical_angles[vi])),
        efficacy=efficacy,
        beam_angle=beam_angle(data.candela_values, data.vertical_angles),
        field_angle=field_angle(data.candela_values, data.vertical_angles),
        light_output_ratio=light_output_ratio(data.total_lumens, data.lumens_per_lamp, data.number_of_lamps),
        symmetry=plane_symmetry(data.candela_values),
        symmetry_inferred=infer_symmetry(data.horizontal_angles),
        center_beam_intensity=center_beam_intensity(data.candela_values),
    )
