from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple


Symmetry = Literal["FULL", "BILATERAL", "QUADRANT", "NONE", "UNKNOWN"]
PlaneSymmetry = Literal["rotational", "symmetric", "asymmetric"]


@dataclass(frozen=True)
class DerivedProperties:
    peak_intensity: float
    peak_location: Tuple[float, float]  # (horizontal_deg, vertical_deg)
    efficacy: float                     # lm/W, 0 when watts are not positive
    beam_angle: float                   # full angle at 50% of peak
    field_angle: float                  # full angle at 10% of peak
    light_output_ratio: float           # percent
    symmetry: PlaneSymmetry
    symmetry_inferred: Symmetry
    center_beam_intensity: float
