from __future__ import annotations

from typing import Any

__all__ = [
    "PreconditionError",
    "calculate_efficacy",
    "convert_units",
    "scale_by_cct",
    "scale_by_dimension",
    "scale_by_lumens",
    "scale_by_wattage",
    "generate_variant",
    "generate_cct_variant",
    "scale_by_length_mm",
    "swap_dimensions",
    "is_linear_fixture",
    "unique_file_name",
]

_SCALING = {
    "PreconditionError",
    "calculate_efficacy",
    "convert_units",
    "scale_by_cct",
    "scale_by_dimension",
    "scale_by_lumens",
    "scale_by_wattage",
}


def __getattr__(name: str) -> Any:
    if name in _SCALING:
        from lumedit.photometry import scaling

        return getattr(scaling, name)
    if name in __all__:
        from lumedit.photometry import variants

        return getattr(variants, name)
    raise AttributeError(name)
