from __future__ import annotations

import copy
import logging
import math
from typing import Optional

from lumedit.core.settings import EditorSettings, resolve_settings
from lumedit.core.units import UnitsLike, convert_length, units_type_from_name
from lumedit.models.document import DIMENSIONS, Dimension, IESDocument, opening_field
from lumedit.models.grid import check_grid_shape, scale_grid


logger = logging.getLogger(__name__)


class PreconditionError(ValueError):
    pass


def require_positive(value: float, name: str) -> float:
    v = float(value)
    if math.isnan(v) or v <= 0.0:
        raise PreconditionError(f"{name} must be > 0, got {value!r}")
    return v


def _ratio(new_value: float, current: float, name: str) -> float:
    new_v = require_positive(new_value, f"new {name}")
    cur = float(current)
    if cur <= 0.0:
        raise PreconditionError(f"Current {name} is {current!r}; cannot derive a scaling ratio")
    return new_v / cur


def _scaled_light_output(doc: IESDocument, ratio: float) -> IESDocument:
    """Deep copy of `doc` with lumens per lamp, total lumens and candela multiplied by `ratio`."""
    out = copy.deepcopy(doc)
    data = out.photometric_data
    try:
        check_grid_shape(data.vertical_angles, data.horizontal_angles, data.candela_values)
    except ValueError as e:
        raise PreconditionError(f"Malformed candela grid: {e}") from e
    data.lumens_per_lamp = data.lumens_per_lamp * ratio
    data.total_lumens = data.total_lumens * ratio
    data.candela_values = scale_grid(data.candela_values, ratio)
    return out


def calculate_efficacy(lumens: float, watts: float) -> float:
    """Luminous efficacy in lm/W."""
    if float(watts) <= 0.0:
        raise PreconditionError(f"watts must be > 0 to compute efficacy, got {watts!r}")
    return float(lumens) / float(watts)


def scale_by_wattage(doc: IESDocument, new_watts: float) -> IESDocument:
    """More power, proportionally more light, same efficacy."""
    ratio = _ratio(new_watts, doc.photometric_data.input_watts, "input watts")
    out = _scaled_light_output(doc, ratio)
    out.photometric_data.input_watts = float(new_watts)
    logger.debug("scale_by_wattage %s: ratio=%.6f", doc.file_name, ratio)
    return out


def scale_by_lumens(doc: IESDocument, new_lumens: float, adjust_wattage: bool = False) -> IESDocument:
    """
    Scale the light output to `new_lumens` total lumens.

    With `adjust_wattage` the input watts follow the same ratio and efficacy
    is preserved; without it the watts stay put and efficacy changes.
    """
    ratio = _ratio(new_lumens, doc.photometric_data.total_lumens, "total lumens")
    out = _scaled_light_output(doc, ratio)
    if adjust_wattage:
        out.photometric_data.input_watts = out.photometric_data.input_watts * ratio
    logger.debug("scale_by_lumens %s: ratio=%.6f adjust_wattage=%s", doc.file_name, ratio, adjust_wattage)
    return out


def scale_by_dimension(
    doc: IESDocument,
    new_value: float,
    which: Dimension,
    *,
    scale_wattage: bool = False,
) -> IESDocument:
    """
    Rescale a linear source whose flux is proportional to its extent along `which`.

    Input watts are only scaled when `scale_wattage` is set; wattage policy on
    a dimension change belongs to the caller.
    """
    if which not in DIMENSIONS:
        raise PreconditionError(f"Unknown dimension {which!r} (expected one of {', '.join(DIMENSIONS)})")
    ratio = _ratio(new_value, doc.photometric_data.dimension(which), which)
    out = _scaled_light_output(doc, ratio)
    if scale_wattage:
        out.photometric_data.input_watts = out.photometric_data.input_watts * ratio
    setattr(out.photometric_data, which, float(new_value))
    setattr(out.metadata, opening_field(which), float(new_value))
    logger.debug(
        "scale_by_dimension %s: %s -> %g ratio=%.6f scale_wattage=%s",
        doc.file_name,
        which,
        float(new_value),
        ratio,
        scale_wattage,
    )
    return out


def scale_by_cct(doc: IESDocument, multiplier: float) -> IESDocument:
    """Colour-temperature variant: efficacy changes, input watts do not."""
    m = require_positive(multiplier, "CCT multiplier")
    out = _scaled_light_output(doc, m)
    logger.debug("scale_by_cct %s: multiplier=%.6f", doc.file_name, m)
    return out


def convert_units(
    doc: IESDocument,
    target: UnitsLike,
    settings: Optional[EditorSettings] = None,
) -> IESDocument:
    """
    Relabel the luminous-opening dimensions in `target` units.

    Candela, lumens and watts are untouched: same object, different ruler.
    """
    try:
        dst = units_type_from_name(target)
    except ValueError as e:
        raise PreconditionError(str(e)) from e

    out = copy.deepcopy(doc)
    data = out.photometric_data
    if data.units_type == dst:
        return out

    fpm = resolve_settings(settings).feet_per_meter
    src = data.units_type
    for which in DIMENSIONS:
        converted = convert_length(getattr(data, which), src, dst, feet_per_meter=fpm)
        setattr(data, which, converted)
        setattr(out.metadata, opening_field(which), converted)
    data.units_type = dst
    logger.debug("convert_units %s: %s -> %s", doc.file_name, src.name, dst.name)
    return out
