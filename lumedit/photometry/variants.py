from __future__ import annotations

import copy
import logging
import re
from typing import Iterable, Optional

from lumedit.models.document import IESDocument, PhotometricData, UnitsType, opening_field
from lumedit.photometry.scaling import (
    require_positive,
    scale_by_cct,
    scale_by_dimension,
    scale_by_lumens,
)


logger = logging.getLogger(__name__)

_IES_EXT_RE = re.compile(r"\.ies$", re.IGNORECASE)


def file_stem(file_name: str) -> str:
    return _IES_EXT_RE.sub("", file_name)


def unique_file_name(candidate: str, used: Iterable[str]) -> str:
    """
    Return `candidate`, or `<stem>_<n><ext>` with the smallest n >= 1 that is
    not already taken. Comparison is case-insensitive.
    """
    taken = {u.lower() for u in used}
    if candidate.lower() not in taken:
        return candidate
    m = _IES_EXT_RE.search(candidate)
    ext = m.group(0) if m else ".ies"
    stem = file_stem(candidate)
    counter = 1
    while True:
        name = f"{stem}_{counter}{ext}"
        if name.lower() not in taken:
            return name
        counter += 1


def cct_variant_name(base_file_name: str, cct: float) -> str:
    return f"{file_stem(base_file_name)}_{cct:g}.ies"


def generate_variant(
    base: IESDocument,
    target_lumens: float,
    *,
    length: Optional[float] = None,
    width: Optional[float] = None,
    height: Optional[float] = None,
    file_name: Optional[str] = None,
    color_temperature: Optional[float] = None,
) -> IESDocument:
    """
    Build a named variant of `base` at `target_lumens`.

    Lumens and candela follow the lumen ratio. When a new width is given the
    input watts follow the width ratio instead of the lumen ratio.
    """
    variant = scale_by_lumens(base, target_lumens, adjust_wattage=False)
    data = variant.photometric_data
    data.total_lumens = float(target_lumens)

    base_data = base.photometric_data
    if width is not None and base_data.width > 0:
        width_ratio = require_positive(width, "width") / base_data.width
        data.input_watts = base_data.input_watts * width_ratio

    for which, value in (("length", length), ("width", width), ("height", height)):
        if value is None:
            continue
        setattr(data, which, float(value))
        setattr(variant.metadata, opening_field(which), float(value))  # type: ignore[arg-type]

    if color_temperature is not None:
        variant.metadata.color_temperature = float(color_temperature)
    if file_name:
        variant.file_name = file_name

    logger.debug("Generated variant %s from %s at %.3f lm", variant.file_name, base.file_name, target_lumens)
    return variant


def generate_cct_variant(
    base: IESDocument,
    cct: float,
    multiplier: float,
    *,
    file_name: Optional[str] = None,
    catalog_number: Optional[str] = None,
) -> IESDocument:
    """Same luminaire at another colour temperature with an efficacy multiplier."""
    require_positive(cct, "colour temperature")
    variant = scale_by_cct(base, multiplier)
    variant.metadata.color_temperature = float(cct)
    if catalog_number is not None and catalog_number.strip() != "":
        variant.metadata.lamp_catalog_number = catalog_number
        variant.metadata.luminaire_catalog_number = catalog_number
    variant.file_name = file_name or cct_variant_name(base.file_name, cct)
    return variant


def scale_by_length_mm(doc: IESDocument, new_length_mm: float) -> IESDocument:
    """Linear-fixture rule: length given in millimetres, wattage scales too."""
    mm = require_positive(new_length_mm, "length (mm)")
    if doc.photometric_data.units_type == UnitsType.METERS:
        new_length = mm / 1000.0
    else:
        new_length = mm / 304.8
    return scale_by_dimension(doc, new_length, "length", scale_wattage=True)


def swap_dimensions(doc: IESDocument) -> IESDocument:
    out = copy.deepcopy(doc)
    data = out.photometric_data
    data.length, data.width = data.width, data.length
    md = out.metadata
    md.luminous_opening_length, md.luminous_opening_width = data.length, data.width
    return out


def is_linear_fixture(data: PhotometricData) -> bool:
    """Length more than five times both width and height."""
    if data.length <= 0:
        return False
    wide_enough = data.width <= 0 or data.length / data.width > 5
    flat_enough = data.height <= 0 or data.length / data.height > 5
    return wide_enough and flat_enough
