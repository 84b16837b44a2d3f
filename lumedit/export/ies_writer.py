from __future__ import annotations

import logging
from typing import List, Optional

from lumedit.core.numeric import format_number, format_row
from lumedit.core.settings import EditorSettings, resolve_settings
from lumedit.models.document import IESDocument, IESMetadata


logger = logging.getLogger(__name__)


def _kw(lines: List[str], keyword: str, value: object) -> None:
    lines.append(f"[{keyword}] {value}")


def _text(value: Optional[str]) -> str:
    return value if value is not None else ""


def _luminaire_value(md: IESMetadata) -> Optional[str]:
    # A non-blank LUMCAT always wins over the stored description.
    cat = md.luminaire_catalog_number
    if cat is not None and cat.strip() != "":
        return cat
    return md.luminaire_description


def generate_ies_text(doc: IESDocument, settings: Optional[EditorSettings] = None) -> str:
    """
    Serialize a document to LM-63 text.

    Keyword order and emission rules are fixed; every number on the data
    lines is truncated (not rounded) to `settings.decimals` places.
    """
    cfg = resolve_settings(settings)
    places = cfg.decimals
    fixed = cfg.fixed_decimals

    def num(x: float) -> str:
        return format_number(x, places=places, fixed=fixed)

    md = doc.metadata
    data = doc.photometric_data
    lines: List[str] = []

    lines.append(md.format if md.format else cfg.default_format)

    _kw(lines, "TEST", _text(md.test))
    _kw(lines, "TESTLAB", _text(md.test_lab))

    if md.test_date is not None:
        _kw(lines, "TESTDATE", md.test_date)
    if md.issue_date is not None:
        _kw(lines, "ISSUEDATE", md.issue_date)
    if md.lamp_position is not None:
        _kw(lines, "LAMPPOSITION", md.lamp_position)
    if md.other is not None:
        _kw(lines, "OTHER", md.other)

    # Projection of the current dimensions, not stored text.
    if md.near_field:
        _kw(lines, "NEARFIELD", f"{md.near_field} {num(data.length)} {num(data.width)} {num(data.height)}")

    _kw(lines, "MANUFAC", _text(md.manufacturer))

    luminaire = _luminaire_value(md)
    if luminaire is not None:
        _kw(lines, "LUMINAIRE", luminaire)
    if md.lamp_catalog_number is not None:
        _kw(lines, "LAMPCAT", md.lamp_catalog_number)
    if md.luminaire_catalog_number is not None:
        _kw(lines, "LUMCAT", md.luminaire_catalog_number)
    if md.ballast_catalog_number is not None:
        _kw(lines, "BALLASTCAT", md.ballast_catalog_number)
    if md.ballast_description is not None:
        _kw(lines, "BALLAST", md.ballast_description)

    if md.color_temperature is not None:
        _kw(lines, "_COLOR_TEMPERATURE", f"{format_number(md.color_temperature, places=places)}K")
    if md.color_rendering_index is not None:
        _kw(lines, "_CRI", format_number(md.color_rendering_index, places=places))

    for key, value in md.extra_keywords:
        _kw(lines, key, value)

    lines.append("TILT=NONE")

    lines.append(
        " ".join(
            [
                str(int(data.number_of_lamps)),
                num(data.lumens_per_lamp),
                num(data.multiplier),
                str(int(data.number_of_vertical_angles)),
                str(int(data.number_of_horizontal_angles)),
                str(int(data.photometric_type)),
                str(int(data.units_type)),
                num(data.width),
                num(data.length),
                num(data.height),
            ]
        )
    )
    lines.append(
        f"{num(data.ballast_factor)} {num(data.ballast_lamp_photometric_factor)} {num(data.input_watts)}"
    )

    lines.append(format_row(data.vertical_angles, places=places, fixed=fixed))
    lines.append(format_row(data.horizontal_angles, places=places, fixed=fixed))
    for row in data.candela_values:
        lines.append(format_row(row, places=places, fixed=fixed))

    logger.debug("Generated %d line(s) for %s", len(lines), doc.file_name or "<document>")
    return "\n".join(lines) + "\n"
