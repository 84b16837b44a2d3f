from __future__ import annotations

import csv
import io
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from lumedit.core.numeric import format_number
from lumedit.core.units import convert_length, units_name
from lumedit.ies_file import IESFile


logger = logging.getLogger(__name__)


@dataclass
class CSVRow:
    # None = column absent from the sheet; "" = present but blank.
    filename: str
    manufacturer: Optional[str] = None
    luminaire_catalog_number: Optional[str] = None
    lamp_catalog_number: Optional[str] = None
    test: Optional[str] = None
    test_lab: Optional[str] = None
    test_date: Optional[str] = None
    issue_date: Optional[str] = None
    lamp_position: Optional[str] = None
    other: Optional[str] = None
    near_field: Optional[str] = None
    wattage: Optional[str] = None
    lumens: Optional[str] = None
    cct: Optional[str] = None
    cct_multiplier: Optional[str] = None
    length: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None
    unit: Optional[str] = None


@dataclass(frozen=True)
class RowValidation:
    is_valid: bool
    errors: List[str]


HEADER_ALIASES: Dict[str, str] = {
    "filename": "filename",
    "file name": "filename",
    "manufacturer": "manufacturer",
    "manufac": "manufacturer",
    "luminairecatalognumber": "luminaire_catalog_number",
    "lumcat": "luminaire_catalog_number",
    "lampcatalognumber": "lamp_catalog_number",
    "lampcat": "lamp_catalog_number",
    "test": "test",
    "testlab": "test_lab",
    "test laboratory": "test_lab",
    "testdate": "test_date",
    "test date": "test_date",
    "issuedate": "issue_date",
    "issue date": "issue_date",
    "lampposition": "lamp_position",
    "lamp position": "lamp_position",
    "other": "other",
    "nearfield": "near_field",
    "near field": "near_field",
    "near-field": "near_field",
    "wattage": "wattage",
    "watts": "wattage",
    "power": "wattage",
    "lumens": "lumens",
    "total lumens": "lumens",
    "cct": "cct",
    "cct (k)": "cct",
    "colortemperature": "cct",
    "color temperature": "cct",
    "cctmultiplier": "cct_multiplier",
    "cct multiplier": "cct_multiplier",
    "multiplier": "cct_multiplier",
    "length": "length",
    "length (m)": "length",
    "length (ft)": "length",
    "width": "width",
    "width (m)": "width",
    "width (ft)": "width",
    "height": "height",
    "height (m)": "height",
    "height (ft)": "height",
    "unit": "unit",
    "units": "unit",
    "dimension unit": "unit",
    "dimension units": "unit",
}

# Row attribute -> CSV column header on export.
_METADATA_COLUMNS: List[Tuple[str, str]] = [
    ("filename", "filename"),
    ("manufacturer", "manufacturer"),
    ("luminaire_catalog_number", "luminaireCatalogNumber"),
    ("lamp_catalog_number", "lampCatalogNumber"),
    ("test", "test"),
    ("test_lab", "testLab"),
    ("test_date", "testDate"),
    ("issue_date", "issueDate"),
    ("lamp_position", "lampPosition"),
    ("other", "other"),
    ("near_field", "nearField"),
]
_PHOTOMETRIC_COLUMNS: List[Tuple[str, str]] = [
    ("wattage", "wattage"),
    ("lumens", "lumens"),
    ("cct", "cct (K)"),
    ("cct_multiplier", "cctMultiplier"),
    ("length", "length"),
    ("width", "width"),
    ("height", "height"),
    ("unit", "unit"),
]

_METADATA_TEXT_FIELDS = (
    "manufacturer",
    "luminaire_catalog_number",
    "lamp_catalog_number",
    "test",
    "test_lab",
    "test_date",
    "issue_date",
    "lamp_position",
    "other",
    "near_field",
)


def _to_float(raw: Optional[str]) -> Optional[float]:
    if raw is None or raw.strip() == "":
        return None
    try:
        v = float(raw)
    except ValueError:
        return None
    return None if math.isnan(v) else v


def parse_csv_rows(content: str) -> List[CSVRow]:
    """
    Parse a metadata sheet. Unknown columns are ignored and rows without a
    filename are dropped.
    """
    records = [r for r in csv.reader(io.StringIO(content)) if any(cell.strip() for cell in r)]
    if len(records) < 2:
        return []

    header = [HEADER_ALIASES.get(h.strip().lower()) for h in records[0]]
    rows: List[CSVRow] = []
    for line_no, record in enumerate(records[1:], start=2):
        values: Dict[str, Any] = {}
        for idx, attr in enumerate(header):
            if attr is None or idx >= len(record):
                continue
            values[attr] = record[idx].strip()
        if not values.get("filename"):
            logger.warning("CSV row %d has no filename; skipped", line_no)
            continue
        rows.append(CSVRow(**values))
    return rows


def _format_csv(header: Sequence[str], records: Iterable[Sequence[str]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(list(header))
    for rec in records:
        writer.writerow(list(rec))
    return buf.getvalue()


def export_csv_rows(rows: Sequence[CSVRow], include_photometric: bool = False) -> str:
    columns = list(_METADATA_COLUMNS)
    if include_photometric:
        columns += _PHOTOMETRIC_COLUMNS
    return _format_csv(
        [title for _, title in columns],
        ([getattr(row, attr) or "" for attr, _ in columns] for row in rows),
    )


def validate_rows(rows: Sequence[CSVRow], existing_file_names: Optional[Iterable[str]] = None) -> RowValidation:
    errors: List[str] = []
    if not rows:
        return RowValidation(is_valid=False, errors=["No data rows found"])

    for i, row in enumerate(rows, start=1):
        if not row.filename:
            errors.append(f"Row {i}: Missing filename")

    seen: Dict[str, int] = {}
    for row in rows:
        seen[row.filename] = seen.get(row.filename, 0) + 1
    duplicates = [name for name, n in seen.items() if n > 1]
    if duplicates:
        errors.append(f"Duplicate filenames found: {', '.join(duplicates)}")

    if existing_file_names is not None:
        known = set(existing_file_names)
        missing = [row.filename for row in rows if row.filename and row.filename not in known]
        if missing:
            errors.append(f"Filenames not loaded: {', '.join(missing)}")

    return RowValidation(is_valid=not errors, errors=errors)


def metadata_updates_from_row(row: CSVRow) -> Dict[str, Any]:
    """Metadata fields present in the row (blank cells included, to clear)."""
    updates: Dict[str, Any] = {}
    for name in _METADATA_TEXT_FIELDS:
        value = getattr(row, name)
        if value is not None:
            updates[name] = value
    cct = _to_float(row.cct)
    if cct is not None:
        updates["color_temperature"] = cct
    return updates


def apply_row(file: IESFile, row: CSVRow, auto_adjust_wattage: bool = False) -> None:
    """
    Apply one sheet row to a file: metadata, then dimensions, then wattage,
    then lumens, then the CCT multiplier.

    Every step runs on a copy; `file` is only updated when all of them
    succeed, so a failing row leaves it untouched.
    """
    cfg = file.settings
    work = file.copy()
    work.update_metadata(**metadata_updates_from_row(row))

    row_unit = "feet" if (row.unit or "").strip().lower() in {"feet", "ft"} else "meters"
    file_unit = units_name(work.photometric_data.units_type)

    def to_file_unit(raw: Optional[str]) -> Optional[float]:
        v = _to_float(raw)
        if v is None:
            return None
        return convert_length(v, row_unit, file_unit, feet_per_meter=cfg.feet_per_meter)

    length, width, height = to_file_unit(row.length), to_file_unit(row.width), to_file_unit(row.height)
    if length is not None or width is not None or height is not None:
        work.update_dimensions(length, width, height)

    watts = _to_float(row.wattage)
    if watts is not None and abs(watts - work.photometric_data.input_watts) > cfg.wattage_tolerance:
        work.update_wattage(watts, update_lumens=True)

    lumens = _to_float(row.lumens)
    if lumens is not None and abs(lumens - work.photometric_data.total_lumens) > cfg.lumens_tolerance:
        work.update_lumens(lumens, update_wattage=auto_adjust_wattage)

    multiplier = _to_float(row.cct_multiplier)
    if multiplier is not None and multiplier != 1.0:
        work.scale_by_cct(multiplier)

    file.replace_document(work.document)
    logger.debug("Applied CSV row to %s", file.file_name)


def row_from_file(file: IESFile) -> CSVRow:
    md = file.metadata
    data = file.photometric_data
    return CSVRow(
        filename=file.file_name,
        manufacturer=md.manufacturer or "",
        luminaire_catalog_number=md.luminaire_catalog_number or "",
        lamp_catalog_number=md.lamp_catalog_number or "",
        test=md.test or "",
        test_lab=md.test_lab or "",
        test_date=md.test_date or "",
        issue_date=md.issue_date or "",
        lamp_position=md.lamp_position or "",
        other=md.other or "",
        near_field=md.near_field or "",
        wattage=format_number(data.input_watts),
        lumens=format_number(data.total_lumens),
        cct=format_number(md.color_temperature) if md.color_temperature is not None else "",
        length=format_number(data.length, fixed=True),
        width=format_number(data.width, fixed=True),
        height=format_number(data.height, fixed=True),
        unit=units_name(data.units_type),
    )


def generate_template(include_photometric: bool = False) -> str:
    row = CSVRow(
        filename="example_factory_sku.ies",
        manufacturer="EXAMPLE",
        luminaire_catalog_number="EXAMPLE-SKU-001",
        lamp_catalog_number="EXAMPLE-SKU-001",
        test="TEST-001",
        test_lab="EXAMPLE",
        test_date="01/15/2024",
        issue_date="01/20/2024",
        lamp_position="Universal",
        other="Factory conversion",
        near_field="",
    )
    if include_photometric:
        row.wattage = "40"
        row.cct = "4000"
        row.cct_multiplier = "1.0"
        row.length = "1.000"
        row.width = "0.050"
        row.height = "0.010"
        row.unit = "meters"
    return export_csv_rows([row], include_photometric=include_photometric)


def generate_wattage_template(file_names: Sequence[str]) -> str:
    return export_csv_rows([CSVRow(filename=n, wattage="") for n in file_names], include_photometric=True)


def generate_cct_template(file_names: Sequence[str], base_cct: Optional[str] = None) -> str:
    return export_csv_rows(
        [CSVRow(filename=n, cct=base_cct or "", cct_multiplier="1.0") for n in file_names],
        include_photometric=True,
    )


def generate_length_template(file_names: Sequence[str]) -> str:
    return export_csv_rows([CSVRow(filename=n, length="") for n in file_names], include_photometric=True)
