from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from lumedit.models.document import (
    IESDocument,
    IESMetadata,
    PhotometricData,
    PhotometricType,
    UnitsType,
)
from lumedit.models.grid import is_strictly_increasing


logger = logging.getLogger(__name__)


@dataclass
class ParseError(Exception):
    message: str
    line_no: Optional[int] = None
    snippet: Optional[str] = None
    filename: Optional[str] = None

    def __str__(self) -> str:
        prefix = f"{self.filename}: " if self.filename else ""
        if self.line_no is None:
            return f"{prefix}{self.message}"
        return f"{prefix}Line {self.line_no}: {self.message}"


class FormatError(ParseError):
    """A mandatory line is missing or does not tokenize into the expected numbers."""


class ArityError(ParseError):
    """Declared angle/row counts disagree with the values actually present."""


_NUM_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

# [KEYWORD] -> IESMetadata text field
_TEXT_KEYWORDS: Dict[str, str] = {
    "TEST": "test",
    "TESTLAB": "test_lab",
    "TESTDATE": "test_date",
    "ISSUEDATE": "issue_date",
    "LAMPPOSITION": "lamp_position",
    "OTHER": "other",
    "MANUFAC": "manufacturer",
    "LUMINAIRE": "luminaire_description",
    "LAMPCAT": "lamp_catalog_number",
    "LUMCAT": "luminaire_catalog_number",
    "BALLASTCAT": "ballast_catalog_number",
    "BALLAST": "ballast_description",
}

_NUMERIC_KEYWORDS: Dict[str, str] = {
    "_COLOR_TEMPERATURE": "color_temperature",
    "COLOR_TEMPERATURE": "color_temperature",
    "_CRI": "color_rendering_index",
    "CRI": "color_rendering_index",
}


def _is_number(tok: str) -> bool:
    return bool(_NUM_RE.match(tok))


def _next_content_line(lines: List[str], start_idx0: int) -> Optional[int]:
    idx0 = start_idx0
    while idx0 < len(lines) and not lines[idx0]:
        idx0 += 1
    return idx0 if idx0 < len(lines) else None


def _numeric_tokens(line: str, line_no: int, count: int, what: str) -> List[float]:
    toks = line.split()
    if len(toks) != count:
        raise FormatError(
            f"{what} line has {len(toks)} value(s), expected {count}",
            line_no=line_no,
            snippet=line,
        )
    out: List[float] = []
    for i, t in enumerate(toks):
        if not _is_number(t):
            raise FormatError(
                f"Non-numeric value #{i + 1} on {what} line: '{t}'",
                line_no=line_no,
                snippet=line,
            )
        out.append(float(t))
    return out


def _as_int(v: float, name: str, line_no: int) -> int:
    if abs(v - round(v)) > 1e-9:
        raise FormatError(f"Expected integer for {name}, got {v:g}", line_no=line_no)
    return int(round(v))


def _parse_keyword_line(s: str) -> Optional[Tuple[str, str]]:
    if not s.startswith("[") or "]" not in s:
        return None
    end = s.find("]")
    key = s[1:end].strip()
    if not key:
        return None
    return key, s[end + 1 :].strip()


def _field_for_keyword(key: str) -> Optional[str]:
    if key == "NEARFIELD":
        return "near_field"
    return _TEXT_KEYWORDS.get(key) or _NUMERIC_KEYWORDS.get(key)


def _apply_keyword(md: IESMetadata, key: str, val: str) -> None:
    field = _field_for_keyword(key)
    if field is not None and getattr(md, field) is not None:
        # Repeated keyword: the first value stays typed, later ones are kept verbatim.
        md.extra_keywords.append((key, val))
        return
    if key in _TEXT_KEYWORDS:
        setattr(md, _TEXT_KEYWORDS[key], val)
        return
    if key == "NEARFIELD":
        # Only the descriptor is kept; the dimensions after it are rewritten on output.
        parts = val.split()
        md.near_field = parts[0] if parts else ""
        return
    if key in _NUMERIC_KEYWORDS:
        raw = val.strip()
        if key.endswith("COLOR_TEMPERATURE"):
            raw = raw.rstrip("Kk").strip()
        if _is_number(raw):
            setattr(md, _NUMERIC_KEYWORDS[key], float(raw))
            return
    md.extra_keywords.append((key, val))


def _tokenise_stream(lines: List[str], start_idx0: int) -> List[Tuple[float, int]]:
    """All remaining numeric tokens as (value, 1-indexed line number)."""
    values: List[Tuple[float, int]] = []
    for idx0 in range(start_idx0, len(lines)):
        for t in lines[idx0].split():
            if not _is_number(t):
                raise FormatError(
                    f"Non-numeric token '{t}' in angle/candela data",
                    line_no=idx0 + 1,
                    snippet=lines[idx0],
                )
            values.append((float(t), idx0 + 1))
    return values


def _parse_header(lines: List[str], tilt_idx0: int) -> Tuple[List[float], int, List[float], int]:
    main_idx0 = _next_content_line(lines, tilt_idx0 + 1)
    if main_idx0 is None:
        raise FormatError("Missing photometric header line after TILT", line_no=tilt_idx0 + 1)
    main = _numeric_tokens(lines[main_idx0], main_idx0 + 1, 10, "photometric header")

    ballast_idx0 = _next_content_line(lines, main_idx0 + 1)
    if ballast_idx0 is None:
        raise FormatError("Missing ballast/input watts line", line_no=main_idx0 + 1)
    ballast = _numeric_tokens(lines[ballast_idx0], ballast_idx0 + 1, 3, "ballast")
    return main, main_idx0 + 1, ballast, ballast_idx0


def _build_photometric_data(
    main: List[float],
    main_line_no: int,
    ballast: List[float],
    stream: List[Tuple[float, int]],
    ballast_line_no: int,
) -> PhotometricData:
    num_lamps = _as_int(main[0], "number_of_lamps", main_line_no)
    lumens_per_lamp = main[1]
    multiplier = main[2]
    nv = _as_int(main[3], "number_of_vertical_angles", main_line_no)
    nh = _as_int(main[4], "number_of_horizontal_angles", main_line_no)
    ptype = _as_int(main[5], "photometric_type", main_line_no)
    utype = _as_int(main[6], "units_type", main_line_no)
    # File order is width, length, height.
    width, length, height = main[7], main[8], main[9]

    if num_lamps < 1:
        raise FormatError("number_of_lamps must be >= 1", line_no=main_line_no)
    if nv < 1 or nh < 1:
        raise FormatError("Angle counts must be >= 1", line_no=main_line_no)
    if ptype not in (1, 2, 3):
        raise FormatError(f"Unsupported photometric_type={ptype} (expected 1,2,3)", line_no=main_line_no)
    if utype not in (1, 2):
        raise FormatError(f"Unsupported units_type={utype} (expected 1=feet,2=meters)", line_no=main_line_no)

    expected = nv + nh + nv * nh
    if len(stream) != expected:
        last_line = stream[-1][1] if stream else ballast_line_no
        found_cd = max(0, len(stream) - nv - nh)
        if len(stream) < nv + nh:
            msg = (
                f"Expected {nv} vertical and {nh} horizontal angles but found only "
                f"{len(stream)} numeric value(s)"
            )
        else:
            msg = f"Expected {nh * nv} candela values ({nh} rows of {nv}) but found {found_cd}"
        raise ArityError(msg, line_no=last_line)

    v = [x for x, _ in stream[:nv]]
    h = [x for x, _ in stream[nv : nv + nh]]
    flat = [x for x, _ in stream[nv + nh :]]

    if not is_strictly_increasing(v):
        raise FormatError("Vertical angles are not strictly increasing", line_no=stream[0][1])
    if not is_strictly_increasing(h):
        raise FormatError("Horizontal angles are not strictly increasing", line_no=stream[nv][1])

    # Rows may wrap across physical lines; re-chunk by the declared row length.
    candela = [flat[i * nv : (i + 1) * nv] for i in range(nh)]

    return PhotometricData(
        number_of_lamps=num_lamps,
        lumens_per_lamp=lumens_per_lamp,
        multiplier=multiplier,
        total_lumens=num_lamps * lumens_per_lamp * multiplier,
        number_of_vertical_angles=nv,
        number_of_horizontal_angles=nh,
        photometric_type=PhotometricType(ptype),
        units_type=UnitsType(utype),
        length=length,
        width=width,
        height=height,
        ballast_factor=ballast[0],
        ballast_lamp_photometric_factor=ballast[1],
        input_watts=ballast[2],
        vertical_angles=v,
        horizontal_angles=h,
        candela_values=candela,
    )


def parse_ies_text(text: str, file_name: str = "") -> IESDocument:
    """
    Parse LM-63 text into an IESDocument.

    Raises FormatError when a mandatory line is missing or malformed and
    ArityError when the declared angle counts disagree with the data. No
    partial document is ever returned.
    """
    try:
        if not text.strip():
            raise FormatError("Empty file")

        lines = [ln.strip() for ln in text.splitlines()]
        md = IESMetadata()

        first_idx0 = _next_content_line(lines, 0)
        assert first_idx0 is not None
        idx0 = first_idx0
        head = lines[first_idx0]
        if not head.startswith("[") and not head.upper().startswith("TILT"):
            md.format = head
            idx0 += 1

        tilt_idx0: Optional[int] = None
        while idx0 < len(lines):
            s = lines[idx0]
            if s.upper().startswith("TILT"):
                tilt_idx0 = idx0
                break
            kw = _parse_keyword_line(s)
            if kw is not None:
                _apply_keyword(md, kw[0], kw[1])
            idx0 += 1

        if tilt_idx0 is None:
            raise FormatError("TILT line missing", line_no=len(lines))
        tilt = lines[tilt_idx0]
        tilt_value = tilt.split("=", 1)[1].strip().upper() if "=" in tilt else ""
        if tilt_value != "NONE":
            raise FormatError(
                f"Only TILT=NONE is supported, got '{tilt}'",
                line_no=tilt_idx0 + 1,
                snippet=tilt,
            )

        main, main_line_no, ballast, ballast_idx0 = _parse_header(lines, tilt_idx0)
        stream = _tokenise_stream(lines, ballast_idx0 + 1)
        data = _build_photometric_data(main, main_line_no, ballast, stream, ballast_idx0 + 1)

        md.luminous_opening_length = data.length
        md.luminous_opening_width = data.width
        md.luminous_opening_height = data.height

        logger.debug(
            "Parsed %s: %d vertical x %d horizontal angles, %.3f lm, %.3f W",
            file_name or "<text>",
            data.number_of_vertical_angles,
            data.number_of_horizontal_angles,
            data.total_lumens,
            data.input_watts,
        )
        return IESDocument(file_name=file_name, metadata=md, photometric_data=data)
    except ParseError as e:
        if e.filename is None and file_name:
            e.filename = file_name
        raise
