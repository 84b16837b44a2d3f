from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional

from lumedit.batch.csv_rows import apply_row, parse_csv_rows, validate_rows
from lumedit.core.settings import EditorSettings, SettingsError, load_settings
from lumedit.core.units import units_name
from lumedit.ies_file import IESFile
from lumedit.parser.ies_parser import ParseError
from lumedit.photometry.scaling import PreconditionError
from lumedit.photometry.variants import generate_cct_variant, unique_file_name


logger = logging.getLogger(__name__)


_DEMO_IES_TEXT = """IESNA:LM-63-2002
[TEST] DEMO-001
[TESTLAB] Lumedit Demo Lab
[MANUFAC] Lumedit Demo
[LUMCAT] DEMO-001
TILT=NONE
1 2000 1 3 2 1 2 0.05 1 0.01
1 1 40
0 45 90
0 180
1000 800 200
1000 750 150
"""


def _read_ies(path_str: str, settings: EditorSettings) -> Optional[IESFile]:
    path = Path(path_str).expanduser().resolve()
    if not path.exists():
        print(f"[ERROR] File not found: {path}")
        print("        Provide a valid path to a .ies file.")
        return None
    if not path.is_file():
        print(f"[ERROR] Not a file: {path}")
        return None
    text = path.read_text(encoding="utf-8", errors="replace")
    return IESFile.parse(text, path.name, settings=settings)


def _write_ies(file: IESFile, out: Path) -> Path:
    out = out.expanduser().resolve()
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(file.write(), encoding="utf-8")
    return out


def _cmd_demo(args: argparse.Namespace, settings: EditorSettings) -> int:
    outpath = Path(args.out).expanduser().resolve()
    outpath.parent.mkdir(parents=True, exist_ok=True)
    outpath.write_text(_DEMO_IES_TEXT, encoding="utf-8")
    print(f"Saved demo IES to: {outpath}")
    return 0


def _cmd_info(args: argparse.Namespace, settings: EditorSettings) -> int:
    file = _read_ies(args.file, settings)
    if file is None:
        return 2
    md = file.metadata
    data = file.photometric_data
    props = file.properties()

    print("Lumedit Info")
    print(f"  File: {file.file_name}")
    print(f"  Format: {md.format or '(none)'}")
    print(f"  Manufacturer: {md.manufacturer or ''}")
    print(f"  Catalog: {md.luminaire_catalog_number or ''}")
    if md.color_temperature is not None:
        print(f"  CCT: {md.color_temperature:g} K")
    print(f"  Lamps: {data.number_of_lamps} x {data.lumens_per_lamp:g} lm (multiplier {data.multiplier:g})")
    print(f"  Total lumens: {data.total_lumens:g}")
    print(f"  Input watts: {data.input_watts:g}")
    print(f"  Efficacy: {props.efficacy:g} lm/W")
    print(
        f"  Opening (L x W x H): {data.length:g} x {data.width:g} x {data.height:g} "
        f"{units_name(data.units_type)}"
    )
    print(f"  Grid: {data.number_of_horizontal_angles} horizontal x {data.number_of_vertical_angles} vertical")
    print(
        f"  Peak candela: {props.peak_intensity:g} "
        f"at (H,V)=({props.peak_location[0]:g}°, {props.peak_location[1]:g}°)"
    )
    print(f"  Beam / field angle: {props.beam_angle:g}° / {props.field_angle:g}°")
    print(f"  Symmetry: {props.symmetry} ({props.symmetry_inferred})")
    return 0


def _cmd_scale(args: argparse.Namespace, settings: EditorSettings) -> int:
    file = _read_ies(args.file, settings)
    if file is None:
        return 2

    if args.length is not None or args.width is not None or args.height is not None:
        file.update_dimensions(args.length, args.width, args.height, scale_wattage=args.scale_wattage)
    if args.watts is not None:
        file.update_wattage(args.watts, update_lumens=True)
    if args.lumens is not None:
        file.update_lumens(args.lumens, update_wattage=not args.keep_watts)
    if args.cct_multiplier is not None:
        file.scale_by_cct(args.cct_multiplier)

    out = _write_ies(file, Path(args.out))
    data = file.photometric_data
    print(f"Saved: {out}")
    print(f"  Total lumens: {data.total_lumens:g}  Input watts: {data.input_watts:g}")
    return 0


def _cmd_convert(args: argparse.Namespace, settings: EditorSettings) -> int:
    file = _read_ies(args.file, settings)
    if file is None:
        return 2
    file.convert_units(args.to)
    out = _write_ies(file, Path(args.out))
    print(f"Saved: {out}")
    return 0


def _cmd_cct_variant(args: argparse.Namespace, settings: EditorSettings) -> int:
    base = _read_ies(args.file, settings)
    if base is None:
        return 2
    outdir = Path(args.out_dir).expanduser().resolve()
    used: List[str] = []
    for cct, multiplier in zip(args.cct, args.multiplier):
        variant = generate_cct_variant(base.document, cct, multiplier, catalog_number=args.catalog)
        name = unique_file_name(variant.file_name, used)
        used.append(name)
        variant.file_name = name
        out = _write_ies(IESFile(variant, settings=settings), outdir / name)
        print(f"Saved: {out}")
    return 0


def _cmd_apply_csv(args: argparse.Namespace, settings: EditorSettings) -> int:
    csv_path = Path(args.csv).expanduser().resolve()
    if not csv_path.is_file():
        print(f"[ERROR] CSV file not found: {csv_path}")
        return 2
    rows = parse_csv_rows(csv_path.read_text(encoding="utf-8", errors="replace"))

    files: Dict[str, IESFile] = {}
    for f in args.files:
        ies = _read_ies(f, settings)
        if ies is None:
            return 2
        files[ies.file_name] = ies

    check = validate_rows(rows, existing_file_names=files.keys())
    for err in check.errors:
        logger.warning("CSV: %s", err)

    outdir = Path(args.out_dir).expanduser().resolve()
    applied = 0
    for row in rows:
        ies = files.get(row.filename)
        if ies is None:
            continue
        apply_row(ies, row, auto_adjust_wattage=args.auto_adjust_wattage)
        out = _write_ies(ies, outdir / ies.file_name)
        print(f"Saved: {out}")
        applied += 1
    print(f"Applied {applied} of {len(rows)} row(s).")
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="lumedit")
    p.add_argument("--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--settings", default=None, help="JSON settings file (default: $LUMEDIT_SETTINGS)")
    sub = p.add_subparsers(dest="cmd", required=True)

    demo = sub.add_parser("demo", help="Write a small demo .ies file to disk.")
    demo.add_argument("--out", default="demo.ies", help="Output .ies path")
    demo.set_defaults(func=_cmd_demo)

    info = sub.add_parser("info", help="Print metadata and derived properties of an IES file.")
    info.add_argument("file", help="Path to .ies file")
    info.set_defaults(func=_cmd_info)

    s = sub.add_parser("scale", help="Rescale wattage, lumens, dimensions or CCT efficacy.")
    s.add_argument("file", help="Path to .ies file")
    s.add_argument("--out", required=True, help="Output .ies path")
    s.add_argument("--watts", type=float, default=None, help="New input watts (lumens follow)")
    s.add_argument("--lumens", type=float, default=None, help="New total lumens")
    s.add_argument("--keep-watts", action="store_true", help="Leave input watts unchanged on --lumens")
    s.add_argument("--length", type=float, default=None, help="New luminous length (file units)")
    s.add_argument("--width", type=float, default=None, help="New luminous width (file units)")
    s.add_argument("--height", type=float, default=None, help="New luminous height (file units)")
    s.add_argument("--scale-wattage", action="store_true", help="Scale input watts with dimension changes")
    s.add_argument("--cct-multiplier", type=float, default=None, help="Efficacy multiplier for a CCT change")
    s.set_defaults(func=_cmd_scale)

    c = sub.add_parser("convert", help="Convert luminous dimensions between feet and meters.")
    c.add_argument("file", help="Path to .ies file")
    c.add_argument("--to", required=True, choices=["feet", "meters"], help="Target units")
    c.add_argument("--out", required=True, help="Output .ies path")
    c.set_defaults(func=_cmd_convert)

    v = sub.add_parser("cct-variant", help="Write colour-temperature variants of an IES file.")
    v.add_argument("file", help="Path to .ies file")
    v.add_argument("--cct", type=float, action="append", required=True, help="Variant CCT in K (repeatable)")
    v.add_argument(
        "--multiplier", type=float, action="append", required=True, help="Efficacy multiplier per --cct"
    )
    v.add_argument("--catalog", default=None, help="Catalog number for lamp and luminaire")
    v.add_argument("--out-dir", default="out", help="Output directory (default: out)")
    v.set_defaults(func=_cmd_cct_variant)

    a = sub.add_parser("apply-csv", help="Apply a metadata/photometry sheet to IES files.")
    a.add_argument("csv", help="Path to .csv sheet")
    a.add_argument("files", nargs="+", help="IES files named in the sheet")
    a.add_argument("--out-dir", default="out", help="Output directory (default: out)")
    a.add_argument("--auto-adjust-wattage", action="store_true", help="Scale watts with lumen changes")
    a.set_defaults(func=_cmd_apply_csv)

    args = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "cct-variant" and len(args.cct) != len(args.multiplier):
        print("[ERROR] Provide one --multiplier per --cct.")
        return 2

    try:
        settings = load_settings(args.settings)
        return int(args.func(args, settings))
    except SettingsError as e:
        print(f"[ERROR] {e}")
        return 2
    except (ParseError, PreconditionError) as e:
        print(f"[ERROR] {e}")
        return 3


if __name__ == "__main__":
    raise SystemExit(main())
