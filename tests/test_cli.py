from __future__ import annotations

from pathlib import Path

import pytest

from lumedit.cli import main
from lumedit.models.document import UnitsType
from lumedit.parser.ies_parser import parse_ies_text


def _demo(tmp_path: Path) -> Path:
    out = tmp_path / "demo.ies"
    assert main(["demo", "--out", str(out)]) == 0
    return out


def _load(path: Path):
    return parse_ies_text(path.read_text(encoding="utf-8"), path.name)


def test_cli_demo_writes_parseable_file(tmp_path: Path):
    doc = _load(_demo(tmp_path))
    assert doc.photometric_data.total_lumens == 2000.0
    assert doc.photometric_data.input_watts == 40.0


def test_cli_info(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    src = _demo(tmp_path)
    capsys.readouterr()
    assert main(["info", str(src)]) == 0
    out = capsys.readouterr().out
    assert "Total lumens: 2000" in out
    assert "Efficacy: 50 lm/W" in out
    assert "Symmetry: asymmetric (BILATERAL)" in out


def test_cli_scale_watts(tmp_path: Path):
    src = _demo(tmp_path)
    out = tmp_path / "scaled.ies"
    assert main(["scale", str(src), "--watts", "80", "--out", str(out)]) == 0
    data = _load(out).photometric_data
    assert data.input_watts == 80.0
    assert data.total_lumens == 4000.0
    assert data.candela_values[0] == [2000.0, 1600.0, 400.0]


def test_cli_scale_length_and_lumens(tmp_path: Path):
    src = _demo(tmp_path)
    out = tmp_path / "long.ies"
    rc = main(["scale", str(src), "--length", "2", "--scale-wattage", "--lumens", "3000", "--keep-watts", "--out", str(out)])
    assert rc == 0
    data = _load(out).photometric_data
    assert data.length == 2.0
    assert data.input_watts == 80.0
    assert data.total_lumens == 3000.0


def test_cli_convert(tmp_path: Path):
    src = _demo(tmp_path)
    out = tmp_path / "feet.ies"
    assert main(["convert", str(src), "--to", "feet", "--out", str(out)]) == 0
    data = _load(out).photometric_data
    assert data.units_type is UnitsType.FEET
    assert data.length == pytest.approx(3.28, abs=1e-3)


def test_cli_cct_variants(tmp_path: Path):
    src = _demo(tmp_path)
    outdir = tmp_path / "variants"
    rc = main(
        [
            "cct-variant",
            str(src),
            "--cct",
            "3000",
            "--multiplier",
            "0.9",
            "--cct",
            "5000",
            "--multiplier",
            "1.05",
            "--catalog",
            "DEMO-002",
            "--out-dir",
            str(outdir),
        ]
    )
    assert rc == 0
    warm = _load(outdir / "demo_3000.ies")
    cool = _load(outdir / "demo_5000.ies")
    assert warm.metadata.color_temperature == 3000.0
    assert warm.photometric_data.total_lumens == pytest.approx(1800.0)
    assert cool.metadata.luminaire_catalog_number == "DEMO-002"
    assert cool.photometric_data.input_watts == 40.0


def test_cli_cct_variant_needs_matching_multipliers(tmp_path: Path):
    src = _demo(tmp_path)
    assert main(["cct-variant", str(src), "--cct", "3000", "--cct", "4000", "--multiplier", "1"]) == 2


def test_cli_apply_csv(tmp_path: Path):
    src = _demo(tmp_path)
    sheet = tmp_path / "sheet.csv"
    sheet.write_text("filename,manufacturer,wattage\ndemo.ies,Beta,20\nother.ies,Gamma,10\n", encoding="utf-8")
    outdir = tmp_path / "out"
    assert main(["apply-csv", str(sheet), str(src), "--out-dir", str(outdir)]) == 0
    doc = _load(outdir / "demo.ies")
    assert doc.metadata.manufacturer == "Beta"
    assert doc.photometric_data.input_watts == 20.0
    assert doc.photometric_data.total_lumens == 1000.0
    assert not (outdir / "other.ies").exists()


def test_cli_missing_file(tmp_path: Path):
    assert main(["info", str(tmp_path / "missing.ies")]) == 2


def test_cli_parse_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]):
    bad = tmp_path / "bad.ies"
    bad.write_text("IESNA:LM-63-2002\n[TEST] x\n", encoding="utf-8")
    assert main(["info", str(bad)]) == 3
    assert "bad.ies: Line" in capsys.readouterr().out


def test_cli_precondition_error(tmp_path: Path):
    src = _demo(tmp_path)
    assert main(["scale", str(src), "--lumens", "0", "--out", str(tmp_path / "x.ies")]) == 3


def test_cli_settings_file(tmp_path: Path):
    src = _demo(tmp_path)
    cfg = tmp_path / "settings.json"
    cfg.write_text('{"writer": {"fixed_decimals": true}}', encoding="utf-8")
    out = tmp_path / "fixed.ies"
    assert main(["--settings", str(cfg), "scale", str(src), "--watts", "40", "--out", str(out)]) == 0
    assert "1.000 1.000 40.000" in out.read_text(encoding="utf-8").splitlines()
    assert main(["--settings", str(tmp_path / "nope.json"), "info", str(src)]) == 2
