from __future__ import annotations

import pytest

from lumedit.models.document import UnitsType
from lumedit.parser.ies_parser import parse_ies_text
from lumedit.photometry.scaling import PreconditionError
from lumedit.photometry.variants import (
    cct_variant_name,
    file_stem,
    generate_cct_variant,
    generate_variant,
    is_linear_fixture,
    scale_by_length_mm,
    swap_dimensions,
    unique_file_name,
)


LINEAR = """IESNA:LM-63-2002
[MANUFAC] Acme
[LAMPCAT] LED-1
[LUMCAT] LINEAR-1
[_COLOR_TEMPERATURE] 4000K
TILT=NONE
1 2000 1 3 2 1 2 0.05 1 0.01
1 1 1
0 45 90
0 180
1000 800 200
1000 750 150
"""


def _doc(units: int = 2):
    text = LINEAR.replace("1 2000 1 3 2 1 2 ", f"1 2000 1 3 2 1 {units} ")
    return parse_ies_text(text, "linear.ies")


def test_generate_variant_hits_target_lumens():
    base = _doc()
    v = generate_variant(base, 1000, file_name="linear_1000.ies")
    data = v.photometric_data
    assert v.file_name == "linear_1000.ies"
    assert data.total_lumens == 1000.0
    assert data.input_watts == 1.0
    assert data.candela_values[0] == [500.0, 400.0, 100.0]
    assert base.photometric_data.total_lumens == 2000.0


def test_generate_variant_wattage_follows_width():
    v = generate_variant(_doc(), 1500, width=0.1, color_temperature=3500)
    data = v.photometric_data
    assert data.width == 0.1
    assert v.metadata.luminous_opening_width == 0.1
    assert data.input_watts == pytest.approx(2.0)
    assert data.total_lumens == 1500.0
    assert v.metadata.color_temperature == 3500.0
    assert v.file_name == "linear.ies"


def test_generate_cct_variant():
    v = generate_cct_variant(_doc(), 3000, 0.9)
    assert v.file_name == "linear_3000.ies"
    assert v.metadata.color_temperature == 3000.0
    assert v.metadata.luminaire_catalog_number == "LINEAR-1"
    assert v.photometric_data.total_lumens == pytest.approx(1800.0)
    assert v.photometric_data.input_watts == 1.0


def test_generate_cct_variant_sets_catalog_numbers():
    v = generate_cct_variant(_doc(), 5000, 1.05, catalog_number="LINEAR-1-50K", file_name="cool.ies")
    assert v.file_name == "cool.ies"
    assert v.metadata.lamp_catalog_number == "LINEAR-1-50K"
    assert v.metadata.luminaire_catalog_number == "LINEAR-1-50K"


def test_generate_cct_variant_rejects_bad_inputs():
    with pytest.raises(PreconditionError):
        generate_cct_variant(_doc(), 0, 1.0)
    with pytest.raises(PreconditionError):
        generate_cct_variant(_doc(), 3000, 0)


def test_file_names():
    assert file_stem("Linear.IES") == "Linear"
    assert cct_variant_name("linear.ies", 2700.0) == "linear_2700.ies"
    assert unique_file_name("a.ies", []) == "a.ies"
    assert unique_file_name("a.ies", ["A.IES", "a_1.ies"]) == "a_2.ies"
    assert unique_file_name("b", ["b"]) == "b_1.ies"


def test_scale_by_length_mm_in_meters():
    out = scale_by_length_mm(_doc(), 2000)
    data = out.photometric_data
    assert data.length == pytest.approx(2.0)
    assert data.total_lumens == pytest.approx(4000.0)
    assert data.input_watts == pytest.approx(2.0)


def test_scale_by_length_mm_in_feet():
    doc = _doc(units=1)
    assert doc.photometric_data.units_type is UnitsType.FEET
    out = scale_by_length_mm(doc, 609.6)
    assert out.photometric_data.length == pytest.approx(2.0)
    assert out.photometric_data.total_lumens == pytest.approx(4000.0)


def test_swap_dimensions():
    out = swap_dimensions(_doc())
    assert out.photometric_data.length == 0.05
    assert out.photometric_data.width == 1.0
    assert out.metadata.luminous_opening_length == 0.05
    assert out.metadata.luminous_opening_width == 1.0


def test_is_linear_fixture():
    doc = _doc()
    assert is_linear_fixture(doc.photometric_data)
    square = swap_dimensions(doc)
    square.photometric_data.length = 0.6
    square.photometric_data.width = 0.6
    assert not is_linear_fixture(square.photometric_data)
