from __future__ import annotations

import copy

import pytest

from lumedit.models.document import UnitsType
from lumedit.parser.ies_parser import parse_ies_text
from lumedit.photometry.scaling import (
    PreconditionError,
    calculate_efficacy,
    convert_units,
    scale_by_cct,
    scale_by_dimension,
    scale_by_lumens,
    scale_by_wattage,
)


LINEAR = """IESNA:LM-63-2002
[TEST] T-100
[MANUFAC] Acme
[LUMCAT] LINEAR-1
TILT=NONE
1 2000 1 3 2 1 2 0.05 1 0.01
1 1 1
0 45 90
0 180
1000 800 200
1000 750 150
"""


def _doc():
    return parse_ies_text(LINEAR, "linear.ies")


def _efficacy(doc) -> float:
    data = doc.photometric_data
    return calculate_efficacy(data.total_lumens, data.input_watts)


def test_scale_by_wattage_doubles_everything():
    out = scale_by_wattage(_doc(), 2)
    data = out.photometric_data
    assert data.input_watts == 2.0
    assert data.total_lumens == 4000.0
    assert data.lumens_per_lamp == 4000.0
    assert data.candela_values == [[2000.0, 1600.0, 400.0], [2000.0, 1500.0, 300.0]]


def test_scale_by_wattage_preserves_efficacy():
    doc = _doc()
    out = scale_by_wattage(doc, 37.5)
    assert _efficacy(out) == pytest.approx(_efficacy(doc))


def test_scale_by_lumens_without_wattage_halves_candela():
    out = scale_by_lumens(_doc(), 1000)
    data = out.photometric_data
    assert data.total_lumens == 1000.0
    assert data.input_watts == 1.0
    assert data.candela_values == [[500.0, 400.0, 100.0], [500.0, 375.0, 75.0]]
    assert _efficacy(out) == pytest.approx(1000.0)


def test_scale_by_lumens_with_wattage_keeps_efficacy():
    doc = _doc()
    out = scale_by_lumens(doc, 3000, adjust_wattage=True)
    assert out.photometric_data.input_watts == pytest.approx(1.5)
    assert _efficacy(out) == pytest.approx(_efficacy(doc))


def test_scale_by_length_doubles_light_output():
    out = scale_by_dimension(_doc(), 2.0, "length")
    data = out.photometric_data
    assert data.length == 2.0
    assert data.total_lumens == 4000.0
    assert data.candela_values[0] == [2000.0, 1600.0, 400.0]
    assert data.input_watts == 1.0
    assert out.metadata.luminous_opening_length == 2.0


def test_scale_by_dimension_can_scale_wattage():
    out = scale_by_dimension(_doc(), 0.1, "width", scale_wattage=True)
    data = out.photometric_data
    assert data.width == 0.1
    assert data.input_watts == pytest.approx(2.0)
    assert data.total_lumens == pytest.approx(4000.0)
    assert data.length == 1.0


def test_scale_by_cct_changes_efficacy_only():
    out = scale_by_cct(_doc(), 0.9)
    data = out.photometric_data
    assert data.total_lumens == pytest.approx(1800.0)
    assert data.input_watts == 1.0
    assert data.candela_values[1] == pytest.approx([900.0, 675.0, 135.0])


def test_unit_ratio_is_identity():
    doc = _doc()
    assert scale_by_wattage(doc, 1) == doc
    assert scale_by_lumens(doc, 2000) == doc
    assert scale_by_dimension(doc, 1.0, "length") == doc
    assert scale_by_cct(doc, 1.0) == doc


def test_inputs_are_never_mutated():
    doc = _doc()
    snapshot = copy.deepcopy(doc)
    scale_by_wattage(doc, 5)
    scale_by_lumens(doc, 100, adjust_wattage=True)
    scale_by_dimension(doc, 3.0, "length", scale_wattage=True)
    scale_by_cct(doc, 1.2)
    convert_units(doc, "feet")
    assert doc == snapshot


def test_outputs_do_not_share_candela_rows():
    doc = _doc()
    out = scale_by_cct(doc, 1.0)
    out.photometric_data.candela_values[0][0] = 0.0
    assert doc.photometric_data.candela_values[0][0] == 1000.0


def test_grid_shape_is_preserved():
    out = scale_by_lumens(scale_by_wattage(_doc(), 3), 500)
    data = out.photometric_data
    assert len(data.candela_values) == data.number_of_horizontal_angles == 2
    assert all(len(row) == data.number_of_vertical_angles == 3 for row in data.candela_values)


def test_convert_units_round_trip():
    doc = _doc()
    feet = convert_units(doc, "feet")
    fdata = feet.photometric_data
    assert fdata.units_type is UnitsType.FEET
    assert fdata.length == pytest.approx(3.28084)
    assert fdata.width == pytest.approx(0.164042)
    assert feet.metadata.luminous_opening_length == pytest.approx(3.28084)
    assert fdata.candela_values == doc.photometric_data.candela_values
    assert fdata.total_lumens == doc.photometric_data.total_lumens

    back = convert_units(feet, UnitsType.METERS).photometric_data
    assert back.units_type is UnitsType.METERS
    assert back.length == pytest.approx(1.0)
    assert back.width == pytest.approx(0.05)
    assert back.height == pytest.approx(0.01)


def test_convert_to_same_units_is_a_copy():
    doc = _doc()
    out = convert_units(doc, "meters")
    assert out == doc
    assert out is not doc


@pytest.mark.parametrize("bad", [0, -5, float("nan")])
def test_non_positive_targets_are_rejected(bad: float):
    doc = _doc()
    with pytest.raises(PreconditionError):
        scale_by_wattage(doc, bad)
    with pytest.raises(PreconditionError):
        scale_by_lumens(doc, bad)
    with pytest.raises(PreconditionError):
        scale_by_dimension(doc, bad, "length")
    with pytest.raises(PreconditionError):
        scale_by_cct(doc, bad)


def test_zero_current_dimension_is_rejected():
    doc = _doc()
    doc.photometric_data.height = 0.0
    with pytest.raises(PreconditionError):
        scale_by_dimension(doc, 0.02, "height")


def test_zero_current_watts_is_rejected():
    doc = _doc()
    doc.photometric_data.input_watts = 0.0
    with pytest.raises(PreconditionError):
        scale_by_wattage(doc, 10)


def test_unknown_dimension_is_rejected():
    with pytest.raises(PreconditionError):
        scale_by_dimension(_doc(), 1.0, "depth")  # type: ignore[arg-type]


def test_malformed_grid_is_rejected():
    doc = _doc()
    doc.photometric_data.candela_values = [[1.0, 2.0]]
    with pytest.raises(PreconditionError):
        scale_by_wattage(doc, 2)


def test_unknown_units_are_rejected():
    with pytest.raises(PreconditionError):
        convert_units(_doc(), "yards")


def test_efficacy():
    assert calculate_efficacy(2000, 20) == 100.0
    with pytest.raises(PreconditionError):
        calculate_efficacy(2000, 0)
    assert issubclass(PreconditionError, ValueError)


def test_package_exports_resolve_lazily():
    import lumedit.photometry as photometry
    from lumedit.photometry import variants

    assert photometry.scale_by_wattage is scale_by_wattage
    assert photometry.unique_file_name is variants.unique_file_name
    with pytest.raises(AttributeError):
        photometry.not_a_function
