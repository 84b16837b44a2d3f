from lumedit.core.numeric import format_number, format_row, truncate3, truncate_decimals
from lumedit.core.units import FEET_PER_METER, convert_length, units_name, units_type_from_name

__all__ = [
    "format_number",
    "format_row",
    "truncate3",
    "truncate_decimals",
    "FEET_PER_METER",
    "convert_length",
    "units_name",
    "units_type_from_name",
]
