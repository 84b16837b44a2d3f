from __future__ import annotations

from decimal import ROUND_DOWN, Decimal
from typing import Iterable


def _quantize_down(value: float, places: int) -> Decimal:
    q = Decimal(1).scaleb(-places)
    d = Decimal(repr(float(value))).quantize(q, rounding=ROUND_DOWN)
    if d == 0:
        d = abs(d)
    return d


def truncate_decimals(value: float, places: int = 3) -> float:
    """
    Truncate toward zero at `places` decimals.

    Works on the shortest decimal repr of the float, so values such as 0.29
    (stored as 0.28999999999999998) keep their written digits.
    """
    return float(_quantize_down(value, places))


def truncate3(value: float) -> float:
    return truncate_decimals(value, 3)


def format_number(value: float, places: int = 3, fixed: bool = False) -> str:
    """Render a truncated number: compact (`2`, `0.45`) or fixed (`2.000`)."""
    s = f"{_quantize_down(value, places):.{places}f}"
    if fixed or "." not in s:
        return s
    s = s.rstrip("0").rstrip(".")
    return s if s else "0"


def format_row(values: Iterable[float], places: int = 3, fixed: bool = False) -> str:
    return " ".join(format_number(v, places=places, fixed=fixed) for v in values)
