from __future__ import annotations

from typing import List, Sequence

import numpy as np


def is_strictly_increasing(a: Sequence[float]) -> bool:
    return all(a[i] < a[i + 1] for i in range(len(a) - 1))


def grid_shape_problems(
    vertical_angles: Sequence[float],
    horizontal_angles: Sequence[float],
    candela_values: Sequence[Sequence[float]],
) -> List[str]:
    problems: List[str] = []
    if len(candela_values) != len(horizontal_angles):
        problems.append(
            f"candela grid has {len(candela_values)} row(s), expected {len(horizontal_angles)} (one per horizontal angle)"
        )
    V = len(vertical_angles)
    for i, row in enumerate(candela_values):
        if len(row) != V:
            problems.append(f"candela row {i} has {len(row)} value(s), expected {V}")
    return problems


def check_grid_shape(
    vertical_angles: Sequence[float],
    horizontal_angles: Sequence[float],
    candela_values: Sequence[Sequence[float]],
) -> None:
    problems = grid_shape_problems(vertical_angles, horizontal_angles, candela_values)
    if problems:
        raise ValueError("; ".join(problems))


def scale_grid(candela_values: Sequence[Sequence[float]], factor: float) -> List[List[float]]:
    """Multiply every sample by `factor`, returning a new [H][V] list."""
    if not candela_values:
        return []
    arr = np.asarray(candela_values, dtype=float) * float(factor)
    return arr.tolist()
