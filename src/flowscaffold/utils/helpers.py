from __future__ import annotations

from typing import Iterable, Tuple
import numpy as np


def group_anchor(points: Iterable[Tuple[float, float]]) -> Tuple[float, float]:
    """
    Leftmost x and mean y of a set of points, (0, 0) when there are none.
    """
    coords = np.asarray(list(points), dtype=float)
    if coords.size == 0:
        return 0.0, 0.0
    return float(coords[:, 0].min()), float(coords[:, 1].mean())


def points_close(
    a: Tuple[float, float],
    b: Tuple[float, float],
    tolerance: float,
) -> bool:
    # Per-axis absolute distance, no relative term.
    delta = np.abs(np.asarray(a, dtype=float) - np.asarray(b, dtype=float))
    return bool(np.all(delta <= tolerance))
