"""Three-point interpolation helpers for tabulated ephemeris samples."""

from __future__ import annotations

from typing import Tuple

__all__ = ["extremum"]


def extremum(y1: float, y2: float, y3: float) -> Tuple[float, float]:
    """Locate the extremum of the parabola through three equally spaced samples.

    Parameters
    ----------
    y1, y2, y3:
        Consecutive samples; ``y2`` is the middle one.

    Returns
    -------
    tuple[float, float]
        The interpolated extreme value and its offset from the middle sample,
        in units of the sample spacing (positive towards ``y3``).
    """

    a = y2 - y1
    b = y3 - y2
    c = b - a
    ab = a + b
    fraction = -ab / (2.0 * c)
    value = y2 - (ab * ab) / (8.0 * c)
    return value, fraction
