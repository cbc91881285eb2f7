from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np

from .calibration import AxisScale, from_transformed, to_transformed
from .config import DEFAULT_SMOOTH_ALPHA, SEGMENT_EPS, SMOOTH_SAMPLES_PER_SEGMENT
from .data_model import Point


def _lookup(
    pairs: Sequence[Tuple[float, float]],
    target: float,
    in_scale: AxisScale,
    out_scale: AxisScale,
) -> Optional[float]:
    # pairs are (input, output) in real units, walked in the given order
    if len(pairs) < 2:
        return None
    tt = to_transformed(target, in_scale)
    for (a1, b1), (a2, b2) in zip(pairs, pairs[1:]):
        ta1 = to_transformed(a1, in_scale)
        ta2 = to_transformed(a2, in_scale)
        if not (min(ta1, ta2) <= tt <= max(ta1, ta2)):
            continue
        den = ta2 - ta1
        t = 0.0 if abs(den) < SEGMENT_EPS else (tt - ta1) / den
        tb1 = to_transformed(b1, out_scale)
        tb2 = to_transformed(b2, out_scale)
        return from_transformed(tb1 + t * (tb2 - tb1), out_scale)
    return None


def value_at_x(
    points: Sequence[Point],
    x: float,
    x_scale: AxisScale = AxisScale.LINEAR,
    y_scale: AxisScale = AxisScale.LINEAR,
) -> Optional[float]:
    """
    y of the piecewise-linear curve through `points` at `x`.

    Interpolation happens in transformed space (log10 on log axes), so a
    straight segment on a log-log plot reads back exactly. Returns None for
    fewer than two points or when `x` is outside every segment.
    """
    return _lookup([(p.x, p.y) for p in points], x, x_scale, y_scale)


def value_at_y(
    points: Sequence[Point],
    y: float,
    x_scale: AxisScale = AxisScale.LINEAR,
    y_scale: AxisScale = AxisScale.LINEAR,
) -> Optional[float]:
    return _lookup([(p.y, p.x) for p in points], y, y_scale, x_scale)


def sorted_points(points: Sequence[Point]) -> List[Point]:
    return sorted(points, key=lambda p: (p.x, p.y))


def smooth_path(
    points: Sequence[Tuple[float, float]],
    alpha: float = DEFAULT_SMOOTH_ALPHA,
    samples_per_segment: int = SMOOTH_SAMPLES_PER_SEGMENT,
) -> List[Tuple[float, float]]:
    """
    Catmull-Rom style cubic path through surface points, for display only.

    Each segment p1->p2 is a cubic Bezier with control points
    p1 + (p2 - p0) * alpha / 6 and p2 - (p3 - p1) * alpha / 6, end points
    duplicated at the ends. alpha=0 gives straight segments.
    """
    pts = [(float(x), float(y)) for x, y in points]
    if len(pts) < 2:
        return pts
    n = max(1, int(samples_per_segment))
    arr = np.asarray(pts, dtype=float)
    t = np.linspace(0.0, 1.0, n + 1)[1:, None]
    b0 = (1 - t) ** 3
    b1 = 3 * (1 - t) ** 2 * t
    b2 = 3 * (1 - t) * t ** 2
    b3 = t ** 3
    k = alpha / 6.0

    out: List[Tuple[float, float]] = [pts[0]]
    last = len(arr) - 1
    for i in range(last):
        p0 = arr[i - 1] if i > 0 else arr[0]
        p1 = arr[i]
        p2 = arr[i + 1]
        p3 = arr[i + 2] if i + 2 <= last else arr[last]
        c1 = p1 + (p2 - p0) * k
        c2 = p2 - (p3 - p1) * k
        seg = b0 * p1 + b1 * c1 + b2 * c2 + b3 * p2
        out.extend((float(x), float(y)) for x, y in seg)
    return out
