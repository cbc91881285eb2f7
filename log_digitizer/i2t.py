"""
I²t (current-squared time) transforms for digitized time-current curves.

A digitized curve is read as samples {t: x, i: y}. The energy measure is the
trapezoidal integral of i² over t; derived curves compare it at other
currents or duty levels.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .calibration import AxisScale
from .data_model import Point
from .interpolate import value_at_x


@dataclass(frozen=True)
class Sample:
    t: float  # seconds
    i: float  # amperes


@dataclass(frozen=True)
class I2tResult:
    curve: Tuple[Point, ...]
    total: float
    equivalent_time: Optional[float]


def samples_from_points(points: Sequence[Point]) -> List[Sample]:
    return [Sample(t=p.x, i=p.y) for p in points]


def _sorted(samples: Sequence[Sample]) -> List[Sample]:
    return sorted(samples, key=lambda s: s.t)


def _trapezoids(samples: Sequence[Sample]) -> List[float]:
    ss = _sorted(samples)
    return [
        (a.i * a.i + b.i * b.i) / 2 * (b.t - a.t)
        for a, b in zip(ss, ss[1:])
    ]


def integrate(samples: Sequence[Sample]) -> float:
    """Σ (i_k² + i_{k+1}²)/2 · Δt over samples sorted by t; 0 for < 2 samples."""
    return float(sum(_trapezoids(samples)))


def cumulative_curve(samples: Sequence[Sample]) -> List[Point]:
    ss = _sorted(samples)
    if not ss:
        return []
    out = [Point(ss[0].t, 0.0)]
    total = 0.0
    for s, area in zip(ss[1:], _trapezoids(ss)):
        total += area
        out.append(Point(s.t, total))
    return out


def equivalent_time(samples: Sequence[Sample], current: float) -> Optional[float]:
    """Duration at constant `current` giving the same total I²t."""
    if not samples or not math.isfinite(current) or current <= 0:
        return None
    return integrate(samples) / (current * current)


def build(samples: Sequence[Sample], equivalent_current: Optional[float] = None) -> I2tResult:
    t_eq = equivalent_time(samples, equivalent_current) if equivalent_current is not None else None
    return I2tResult(
        curve=tuple(cumulative_curve(samples)),
        total=integrate(samples),
        equivalent_time=t_eq,
    )


# ---------- lifetime curves ----------

def scaled_lifetime_curve(base_curve: Sequence[Point], ref_x: float, scale_factor: float) -> List[Point]:
    # ref_x only matters when curves are compared; see equivalent_cycles
    return [Point(p.x, p.y * scale_factor) for p in base_curve]


def lifetime_family(
    base_curve: Sequence[Point],
    ref_x: float,
    factors: Sequence[float],
) -> List[Tuple[float, List[Point]]]:
    return [(f, scaled_lifetime_curve(base_curve, ref_x, f)) for f in factors]


def equivalent_cycles(
    probe: float,
    curves: Sequence[Tuple[float, Sequence[Point]]],
    ref_x: float,
    x_scale: AxisScale = AxisScale.LINEAR,
    y_scale: AxisScale = AxisScale.LINEAR,
) -> Optional[float]:
    """
    Solve for the cycle count whose curve passes through `probe` at `ref_x`.

    `curves` holds (cycles, curve) pairs. Each curve is read at `ref_x`; the
    cycle count is interpolated linearly between the two curves bracketing
    `probe`. Outside the covered range the nearest curve's count is returned.
    None when no curve covers `ref_x`.
    """
    levels: List[Tuple[float, float]] = []
    for cycles, curve in curves:
        y = value_at_x(curve, ref_x, x_scale, y_scale)
        if y is not None:
            levels.append((y, cycles))
    if not levels:
        return None
    levels.sort(key=lambda lv: lv[0])
    if probe <= levels[0][0]:
        return levels[0][1]
    if probe >= levels[-1][0]:
        return levels[-1][1]
    for (y1, n1), (y2, n2) in zip(levels, levels[1:]):
        if y1 <= probe <= y2:
            if y2 == y1:
                return n1
            return n1 + (probe - y1) / (y2 - y1) * (n2 - n1)
    return levels[-1][1]


# ---------- text input ----------

_T_HEADER = re.compile(r"^(t|time)(\s*[\[(].*)?$|^t(s|sec)$", re.IGNORECASE)
_I_HEADER = re.compile(r"^(i|current)(\s*[\[(].*)?$|^i(a|amp|amps)$", re.IGNORECASE)


def _split(line: str, sep: Optional[str]) -> List[str]:
    return [p.strip() for p in (line.split(sep) if sep else line.split())]


def parse_samples(text: str) -> List[Sample]:
    """
    Parse CSV/TSV/whitespace-separated t,i text into samples sorted by t.

    An optional header row ("t,i", "time,current", "t[s] i[A]") selects the
    columns; otherwise the first two columns are used. Blank lines, rows that
    do not parse and negative values are skipped.
    """
    lines = [ln for ln in (text or "").strip().splitlines() if ln.strip()]
    if not lines:
        return []

    first = lines[0]
    sep: Optional[str] = None
    if "," in first:
        sep = ","
    elif "\t" in first:
        sep = "\t"

    header = [h.lower() for h in _split(first, sep)]
    t_idx = next((k for k, h in enumerate(header) if _T_HEADER.match(h)), -1)
    i_idx = next((k for k, h in enumerate(header) if _I_HEADER.match(h)), -1)
    has_header = t_idx >= 0 and i_idx >= 0
    if not has_header:
        t_idx, i_idx = 0, 1

    samples: List[Sample] = []
    for line in lines[1 if has_header else 0:]:
        parts = _split(line, sep)
        if len(parts) <= max(t_idx, i_idx):
            continue
        try:
            t = float(parts[t_idx])
            i = float(parts[i_idx])
        except ValueError:
            continue
        if not (math.isfinite(t) and math.isfinite(i)) or t < 0 or i < 0:
            continue
        samples.append(Sample(t, i))
    return _sorted(samples)
