from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .config import LOG_DOMAIN_EPS


class AxisScale(str, Enum):
    LINEAR = "linear"
    LOG10 = "log10"


@dataclass(frozen=True)
class AxisConfig:
    min: float
    max: float
    scale: AxisScale = AxisScale.LINEAR

    @property
    def is_log(self) -> bool:
        return self.scale == AxisScale.LOG10


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.w / 2, self.y + self.h / 2)

    def contains(self, px: float, py: float, pad: float = 0.0) -> bool:
        return (self.x - pad <= px <= self.right + pad
                and self.y - pad <= py <= self.bottom + pad)


def to_transformed(v: float, scale: AxisScale) -> float:
    """Map a real value into the space where the axis is linear."""
    if scale == AxisScale.LOG10:
        return math.log10(max(LOG_DOMAIN_EPS, v))
    return v


def from_transformed(tv: float, scale: AxisScale) -> float:
    if scale == AxisScale.LOG10:
        return 10 ** tv
    return tv


@dataclass(frozen=True)
class AxisTransform:
    """
    Real <-> surface mapping for one axis.

    The real range [axis.min, axis.max] maps linearly (in transformed space)
    onto the surface interval [p0, p1]. Pass p0 > p1 to flip an axis, which is
    how the y axis gets "up = larger value" on a top-left origin surface.
    """
    axis: AxisConfig
    p0: float
    p1: float

    @property
    def t_min(self) -> float:
        return to_transformed(self.axis.min, self.axis.scale)

    @property
    def t_max(self) -> float:
        return to_transformed(self.axis.max, self.axis.scale)

    def is_valid(self) -> bool:
        lo, hi = self.axis.min, self.axis.max
        if not (math.isfinite(lo) and math.isfinite(hi)):
            return False
        if hi <= lo:
            return False
        if self.p0 == self.p1 or not (math.isfinite(self.p0) and math.isfinite(self.p1)):
            return False
        span = self.t_max - self.t_min
        return math.isfinite(span) and span > 0

    def transform(self, v: float) -> float:
        return to_transformed(v, self.axis.scale)

    def to_surface(self, real: float) -> Optional[float]:
        if not self.is_valid():
            return None
        t0 = self.t_min
        t = (self.transform(real) - t0) / (self.t_max - t0)
        return self.p0 + t * (self.p1 - self.p0)

    def to_real(self, pixel: float) -> Optional[float]:
        if not self.is_valid():
            return None
        t0 = self.t_min
        t = (pixel - self.p0) / (self.p1 - self.p0)
        return from_transformed(t0 + t * (self.t_max - t0), self.axis.scale)


@dataclass(frozen=True)
class PlotTransform:
    x: AxisTransform
    y: AxisTransform
    rect: Rect

    @classmethod
    def from_rect(cls, x_axis: AxisConfig, y_axis: AxisConfig, rect: Rect) -> "PlotTransform":
        # surface y grows downward, so the y axis runs bottom -> top
        return cls(
            x=AxisTransform(x_axis, rect.x, rect.right),
            y=AxisTransform(y_axis, rect.bottom, rect.y),
            rect=rect,
        )

    def is_valid(self) -> bool:
        return self.x.is_valid() and self.y.is_valid()

    def data_to_surface(self, x: float, y: float) -> Optional[Tuple[float, float]]:
        if not self.is_valid():
            return None
        return (self.x.to_surface(x), self.y.to_surface(y))  # type: ignore[return-value]

    def surface_to_data(self, px: float, py: float) -> Optional[Tuple[float, float]]:
        if not self.is_valid():
            return None
        return (self.x.to_real(px), self.y.to_real(py))  # type: ignore[return-value]

    def contains(self, px: float, py: float, pad: float = 0.0) -> bool:
        return self.rect.contains(px, py, pad)
