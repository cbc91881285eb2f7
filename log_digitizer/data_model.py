from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple, Union

from .calibration import AxisConfig, AxisScale
from .config import (
    BACKGROUND_SLOTS,
    DEFAULT_X_LOG,
    DEFAULT_X_MAX,
    DEFAULT_X_MIN,
    DEFAULT_Y_LOG,
    DEFAULT_Y_MAX,
    DEFAULT_Y_MIN,
)


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Series:
    id: int
    name: str
    color: str
    # insertion order; renderers and reports sort by x themselves
    points: Tuple[Point, ...] = ()


class GuideAxis(str, Enum):
    X = "x"
    Y = "y"


@dataclass(frozen=True)
class GuideLine:
    axis: GuideAxis
    value: float
    # text the user typed ("1,000"), kept independent of number formatting
    source_label: str = ""


@dataclass(frozen=True)
class Guides:
    x: Tuple[GuideLine, ...] = ()
    y: Tuple[GuideLine, ...] = ()

    def for_axis(self, axis: GuideAxis) -> Tuple[GuideLine, ...]:
        return self.x if axis == GuideAxis.X else self.y


@dataclass(frozen=True)
class BackgroundTransform:
    scale_x: float = 1.0
    scale_y: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    @property
    def offset(self) -> Tuple[float, float]:
        return (self.offset_x, self.offset_y)


@dataclass(frozen=True)
class CenterAnchor:
    pass


@dataclass(frozen=True)
class CustomAnchor:
    # picked surface point with the pick-time offset removed
    ax: float
    ay: float
    # normalized position inside the draw rect at pick time, in [0, 1]
    frac_x: float
    frac_y: float


Anchor = Union[CenterAnchor, CustomAnchor]


@dataclass(frozen=True)
class BackgroundLayer:
    natural_size: Tuple[float, float]
    transform: BackgroundTransform = field(default_factory=BackgroundTransform)
    anchor: Anchor = field(default_factory=CenterAnchor)
    opacity: float = 1.0
    visible: bool = True
    # decoded bitmap owned by the I/O layer; never part of a snapshot
    image: Optional[Any] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Axes:
    x: AxisConfig
    y: AxisConfig


def default_axes() -> Axes:
    return Axes(
        x=AxisConfig(DEFAULT_X_MIN, DEFAULT_X_MAX, AxisScale.LOG10 if DEFAULT_X_LOG else AxisScale.LINEAR),
        y=AxisConfig(DEFAULT_Y_MIN, DEFAULT_Y_MAX, AxisScale.LOG10 if DEFAULT_Y_LOG else AxisScale.LINEAR),
    )


@dataclass(frozen=True)
class Document:
    axes: Axes = field(default_factory=default_axes)
    series: Tuple[Series, ...] = ()
    backgrounds: Tuple[Optional[BackgroundLayer], ...] = (None,) * BACKGROUND_SLOTS
    guides: Guides = field(default_factory=Guides)
    keep_aspect: bool = False

    def get_series(self, sid: int) -> Optional[Series]:
        for s in self.series:
            if s.id == sid:
                return s
        return None

    def next_series_id(self) -> int:
        return max((s.id for s in self.series), default=0) + 1
