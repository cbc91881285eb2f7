from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from .anchor import ResizeStart


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Dragging:
    slot: int
    # pointer position and image offset when the drag started
    start_x: float
    start_y: float
    base_off_x: float
    base_off_y: float

    def offset_for(self, px: float, py: float) -> Tuple[float, float]:
        return (self.base_off_x + px - self.start_x, self.base_off_y + py - self.start_y)


@dataclass(frozen=True)
class Resizing:
    slot: int
    start: ResizeStart


@dataclass(frozen=True)
class PickingAnchor:
    slot: int


InteractionSession = Union[Idle, Dragging, Resizing, PickingAnchor]
