from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import List, Literal, Optional, Tuple

from .calibration import Rect
from .config import (
    HANDLE_HIT_PX,
    NUDGE_STEP_LARGE_PX,
    NUDGE_STEP_PX,
    RESIZE_DIVISOR_EPS,
    SCALE_MAX,
    SCALE_MIN,
    WHEEL_ZOOM_IN,
    WHEEL_ZOOM_OUT,
)
from .data_model import BackgroundLayer, BackgroundTransform, CustomAnchor

Handle = Literal["left", "right", "top", "bottom", "uniform"]
Direction = Literal["left", "right", "up", "down"]


def clamp_scale(s: float) -> float:
    if math.isnan(s):
        return 1.0
    return max(SCALE_MIN, min(SCALE_MAX, s))


def _safe(v: float) -> float:
    return RESIZE_DIVISOR_EPS if abs(v) < RESIZE_DIVISOR_EPS else v


def base_rect(natural_size: Optional[Tuple[float, float]], plot_rect: Rect, keep_aspect: bool) -> Rect:
    """Aspect-fit the image into the plot (centered), or use the plot rect as-is."""
    if not keep_aspect or not natural_size:
        return plot_rect
    nw, nh = natural_size
    if nw <= 0 or nh <= 0:
        return plot_rect
    s = min(plot_rect.w / nw, plot_rect.h / nh)
    w, h = nw * s, nh * s
    return Rect(plot_rect.x + (plot_rect.w - w) / 2, plot_rect.y + (plot_rect.h - h) / 2, w, h)


@dataclass(frozen=True)
class LayerGeometry:
    rect: Rect
    # resolved anchor point and its fractional position inside rect
    ax: float
    ay: float
    frac_x: float
    frac_y: float
    base_w: float
    base_h: float


def draw_rect(layer: BackgroundLayer, base: Rect) -> LayerGeometry:
    xf = layer.transform
    dw = base.w * clamp_scale(xf.scale_x)
    dh = base.h * clamp_scale(xf.scale_y)
    anchor = layer.anchor
    if isinstance(anchor, CustomAnchor):
        # offset stays additive so a drag after picking still moves the image
        ax, ay = anchor.ax + xf.offset_x, anchor.ay + xf.offset_y
        fx, fy = anchor.frac_x, anchor.frac_y
    else:
        cx, cy = base.center
        ax, ay = cx + xf.offset_x, cy + xf.offset_y
        fx = fy = 0.5
    rect = Rect(ax - fx * dw, ay - fy * dh, dw, dh)
    return LayerGeometry(rect=rect, ax=ax, ay=ay, frac_x=fx, frac_y=fy, base_w=base.w, base_h=base.h)


def layer_geometry(layer: BackgroundLayer, plot_rect: Rect, keep_aspect: bool) -> LayerGeometry:
    return draw_rect(layer, base_rect(layer.natural_size, plot_rect, keep_aspect))


# ---------- handles ----------

def handle_positions(rect: Rect) -> List[Tuple[Handle, float, float]]:
    return [
        ("right", rect.right, rect.y + rect.h / 2),
        ("left", rect.x, rect.y + rect.h / 2),
        ("top", rect.x + rect.w / 2, rect.y),
        ("bottom", rect.x + rect.w / 2, rect.bottom),
        ("uniform", rect.right, rect.bottom),
    ]


def pick_handle(rect: Rect, px: float, py: float, hit: float = HANDLE_HIT_PX) -> Optional[Handle]:
    # edge handles win over the corner when hit boxes overlap on small images
    for name, hx, hy in handle_positions(rect):
        if abs(px - hx) <= hit and abs(py - hy) <= hit:
            return name
    return None


# ---------- resize ----------

@dataclass(frozen=True)
class ResizeStart:
    handle: Handle
    ax: float
    ay: float
    frac_x: float
    frac_y: float
    base_w: float
    base_h: float
    # draw size when the gesture started
    draw_w: float
    draw_h: float
    keep_aspect: bool
    transform: BackgroundTransform


def begin_resize(geometry: LayerGeometry, handle: Handle, transform: BackgroundTransform, keep_aspect: bool) -> ResizeStart:
    return ResizeStart(
        handle=handle,
        ax=geometry.ax,
        ay=geometry.ay,
        frac_x=geometry.frac_x,
        frac_y=geometry.frac_y,
        base_w=geometry.base_w,
        base_h=geometry.base_h,
        draw_w=geometry.rect.w,
        draw_h=geometry.rect.h,
        keep_aspect=keep_aspect,
        transform=transform,
    )


def _span_x(px: float, st: ResizeStart) -> float:
    if px >= st.ax:
        return (px - st.ax) / _safe(1 - st.frac_x)
    return (st.ax - px) / _safe(st.frac_x)


def _span_y(py: float, st: ResizeStart) -> float:
    if py >= st.ay:
        return (py - st.ay) / _safe(1 - st.frac_y)
    return (st.ay - py) / _safe(st.frac_y)


def apply_resize(handle: Handle, pointer: Tuple[float, float], start: ResizeStart) -> BackgroundTransform:
    """
    New scale for a handle drag. The anchor point stays fixed and the dragged
    edge follows the pointer; the opposite edge moves only when the anchor
    is not on it.
    """
    px, py = pointer
    dw, dh = start.draw_w, start.draw_h
    if handle == "right":
        dw = (px - start.ax) / _safe(1 - start.frac_x)
    elif handle == "left":
        dw = (start.ax - px) / _safe(start.frac_x)
    elif handle == "bottom":
        dh = (py - start.ay) / _safe(1 - start.frac_y)
    elif handle == "top":
        dh = (start.ay - py) / _safe(start.frac_y)
    elif handle == "uniform":
        span_w = _span_x(px, start)
        span_h = _span_y(py, start)
        if start.keep_aspect:
            s = max(span_w / start.base_w, span_h / start.base_h)
            s = clamp_scale(s)
            return replace(start.transform, scale_x=s, scale_y=s)
        dw, dh = span_w, span_h
    else:
        raise ValueError(f"Unknown resize handle: {handle!r}")

    return replace(
        start.transform,
        scale_x=clamp_scale(dw / start.base_w),
        scale_y=clamp_scale(dh / start.base_h),
    )


# ---------- drag / zoom / nudge ----------

def apply_drag(pointer_delta: Tuple[float, float], start_offset: Tuple[float, float]) -> Tuple[float, float]:
    return (start_offset[0] + pointer_delta[0], start_offset[1] + pointer_delta[1])


def apply_wheel_zoom(direction: int, current_scale: Tuple[float, float], keep_aspect: bool = False) -> Tuple[float, float]:
    """direction > 0 zooms in, anything else zooms out."""
    k = WHEEL_ZOOM_IN if direction > 0 else WHEEL_ZOOM_OUT
    sx = clamp_scale(current_scale[0] * k)
    sy = clamp_scale(current_scale[1] * k)
    if keep_aspect:
        sy = sx
    return (sx, sy)


def nudge_delta(direction: Direction, large: bool = False) -> Tuple[float, float]:
    step = NUDGE_STEP_LARGE_PX if large else NUDGE_STEP_PX
    if direction == "left":
        return (-step, 0)
    if direction == "right":
        return (step, 0)
    if direction == "up":
        return (0, -step)
    if direction == "down":
        return (0, step)
    raise ValueError(f"Unknown direction: {direction!r}")


def nudge_offset(offset: Tuple[float, float], direction: Direction, large: bool = False) -> Tuple[float, float]:
    return apply_drag(nudge_delta(direction, large), offset)


def pick_custom_anchor(rect: Rect, transform: BackgroundTransform, px: float, py: float) -> CustomAnchor:
    # clamped onto the image: ax/ay and the fractions name the same pixel
    px = max(rect.x, min(rect.right, px))
    py = max(rect.y, min(rect.bottom, py))
    fx = (px - rect.x) / rect.w if rect.w else 0.5
    fy = (py - rect.y) / rect.h if rect.h else 0.5
    return CustomAnchor(
        ax=px - transform.offset_x,
        ay=py - transform.offset_y,
        frac_x=fx,
        frac_y=fy,
    )
