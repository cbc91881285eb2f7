"""
Pure Document -> Document edits.

Each function returns a new Document and leaves its input untouched, so the
result can be handed straight to HistoryStore.commit, e.g.

    history.commit(lambda d: add_point(d, 0, Point(100.0, 5.0)), "Add point")
"""
from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional, Sequence, Tuple

from .anchor import clamp_scale
from .calibration import AxisConfig, AxisScale
from .config import BACKGROUND_SLOTS, DEFAULT_OPACITY, DEFAULT_SERIES
from .data_model import (
    Anchor,
    Axes,
    BackgroundLayer,
    BackgroundTransform,
    CenterAnchor,
    Document,
    GuideAxis,
    GuideLine,
    Guides,
    Point,
    Series,
    default_axes,
)
from .image_utils import DecodedImage


def default_document() -> Document:
    series = tuple(
        Series(id=k + 1, name=name, color=color)
        for k, (name, color) in enumerate(DEFAULT_SERIES)
    )
    return Document(axes=default_axes(), series=series)


# ---------- axes ----------

def set_axis(doc: Document, axis: str, *, min: Optional[float] = None, max: Optional[float] = None,
             scale: Optional[AxisScale] = None) -> Document:
    if axis not in ("x", "y"):
        raise ValueError(f"axis must be 'x' or 'y', got {axis!r}")
    cur: AxisConfig = getattr(doc.axes, axis)
    new = AxisConfig(
        min=cur.min if min is None else float(min),
        max=cur.max if max is None else float(max),
        scale=cur.scale if scale is None else AxisScale(scale),
    )
    return replace(doc, axes=replace(doc.axes, **{axis: new}))


def set_axes(doc: Document, axes: Axes) -> Document:
    return replace(doc, axes=axes)


def reset_axes(doc: Document) -> Document:
    return replace(doc, axes=default_axes())


# ---------- series ----------

def _check_index(doc: Document, index: int) -> None:
    if not 0 <= index < len(doc.series):
        raise IndexError(f"series index {index} out of range")


def _replace_series(doc: Document, index: int, s: Series) -> Document:
    _check_index(doc, index)
    items = list(doc.series)
    items[index] = s
    return replace(doc, series=tuple(items))


def add_point(doc: Document, index: int, point: Point, position: Optional[int] = None) -> Document:
    _check_index(doc, index)
    s = doc.series[index]
    pts = list(s.points)
    if position is None:
        pts.append(point)
    else:
        pts.insert(position, point)
    return _replace_series(doc, index, replace(s, points=tuple(pts)))


def move_point(doc: Document, index: int, point_index: int, point: Point) -> Document:
    _check_index(doc, index)
    s = doc.series[index]
    pts = list(s.points)
    pts[point_index] = point
    return _replace_series(doc, index, replace(s, points=tuple(pts)))


def remove_last_point(doc: Document, index: int) -> Document:
    _check_index(doc, index)
    s = doc.series[index]
    return _replace_series(doc, index, replace(s, points=s.points[:-1]))


def clear_series(doc: Document, index: int) -> Document:
    _check_index(doc, index)
    return _replace_series(doc, index, replace(doc.series[index], points=()))


def add_series(doc: Document, name: str, color: str, points: Iterable[Point] = ()) -> Document:
    s = Series(id=doc.next_series_id(), name=name, color=color, points=tuple(points))
    return replace(doc, series=doc.series + (s,))


def rename_series(doc: Document, index: int, name: str) -> Document:
    _check_index(doc, index)
    return _replace_series(doc, index, replace(doc.series[index], name=name))


def remove_series(doc: Document, index: int) -> Document:
    _check_index(doc, index)
    return replace(doc, series=doc.series[:index] + doc.series[index + 1:])


# ---------- guides ----------

def add_guide(doc: Document, guide: GuideLine) -> Document:
    existing = doc.guides.for_axis(guide.axis)
    if any(g.value == guide.value for g in existing):
        return doc
    return _set_guides(doc, guide.axis, existing + (guide,))


def remove_guide(doc: Document, axis: GuideAxis, value: float) -> Document:
    existing = doc.guides.for_axis(axis)
    return _set_guides(doc, axis, tuple(g for g in existing if g.value != value))


def clear_guides(doc: Document) -> Document:
    return replace(doc, guides=Guides())


def _set_guides(doc: Document, axis: GuideAxis, items: Tuple[GuideLine, ...]) -> Document:
    if axis == GuideAxis.X:
        return replace(doc, guides=replace(doc.guides, x=items))
    return replace(doc, guides=replace(doc.guides, y=items))


# ---------- backgrounds ----------

def _check_slot(slot: int) -> None:
    if not 0 <= slot < BACKGROUND_SLOTS:
        raise IndexError(f"background slot {slot} out of range")


def _set_layer(doc: Document, slot: int, layer: Optional[BackgroundLayer]) -> Document:
    _check_slot(slot)
    items = list(doc.backgrounds)
    items[slot] = layer
    return replace(doc, backgrounds=tuple(items))


def _require_layer(doc: Document, slot: int) -> BackgroundLayer:
    _check_slot(slot)
    layer = doc.backgrounds[slot]
    if layer is None:
        raise ValueError(f"background slot {slot} is empty")
    return layer


def set_background(doc: Document, slot: int, image: DecodedImage) -> Document:
    """A freshly loaded image starts from the identity transform."""
    _check_slot(slot)
    old = doc.backgrounds[slot]
    layer = BackgroundLayer(
        natural_size=(float(image.width), float(image.height)),
        opacity=old.opacity if old is not None else DEFAULT_OPACITY[slot],
        visible=old.visible if old is not None else True,
        image=image.bitmap,
    )
    return _set_layer(doc, slot, layer)


def attach_bitmap(doc: Document, slot: int, image: DecodedImage) -> Document:
    """Re-attach a decoded image to a layer restored from a preset, keeping its transform."""
    _check_slot(slot)
    old = doc.backgrounds[slot]
    if old is None:
        return set_background(doc, slot, image)
    return _set_layer(doc, slot, replace(
        old,
        natural_size=(float(image.width), float(image.height)),
        image=image.bitmap,
    ))


def clear_background(doc: Document, slot: int) -> Document:
    return _set_layer(doc, slot, None)


def set_background_transform(doc: Document, slot: int, transform: BackgroundTransform) -> Document:
    layer = _require_layer(doc, slot)
    transform = replace(
        transform,
        scale_x=clamp_scale(transform.scale_x),
        scale_y=clamp_scale(transform.scale_y),
    )
    return _set_layer(doc, slot, replace(layer, transform=transform))


def set_background_offset(doc: Document, slot: int, offset: Tuple[float, float]) -> Document:
    layer = _require_layer(doc, slot)
    xf = replace(layer.transform, offset_x=float(offset[0]), offset_y=float(offset[1]))
    return _set_layer(doc, slot, replace(layer, transform=xf))


def set_background_scale(doc: Document, slot: int, scale: Tuple[float, float]) -> Document:
    layer = _require_layer(doc, slot)
    xf = replace(layer.transform, scale_x=clamp_scale(scale[0]), scale_y=clamp_scale(scale[1]))
    return _set_layer(doc, slot, replace(layer, transform=xf))


def set_background_anchor(doc: Document, slot: int, anchor: Anchor) -> Document:
    layer = _require_layer(doc, slot)
    return _set_layer(doc, slot, replace(layer, anchor=anchor))


def clear_background_anchor(doc: Document, slot: int) -> Document:
    return set_background_anchor(doc, slot, CenterAnchor())


def set_background_opacity(doc: Document, slot: int, opacity: float) -> Document:
    layer = _require_layer(doc, slot)
    return _set_layer(doc, slot, replace(layer, opacity=max(0.0, min(1.0, float(opacity)))))


def set_background_visible(doc: Document, slot: int, visible: bool) -> Document:
    layer = _require_layer(doc, slot)
    return _set_layer(doc, slot, replace(layer, visible=bool(visible)))


def set_keep_aspect(doc: Document, keep_aspect: bool) -> Document:
    return replace(doc, keep_aspect=bool(keep_aspect))


def visible_layers(doc: Document) -> Sequence[Tuple[int, BackgroundLayer]]:
    return [
        (slot, layer) for slot, layer in enumerate(doc.backgrounds)
        if layer is not None and layer.visible and layer.opacity > 0
    ]
