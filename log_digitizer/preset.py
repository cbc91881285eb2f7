"""
Flat, pure-data snapshots of a Document.

The payload mirrors the Document: axes, series, background transforms and
anchors, guides and the keep-aspect switch. Bitmaps never go in; image
sources travel next to the snapshot in an optional "images" list that the
I/O layer resolves.

Reading is lenient about values (missing or non-finite numbers fall back to
defaults) and strict about structure: a payload whose sections have the wrong
container type is rejected as a whole with MalformedPresetError.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .anchor import clamp_scale
from .calibration import AxisConfig, AxisScale
from .config import (
    BACKGROUND_SLOTS,
    DEFAULT_OPACITY,
    DEFAULT_SERIES,
    DEFAULT_X_LOG,
    DEFAULT_X_MAX,
    DEFAULT_X_MIN,
    DEFAULT_Y_LOG,
    DEFAULT_Y_MAX,
    DEFAULT_Y_MIN,
    PRESET_VERSION,
    SHARE_FRAGMENT_PREFIX,
)
from .data_model import (
    Axes,
    BackgroundLayer,
    BackgroundTransform,
    CenterAnchor,
    CustomAnchor,
    Document,
    GuideAxis,
    GuideLine,
    Guides,
    Point,
    Series,
)
from .document import default_document
from .number_utils import coerce_float

logger = logging.getLogger(__name__)

ImageSources = List[Optional[str]]


class MalformedPresetError(ValueError):
    pass


# ---------- Document -> dict ----------

def _layer_to_dict(layer: BackgroundLayer) -> Dict[str, Any]:
    xf = layer.transform
    if isinstance(layer.anchor, CustomAnchor):
        a = layer.anchor
        anchor: Dict[str, Any] = {"mode": "custom", "ax": a.ax, "ay": a.ay, "fx": a.frac_x, "fy": a.frac_y}
    else:
        anchor = {"mode": "center"}
    return {
        "naturalSize": {"w": layer.natural_size[0], "h": layer.natural_size[1]},
        "transform": {"sx": xf.scale_x, "sy": xf.scale_y, "offX": xf.offset_x, "offY": xf.offset_y},
        "anchor": anchor,
        "opacity": layer.opacity,
        "visible": layer.visible,
    }


def snapshot_to_dict(doc: Document) -> Dict[str, Any]:
    ax, ay = doc.axes.x, doc.axes.y
    return {
        "v": PRESET_VERSION,
        "axes": {
            "xMin": ax.min, "xMax": ax.max, "xLog": ax.is_log,
            "yMin": ay.min, "yMax": ay.max, "yLog": ay.is_log,
        },
        "series": [
            {"id": s.id, "name": s.name, "color": s.color,
             "points": [{"x": p.x, "y": p.y} for p in s.points]}
            for s in doc.series
        ],
        "backgrounds": [None if layer is None else _layer_to_dict(layer) for layer in doc.backgrounds],
        "guides": {
            "x": [{"value": g.value, "label": g.source_label} for g in doc.guides.x],
            "y": [{"value": g.value, "label": g.source_label} for g in doc.guides.y],
        },
        "keepAspect": doc.keep_aspect,
    }


# ---------- dict -> Document ----------

def _section(data: Dict[str, Any], key: str, kind: type) -> Any:
    v = data.get(key)
    if v is not None and not isinstance(v, kind):
        raise MalformedPresetError(f"'{key}' must be a {kind.__name__}, got {type(v).__name__}")
    return v


def _axes_from(raw: Optional[Dict[str, Any]]) -> Axes:
    raw = raw or {}

    def scale(key: str, default: bool) -> AxisScale:
        return AxisScale.LOG10 if bool(raw.get(key, default)) else AxisScale.LINEAR

    return Axes(
        x=AxisConfig(coerce_float(raw.get("xMin"), DEFAULT_X_MIN), coerce_float(raw.get("xMax"), DEFAULT_X_MAX),
                     scale("xLog", DEFAULT_X_LOG)),
        y=AxisConfig(coerce_float(raw.get("yMin"), DEFAULT_Y_MIN), coerce_float(raw.get("yMax"), DEFAULT_Y_MAX),
                     scale("yLog", DEFAULT_Y_LOG)),
    )


def _point_from(raw: Any) -> Optional[Point]:
    if isinstance(raw, dict):
        x, y = raw.get("x"), raw.get("y")
    elif isinstance(raw, (list, tuple)) and len(raw) == 2:
        x, y = raw
    else:
        raise MalformedPresetError(f"point must be an object or [x, y] pair, got {raw!r}")
    nan = float("nan")
    fx, fy = coerce_float(x, nan), coerce_float(y, nan)
    if fx != fx or fy != fy:
        # a point without usable coordinates has nothing to fall back to
        return None
    return Point(fx, fy)


def _series_from(raw: Optional[List[Any]]) -> Tuple[Series, ...]:
    if raw is None:
        return default_document().series
    out: List[Series] = []
    used_ids = set()
    for k, item in enumerate(raw):
        if not isinstance(item, dict):
            raise MalformedPresetError(f"series[{k}] must be an object")
        pts_raw = item.get("points", [])
        if not isinstance(pts_raw, list):
            raise MalformedPresetError(f"series[{k}].points must be a list")
        pts = tuple(p for p in (_point_from(r) for r in pts_raw) if p is not None)
        sid = item.get("id")
        if isinstance(sid, bool) or not isinstance(sid, int) or sid in used_ids:
            sid = max(used_ids, default=0) + 1
        used_ids.add(sid)
        fallback_name, fallback_color = DEFAULT_SERIES[k % len(DEFAULT_SERIES)]
        name = item.get("name")
        color = item.get("color")
        out.append(Series(
            id=sid,
            name=name if isinstance(name, str) else (fallback_name if k < len(DEFAULT_SERIES) else f"S{k + 1}"),
            color=color if isinstance(color, str) else fallback_color,
            points=pts,
        ))
    return tuple(out)


def _anchor_from(raw: Any):
    if isinstance(raw, dict) and raw.get("mode") == "custom":
        return CustomAnchor(
            ax=coerce_float(raw.get("ax"), 0.0),
            ay=coerce_float(raw.get("ay"), 0.0),
            frac_x=max(0.0, min(1.0, coerce_float(raw.get("fx"), 0.5))),
            frac_y=max(0.0, min(1.0, coerce_float(raw.get("fy"), 0.5))),
        )
    return CenterAnchor()


def _layer_from(raw: Any, slot: int) -> Optional[BackgroundLayer]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise MalformedPresetError(f"backgrounds[{slot}] must be an object or null")
    return _build_layer(raw, slot)


def _build_layer(raw: Dict[str, Any], slot: int) -> BackgroundLayer:
    size = raw.get("naturalSize") if isinstance(raw.get("naturalSize"), dict) else {}
    xf = raw.get("transform") if isinstance(raw.get("transform"), dict) else {}
    opacity = coerce_float(raw.get("opacity"), DEFAULT_OPACITY[slot])
    return BackgroundLayer(
        natural_size=(max(0.0, coerce_float(size.get("w"), 0.0)), max(0.0, coerce_float(size.get("h"), 0.0))),
        transform=BackgroundTransform(
            scale_x=clamp_scale(coerce_float(xf.get("sx"), 1.0)),
            scale_y=clamp_scale(coerce_float(xf.get("sy"), 1.0)),
            offset_x=coerce_float(xf.get("offX"), 0.0),
            offset_y=coerce_float(xf.get("offY"), 0.0),
        ),
        anchor=_anchor_from(raw.get("anchor")),
        opacity=max(0.0, min(1.0, opacity)),
        visible=bool(raw.get("visible", True)),
    )


def _backgrounds_from(raw: Optional[List[Any]]) -> Tuple[Optional[BackgroundLayer], ...]:
    raw = list(raw or [])
    if len(raw) > BACKGROUND_SLOTS:
        raise MalformedPresetError(f"at most {BACKGROUND_SLOTS} backgrounds are supported")
    raw += [None] * (BACKGROUND_SLOTS - len(raw))
    return tuple(_layer_from(item, slot) for slot, item in enumerate(raw))


def _legacy_backgrounds(bg: Dict[str, Any]) -> Tuple[Optional[BackgroundLayer], ...]:
    """Older presets kept per-slot lists under "bg" and anchors without offset removal."""
    def at(key: str, slot: int) -> Any:
        v = bg.get(key)
        return v[slot] if isinstance(v, list) and slot < len(v) else None

    custom = bg.get("anchorMode") == "custom"
    layers: List[Optional[BackgroundLayer]] = []
    for slot in range(BACKGROUND_SLOTS):
        xf = at("xform", slot)
        if not isinstance(xf, dict):
            layers.append(None)
            continue
        layer = _build_layer({"transform": xf}, slot)
        ca = at("customAnchors", slot)
        if custom and isinstance(ca, dict):
            t = layer.transform
            layer = replace(layer, anchor=_anchor_from({
                "mode": "custom",
                "ax": coerce_float(ca.get("ax"), 0.0) - t.offset_x,
                "ay": coerce_float(ca.get("ay"), 0.0) - t.offset_y,
                "fx": ca.get("fx"), "fy": ca.get("fy"),
            }))
        show = at("showAB", slot)
        opacity = at("opacityAB", slot)
        layer = replace(
            layer,
            visible=bool(show) if show is not None else True,
            opacity=max(0.0, min(1.0, coerce_float(opacity, DEFAULT_OPACITY[slot]))),
        )
        layers.append(layer)
    return tuple(layers)


def _guides_from(raw: Optional[Dict[str, Any]]) -> Guides:
    raw = raw or {}
    out: Dict[str, Tuple[GuideLine, ...]] = {}
    for key in ("x", "y"):
        items = raw.get(key) or []
        if not isinstance(items, list):
            raise MalformedPresetError(f"guides.{key} must be a list")
        guides: List[GuideLine] = []
        for item in items:
            if isinstance(item, dict):
                label = item.get("label")
                value = coerce_float(item.get("value"), coerce_float(label, float("nan")))
                if label is None:
                    label = repr(value)
                elif not isinstance(label, str):
                    label = str(label)
            else:
                label = str(item)
                value = coerce_float(item, float("nan"))
            if value != value or any(g.value == value for g in guides):
                continue
            guides.append(GuideLine(axis=GuideAxis(key), value=value, source_label=label))
        out[key] = tuple(guides)
    return Guides(x=out["x"], y=out["y"])


def document_from_dict(data: Any) -> Document:
    if not isinstance(data, dict):
        raise MalformedPresetError(f"preset must be a JSON object, got {type(data).__name__}")
    axes = _section(data, "axes", dict)
    series = _section(data, "series", list)
    backgrounds = _section(data, "backgrounds", list)
    guides = _section(data, "guides", dict)
    bg = _section(data, "bg", dict)

    if backgrounds is None and bg is not None:
        layers = _legacy_backgrounds(bg)
        keep_aspect = bool(bg.get("keepAspect", False))
    else:
        layers = _backgrounds_from(backgrounds)
        keep_aspect = bool(data.get("keepAspect", False))

    return Document(
        axes=_axes_from(axes),
        series=_series_from(series),
        backgrounds=layers,
        guides=_guides_from(guides),
        keep_aspect=keep_aspect,
    )


def image_sources_from(data: Any) -> ImageSources:
    images = data.get("images") if isinstance(data, dict) else None
    if not isinstance(images, list):
        return [None] * BACKGROUND_SLOTS
    out = [src if isinstance(src, str) and src else None for src in images[:BACKGROUND_SLOTS]]
    return out + [None] * (BACKGROUND_SLOTS - len(out))


# ---------- text / files / share fragments ----------

def dumps(doc: Document, images: Optional[Sequence[Optional[str]]] = None, indent: Optional[int] = 2) -> str:
    payload = snapshot_to_dict(doc)
    if images is not None:
        payload["images"] = list(images)
    return json.dumps(payload, indent=indent, ensure_ascii=False)


def loads(text: str) -> Tuple[Document, ImageSources]:
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedPresetError(f"preset is not valid JSON: {e}") from e
    doc = document_from_dict(data)
    logger.debug("preset parsed: %d series, %d guides", len(doc.series), len(doc.guides.x) + len(doc.guides.y))
    return doc, image_sources_from(data)


def save_preset(path: Union[str, Path], doc: Document, images: Optional[Sequence[Optional[str]]] = None) -> None:
    Path(path).write_text(dumps(doc, images), encoding="utf-8")


def load_preset(path: Union[str, Path]) -> Tuple[Document, ImageSources]:
    return loads(Path(path).read_text(encoding="utf-8"))


def encode_share_fragment(doc: Document) -> str:
    raw = dumps(doc, indent=None).encode("utf-8")
    return SHARE_FRAGMENT_PREFIX + base64.b64encode(raw).decode("ascii")


def decode_share_fragment(fragment: str) -> Document:
    """Accepts "#s=...", "s=..." or a full URL carrying the fragment."""
    text = (fragment or "").strip()
    marker = SHARE_FRAGMENT_PREFIX
    if marker in text:
        text = text.split(marker, 1)[1]
    elif text.startswith(marker[1:]):
        text = text[len(marker) - 1:]
    try:
        raw = base64.b64decode(text, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise MalformedPresetError("share fragment is not valid base64 JSON") from e
    doc, _ = loads(raw)
    return doc
