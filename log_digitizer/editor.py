"""
Host-loop glue for the digitizing surface.

DigitizerEditor turns pointer, wheel and arrow-key events (surface pixel
coordinates) into engine calls. Gestures that span several events (image
drag, handle resize) run on a live preview Document and commit a single
history step when the pointer is released.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from . import document as ops
from .anchor import (
    Direction,
    LayerGeometry,
    apply_resize,
    apply_wheel_zoom,
    begin_resize,
    layer_geometry,
    nudge_delta,
    nudge_offset,
    pick_custom_anchor,
    pick_handle,
)
from .calibration import PlotTransform, Rect
from .config import IMAGE_HIT_PAD_PX, PLOT_HIT_PAD_PX
from .data_model import BackgroundLayer, Document, GuideAxis, GuideLine, Point
from .guides import GuideRow, guide_rows, parse_guide
from .history import HistoryStore
from .i2t import I2tResult, build, samples_from_points
from .preset import ImageSources, MalformedPresetError, decode_share_fragment, loads
from .session import Dragging, Idle, InteractionSession, PickingAnchor, Resizing

logger = logging.getLogger(__name__)


class DigitizerEditor:
    def __init__(self, plot_rect: Rect, document: Optional[Document] = None) -> None:
        self.history = HistoryStore(document if document is not None else ops.default_document())
        self.plot_rect = plot_rect
        self.session: InteractionSession = Idle()
        self.active_series = 0
        self.active_background = 0
        self.bg_edit_mode = False
        self._preview: Optional[Document] = None
        self._gesture: Optional[Tuple[Callable[[Document], Document], str]] = None
        self._warned_axes = None

    # ---------- state ----------

    @property
    def document(self) -> Document:
        """What the host should draw: the gesture preview if one is live, else the committed snapshot."""
        return self._preview if self._preview is not None else self.history.current

    def plot_transform(self) -> Optional[PlotTransform]:
        doc = self.document
        pt = PlotTransform.from_rect(doc.axes.x, doc.axes.y, self.plot_rect)
        if pt.is_valid():
            self._warned_axes = None
            return pt
        if self._warned_axes != doc.axes:
            logger.warning("Axis range is not usable (x=%s, y=%s); point input disabled", doc.axes.x, doc.axes.y)
            self._warned_axes = doc.axes
        return None

    def set_plot_rect(self, rect: Rect) -> None:
        self.plot_rect = rect

    def active_layer(self) -> Optional[BackgroundLayer]:
        return self.document.backgrounds[self.active_background]

    def active_geometry(self) -> Optional[LayerGeometry]:
        layer = self.active_layer()
        if layer is None:
            return None
        return layer_geometry(layer, self.plot_rect, self.document.keep_aspect)

    def readout(self, px: float, py: float) -> Optional[Point]:
        """Real coordinates under the pointer, or None outside the plot."""
        pt = self.plot_transform()
        if pt is None or not pt.contains(px, py):
            return None
        xy = pt.surface_to_data(px, py)
        return Point(*xy) if xy is not None else None

    def commit(self, mutator: Callable[[Document], Document], description: str = "") -> Document:
        self._discard_gesture()
        return self.history.commit(mutator, description)

    # ---------- pointer ----------

    def pointer_down(self, px: float, py: float) -> bool:
        """Returns True when the event started or completed an action."""
        session = self.session
        self._discard_gesture()

        if isinstance(session, PickingAnchor):
            layer = self.document.backgrounds[session.slot]
            if layer is None:
                self.session = Idle()
                return False
            geom = layer_geometry(layer, self.plot_rect, self.document.keep_aspect)
            if not geom.rect.contains(px, py, IMAGE_HIT_PAD_PX):
                # keep picking until the click lands on the image
                return False
            self.session = Idle()
            anchor = pick_custom_anchor(geom.rect, layer.transform, px, py)
            self.commit(lambda d: ops.set_background_anchor(d, session.slot, anchor), "Pick anchor")
            return True

        if self.bg_edit_mode:
            return self._begin_background_gesture(px, py)

        return self._place_point(px, py)

    def _begin_background_gesture(self, px: float, py: float) -> bool:
        layer = self.active_layer()
        geom = self.active_geometry()
        if layer is None or geom is None:
            return False
        slot = self.active_background
        handle = pick_handle(geom.rect, px, py)
        if handle is not None:
            start = begin_resize(geom, handle, layer.transform, self.document.keep_aspect)
            self.session = Resizing(slot=slot, start=start)
            return True
        if geom.rect.contains(px, py, IMAGE_HIT_PAD_PX):
            ox, oy = layer.transform.offset
            self.session = Dragging(slot=slot, start_x=px, start_y=py, base_off_x=ox, base_off_y=oy)
            return True
        return False

    def _place_point(self, px: float, py: float) -> bool:
        doc = self.document
        if not 0 <= self.active_series < len(doc.series):
            return False
        if not self.plot_rect.contains(px, py, PLOT_HIT_PAD_PX):
            return False
        pt = self.plot_transform()
        if pt is None:
            return False
        xy = pt.surface_to_data(px, py)
        if xy is None:
            return False
        idx = self.active_series
        self.commit(lambda d: ops.add_point(d, idx, Point(*xy)), f"Add point to {doc.series[idx].name}")
        return True

    def pointer_move(self, px: float, py: float) -> None:
        session = self.session
        if isinstance(session, Dragging):
            offset = session.offset_for(px, py)
            mutator = lambda d: ops.set_background_offset(d, session.slot, offset)
            self._set_gesture(mutator, "Move image")
        elif isinstance(session, Resizing):
            xf = apply_resize(session.start.handle, (px, py), session.start)
            mutator = lambda d: ops.set_background_transform(d, session.slot, xf)
            self._set_gesture(mutator, f"Resize image ({session.start.handle})")

    def pointer_up(self, px: Optional[float] = None, py: Optional[float] = None) -> bool:
        """Ends a drag/resize gesture; one history step if anything changed."""
        if px is not None and py is not None:
            self.pointer_move(px, py)
        if not isinstance(self.session, (Dragging, Resizing)):
            return False
        gesture, preview = self._gesture, self._preview
        self.session = Idle()
        self._discard_gesture()
        if gesture is None or preview is None or preview == self.history.current:
            return False
        mutator, description = gesture
        self.history.commit(mutator, description)
        return True

    def pointer_leave(self) -> bool:
        return self.pointer_up()

    def _set_gesture(self, mutator: Callable[[Document], Document], description: str) -> None:
        self._gesture = (mutator, description)
        self._preview = mutator(self.history.current)

    def _discard_gesture(self) -> None:
        self._gesture = None
        self._preview = None

    # ---------- wheel / keys ----------

    def wheel(self, delta_y: float) -> bool:
        """Wheel up (negative delta) zooms the active image in."""
        if not self.bg_edit_mode or delta_y == 0:
            return False
        layer = self.active_layer()
        if layer is None:
            return False
        direction = 1 if delta_y < 0 else -1
        scale = (layer.transform.scale_x, layer.transform.scale_y)
        new_scale = apply_wheel_zoom(direction, scale, self.document.keep_aspect)
        slot = self.active_background
        self.commit(lambda d: ops.set_background_scale(d, slot, new_scale), "Zoom image")
        return True

    def key_arrow(self, direction: Direction, shift: bool = False) -> bool:
        if self.bg_edit_mode:
            layer = self.active_layer()
            if layer is None:
                return False
            slot = self.active_background
            offset = nudge_offset(layer.transform.offset, direction, shift)
            self.commit(lambda d: ops.set_background_offset(d, slot, offset), "Nudge image")
            return True

        doc = self.document
        if not 0 <= self.active_series < len(doc.series):
            return False
        s = doc.series[self.active_series]
        pt = self.plot_transform()
        if not s.points or pt is None:
            return False
        last = s.points[-1]
        surf = pt.data_to_surface(last.x, last.y)
        if surf is None:
            return False
        dx, dy = nudge_delta(direction, shift)
        xy = pt.surface_to_data(surf[0] + dx, surf[1] + dy)
        if xy is None:
            return False
        idx, pos = self.active_series, len(s.points) - 1
        self.commit(lambda d: ops.move_point(d, idx, pos, Point(*xy)), f"Nudge point in {s.name}")
        return True

    def start_anchor_pick(self) -> bool:
        if self.active_layer() is None:
            return False
        self._discard_gesture()
        self.session = PickingAnchor(slot=self.active_background)
        return True

    def escape(self) -> None:
        """Cancels anchor picking or an unfinished gesture without committing."""
        self.session = Idle()
        self._discard_gesture()

    # ---------- history ----------

    def undo(self) -> Document:
        self.escape()
        return self.history.undo()

    def redo(self) -> Document:
        self.escape()
        return self.history.redo()

    def load_preset(self, text: str) -> ImageSources:
        """
        Replace the whole history with the preset. On MalformedPresetError the
        current document and history are left as they were.
        """
        try:
            doc, images = loads(text)
        except MalformedPresetError:
            logger.warning("Preset rejected; keeping the current document", exc_info=True)
            raise
        self._replace_document(doc, "Load preset")
        return images

    def load_share_fragment(self, fragment: str) -> None:
        try:
            doc = decode_share_fragment(fragment)
        except MalformedPresetError:
            logger.warning("Share link rejected; keeping the current document", exc_info=True)
            raise
        self._replace_document(doc, "Open shared link")

    def _replace_document(self, doc: Document, description: str) -> None:
        self.escape()
        self.history.overwrite(doc, description)
        self.active_series = min(self.active_series, max(0, len(doc.series) - 1))

    # ---------- guides / I²t ----------

    def add_guide(self, axis: GuideAxis, text: str) -> Optional[GuideLine]:
        guide = parse_guide(axis, text)
        if guide is None:
            return None
        self.commit(lambda d: ops.add_guide(d, guide), f"Add {guide.axis.value} guide {guide.source_label}")
        return guide

    def remove_guide(self, axis: GuideAxis, value: float) -> None:
        self.commit(lambda d: ops.remove_guide(d, axis, value), "Remove guide")

    def guide_rows(self) -> List[GuideRow]:
        return guide_rows(self.document)

    def build_i2t_series(self, index: int, equivalent_current: Optional[float] = None,
                         color: str = "#F59E0B") -> I2tResult:
        """Integrate series `index` as (t, i) samples and add the cumulative curve as a new series."""
        src = self.document.series[index]
        result = build(samples_from_points(src.points), equivalent_current)
        self.commit(lambda d: ops.add_series(d, f"{src.name} I²t", color, result.curve), f"I²t of {src.name}")
        return result
