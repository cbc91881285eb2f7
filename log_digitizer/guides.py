from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from .data_model import Document, GuideAxis, GuideLine
from .interpolate import sorted_points, value_at_x, value_at_y
from .number_utils import parse_number


@dataclass(frozen=True)
class GuideRow:
    guide: GuideLine
    # (series name, intersection) in document series order; None = not covered
    values: Tuple[Tuple[str, Optional[float]], ...]


def parse_guide(axis: Union[GuideAxis, str], text: str) -> Optional[GuideLine]:
    v = parse_number(text)
    if v is None:
        return None
    return GuideLine(axis=GuideAxis(axis), value=v, source_label=text.strip())


def guide_rows(doc: Document) -> List[GuideRow]:
    xs, ys = doc.axes.x.scale, doc.axes.y.scale
    ordered = [(s.name, sorted_points(s.points)) for s in doc.series]
    rows: List[GuideRow] = []
    for g in doc.guides.x:
        rows.append(GuideRow(g, tuple((name, value_at_x(pts, g.value, xs, ys)) for name, pts in ordered)))
    for g in doc.guides.y:
        rows.append(GuideRow(g, tuple((name, value_at_y(pts, g.value, xs, ys)) for name, pts in ordered)))
    return rows
