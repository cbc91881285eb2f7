
from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple, Union

from .data_model import Point, Series
from .guides import GuideRow


def series_to_long_rows(series: Iterable[Series]) -> List[Tuple[str, float, float]]:
    rows: List[Tuple[str, float, float]] = []
    for s in series:
        for p in s.points:
            rows.append((s.name, p.x, p.y))
    return rows

def write_long_csv(path: Union[str, Path], series: Iterable[Series], delimiter: str = ",") -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f, delimiter=delimiter)
        w.writerow(["series", "x", "y"])
        w.writerows(series_to_long_rows(series))

def long_csv_string(series: Iterable[Series], delimiter: str = ",") -> str:
    buf = io.StringIO()
    w = csv.writer(buf, delimiter=delimiter, lineterminator="\n")
    w.writerow(["series", "x", "y"])
    w.writerows(series_to_long_rows(series))
    return buf.getvalue().rstrip()

def guide_csv_string(rows: Sequence[GuideRow], delimiter: str = ",") -> str:
    """One line per guide: axis, value, then one column per series (blank = no intersection)."""
    buf = io.StringIO()
    w = csv.writer(buf, delimiter=delimiter, lineterminator="\n")
    names = [name for name, _ in rows[0].values] if rows else []
    w.writerow(["axis", "value"] + names)
    for r in rows:
        row: List[Union[str, float]] = [r.guide.axis.value, r.guide.source_label or r.guide.value]
        for _, v in r.values:
            row.append("" if v is None else v)
        w.writerow(row)
    return buf.getvalue().rstrip()

def curve_csv_string(points: Sequence[Point], x_label: str = "x", y_label: str = "y",
                     delimiter: str = ",") -> str:
    buf = io.StringIO()
    w = csv.writer(buf, delimiter=delimiter, lineterminator="\n")
    w.writerow([x_label, y_label])
    for p in points:
        w.writerow([p.x, p.y])
    return buf.getvalue().rstrip()

def write_text(path: Union[str, Path], text: str) -> None:
    Path(path).write_text(text + "\n", encoding="utf-8")
