"""
Tests for guide lines and the guide/series intersection table.
"""
import pytest

from log_digitizer import document as ops
from log_digitizer.data_model import GuideAxis, Point
from log_digitizer.guides import guide_rows, parse_guide


def _doc_with(points_a, points_b=()):
    d = ops.default_document()
    for p in points_a:
        d = ops.add_point(d, 0, Point(*p))
    for p in points_b:
        d = ops.add_point(d, 1, Point(*p))
    return d


class TestParseGuide:

    def test_keeps_typed_label(self):
        g = parse_guide("x", " 1,000 ")
        assert g.axis == GuideAxis.X
        assert g.value == 1000.0
        assert g.source_label == "1,000"

    def test_power_of_ten(self):
        assert parse_guide(GuideAxis.Y, "10^-3").value == pytest.approx(1e-3)

    @pytest.mark.parametrize("text", ["", "abc", "1e999"])
    def test_rejects_non_numbers(self, text):
        assert parse_guide("x", text) is None


class TestGuideRows:

    def test_log_log_identity_line(self):
        d = _doc_with([(10, 10), (1000, 1000)])
        d = ops.add_guide(d, parse_guide("x", "100"))
        d = ops.add_guide(d, parse_guide("x", "5"))
        rows = guide_rows(d)
        assert [r.guide.value for r in rows] == [100.0, 5.0]
        name, value = rows[0].values[0]
        assert name == "A"
        assert value == pytest.approx(100.0)
        assert rows[1].values[0] == ("A", None)

    def test_series_without_points(self):
        d = _doc_with([(10, 10), (1000, 1000)])
        d = ops.add_guide(d, parse_guide("x", "100"))
        assert guide_rows(d)[0].values[1] == ("B", None)

    def test_y_guides_read_x(self):
        d = _doc_with([(10, 10), (1000, 1000)])
        d = ops.add_guide(d, parse_guide("y", "100"))
        row = guide_rows(d)[0]
        assert row.guide.axis == GuideAxis.Y
        assert row.values[0][1] == pytest.approx(100.0)

    def test_points_sorted_before_lookup(self):
        # clicked out of order; read along increasing x, x=100 is the middle point
        d = _doc_with([(1000, 1000), (10, 10), (100, 50)])
        d = ops.add_guide(d, parse_guide("x", "100"))
        assert guide_rows(d)[0].values[0][1] == pytest.approx(50.0)

    def test_x_guides_listed_before_y_guides(self):
        d = _doc_with([(10, 10), (1000, 1000)])
        d = ops.add_guide(d, parse_guide("y", "20"))
        d = ops.add_guide(d, parse_guide("x", "20"))
        assert [r.guide.axis for r in guide_rows(d)] == [GuideAxis.X, GuideAxis.Y]

    def test_no_guides(self, doc):
        assert guide_rows(doc) == []
