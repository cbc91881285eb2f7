"""
Tests for I²t integration and lifetime curves.

Covers:
- Trapezoidal integration (exact for constant current)
- Datasheet time-current curve and equivalent time
- Cumulative curve shape
- Scaled lifetime curves and equivalent-cycle solve
- Parsing pasted (t, i) text
"""
import pytest

from log_digitizer.calibration import AxisScale
from log_digitizer.data_model import Point
from log_digitizer.i2t import (
    Sample,
    build,
    cumulative_curve,
    equivalent_cycles,
    equivalent_time,
    integrate,
    lifetime_family,
    parse_samples,
    samples_from_points,
    scaled_lifetime_curve,
)

# Time-current curve from a fuse datasheet, read as {t: x, i: y}
TC_POINTS = [Point(0.01, 3000.0), Point(0.10, 1500.0), Point(1.00, 600.0), Point(3.00, 350.0)]


# ══════════════════════════════════════════════════════════════════════════
# Integration
# ══════════════════════════════════════════════════════════════════════════

class TestIntegrate:

    def test_constant_current_is_exact(self):
        samples = [Sample(0.0, 5.0), Sample(0.5, 5.0), Sample(2.0, 5.0)]
        assert integrate(samples) == 50.0
        assert equivalent_time(samples, 5.0) == pytest.approx(2.0)

    def test_datasheet_curve(self):
        samples = samples_from_points(TC_POINTS)
        expected = sum(
            (a.i ** 2 + b.i ** 2) / 2 * (b.t - a.t)
            for a, b in zip(samples, samples[1:])
        )
        assert integrate(samples) == pytest.approx(expected)
        assert equivalent_time(samples, 500.0) == pytest.approx(integrate(samples) / 500.0 ** 2)

    def test_unsorted_samples_are_sorted_by_time(self):
        ordered = samples_from_points(TC_POINTS)
        shuffled = [ordered[2], ordered[0], ordered[3], ordered[1]]
        assert integrate(shuffled) == pytest.approx(integrate(ordered))

    @pytest.mark.parametrize("samples", [[], [Sample(1.0, 10.0)]])
    def test_fewer_than_two_samples(self, samples):
        assert integrate(samples) == 0.0

    def test_samples_from_points_maps_x_to_t(self):
        assert samples_from_points([Point(0.1, 20.0)]) == [Sample(t=0.1, i=20.0)]


class TestEquivalentTime:

    def test_non_positive_current(self):
        samples = [Sample(0.0, 5.0), Sample(1.0, 5.0)]
        assert equivalent_time(samples, 0.0) is None
        assert equivalent_time(samples, -2.0) is None

    @pytest.mark.parametrize("current", [float("nan"), float("inf")])
    def test_non_finite_current(self, current):
        samples = [Sample(0.0, 5.0), Sample(1.0, 5.0)]
        assert equivalent_time(samples, current) is None

    def test_no_samples(self):
        assert equivalent_time([], 10.0) is None


class TestCumulativeCurve:

    def test_empty(self):
        assert cumulative_curve([]) == []

    def test_starts_at_zero_and_ends_at_total(self):
        samples = samples_from_points(TC_POINTS)
        curve = cumulative_curve(samples)
        assert curve[0] == Point(0.01, 0.0)
        assert curve[-1].y == pytest.approx(integrate(samples))
        assert [p.x for p in curve] == [0.01, 0.10, 1.00, 3.00]

    def test_non_decreasing(self):
        curve = cumulative_curve(samples_from_points(TC_POINTS))
        assert all(a.y <= b.y for a, b in zip(curve, curve[1:]))


class TestBuild:

    def test_with_equivalent_current(self):
        samples = [Sample(0.0, 5.0), Sample(2.0, 5.0)]
        r = build(samples, 10.0)
        assert r.total == 50.0
        assert r.equivalent_time == pytest.approx(0.5)
        assert r.curve == (Point(0.0, 0.0), Point(2.0, 50.0))

    def test_without_equivalent_current(self):
        assert build([Sample(0.0, 1.0), Sample(1.0, 1.0)]).equivalent_time is None


# ══════════════════════════════════════════════════════════════════════════
# Lifetime curves
# ══════════════════════════════════════════════════════════════════════════

BASE = [Point(1.0, 100.0), Point(10.0, 10.0)]


class TestScaledLifetime:

    def test_scales_y_only(self):
        assert scaled_lifetime_curve(BASE, 1.0, 2.0) == [Point(1.0, 200.0), Point(10.0, 20.0)]

    def test_reference_x_does_not_change_scaling(self):
        assert scaled_lifetime_curve(BASE, 1.0, 3.0) == scaled_lifetime_curve(BASE, 7.0, 3.0)

    def test_family(self):
        fam = lifetime_family(BASE, 1.0, [1.0, 0.5])
        assert [f for f, _ in fam] == [1.0, 0.5]
        assert fam[1][1][0] == Point(1.0, 50.0)


class TestEquivalentCycles:

    @pytest.fixture
    def curves(self):
        # more cycles -> lower permissible level
        return [(1000.0, BASE), (100.0, scaled_lifetime_curve(BASE, 1.0, 2.0))]

    def test_interpolates_between_curves(self, curves):
        assert equivalent_cycles(150.0, curves, 1.0) == pytest.approx(550.0)

    def test_clamps_below_and_above(self, curves):
        assert equivalent_cycles(50.0, curves, 1.0) == 1000.0
        assert equivalent_cycles(300.0, curves, 1.0) == 100.0

    def test_reference_outside_every_curve(self, curves):
        assert equivalent_cycles(150.0, curves, 50.0) is None

    def test_log_axes(self, curves):
        # at x=sqrt(10) the log-log base curve reads 10^1.5
        y = equivalent_cycles(10 ** 1.5, curves, 10 ** 0.5, AxisScale.LOG10, AxisScale.LOG10)
        assert y == pytest.approx(1000.0)


# ══════════════════════════════════════════════════════════════════════════
# Text parsing
# ══════════════════════════════════════════════════════════════════════════

class TestParseSamples:

    def test_csv_with_header(self):
        assert parse_samples("t,i\n0,10\n1,20\n") == [Sample(0.0, 10.0), Sample(1.0, 20.0)]

    def test_long_header_names(self):
        assert parse_samples("time,current\n0.5,3") == [Sample(0.5, 3.0)]

    def test_header_with_units_and_swapped_columns(self):
        text = "i[A]\tt[s]\n10\t0.1\n20\t0.01\n"
        assert parse_samples(text) == [Sample(0.01, 20.0), Sample(0.1, 10.0)]

    def test_whitespace_without_header(self):
        assert parse_samples("0.01 3000\n0.1   1500\n") == [Sample(0.01, 3000.0), Sample(0.1, 1500.0)]

    def test_bad_and_negative_rows_skipped(self):
        text = "t,i\n0,10\nabc,5\n1,-3\n2\n\n3,nan\n4,40"
        assert parse_samples(text) == [Sample(0.0, 10.0), Sample(4.0, 40.0)]

    def test_result_sorted_by_time(self):
        assert [s.t for s in parse_samples("3,1\n1,1\n2,1")] == [1.0, 2.0, 3.0]

    @pytest.mark.parametrize("text", ["", "   \n\n", "t,i\n"])
    def test_nothing_usable(self, text):
        assert parse_samples(text) == []
