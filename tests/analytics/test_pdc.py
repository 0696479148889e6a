"""Tests for the power duration curve and MMP extraction."""

from ride_analytics.analytics.pdc import (
    MmpCalculator,
    PdcBatchProcessor,
    PdcPoint,
    PowerDurationCurve,
    interpolate_sensor_gaps,
)


def curve(*pairs):
    return PowerDurationCurve.from_points(PdcPoint(d, p) for d, p in pairs)


class TestPowerDurationCurve:
    """Tests for PowerDurationCurve."""

    def test_points_sorted_by_duration(self):
        """Test points come back ordered by duration."""
        pdc = curve((300, 300), (5, 900), (60, 450))

        assert [p.duration_secs for p in pdc.points()] == [5, 60, 300]

    def test_duplicate_durations_keep_best(self):
        """Test that the highest power wins for a repeated duration."""
        pdc = curve((300, 300), (300, 320))

        assert pdc.points() == [PdcPoint(300, 320)]

    def test_power_at_exact(self):
        """Test exact duration lookup."""
        assert curve((60, 400), (300, 300)).power_at(60) == 400

    def test_power_at_interpolates(self):
        """Test linear interpolation between neighbours."""
        assert curve((60, 400), (300, 300)).power_at(180) == 350

    def test_power_at_clamps_to_endpoints(self):
        """Test values outside the recorded range use the nearest point."""
        pdc = curve((60, 400), (300, 300))

        assert pdc.power_at(30) == 400
        assert pdc.power_at(3600) == 300

    def test_power_at_empty(self):
        """Test an empty curve has no power."""
        assert PowerDurationCurve().power_at(60) is None
        assert PowerDurationCurve().is_empty()

    def test_power_at_actual_requires_nearby_effort(self):
        """Test the tolerance check before lookup."""
        pdc = curve((1200, 280), (2600, 255))

        assert pdc.power_at_actual(2700, 300) == 255
        assert pdc.power_at_actual(3600, 300) is None

    def test_update_returns_improvements(self):
        """Test merging reports only new or improved bests."""
        pdc = curve((60, 400), (300, 300))

        changed = pdc.update([PdcPoint(60, 390), PdcPoint(300, 310), PdcPoint(600, 280)])

        assert changed == [PdcPoint(300, 310), PdcPoint(600, 280)]
        assert pdc.power_at(60) == 400
        assert len(pdc) == 3

    def test_sufficient_data_for_cp(self):
        """Test three efforts between 2 and 20 minutes are needed."""
        assert not curve((60, 400), (180, 360), (720, 280)).has_sufficient_data_for_cp()
        assert curve((180, 360), (720, 280), (1200, 267)).has_sufficient_data_for_cp()

    def test_serialization(self):
        """Test to_dict/from_dict keep the points."""
        pdc = curve((5, 900), (60, 450))

        assert PowerDurationCurve.from_dict(pdc.to_dict()).points() == pdc.points()


class TestMonotonicity:
    """The curve trusts upstream data and only reports monotonicity."""

    def test_monotonic_curve(self):
        """Test a well-formed curve reports monotonic."""
        assert curve((5, 900), (60, 450), (300, 320)).is_monotonic()

    def test_non_monotonic_curve_is_kept_as_is(self):
        """Test that rising power is neither rejected nor corrected."""
        pdc = curve((60, 300), (300, 320))

        assert not pdc.is_monotonic()
        assert pdc.power_at(300) == 320
        assert pdc.power_at(60) == 300


class TestInterpolateSensorGaps:
    """Tests for interpolate_sensor_gaps."""

    def test_fills_short_gap(self):
        """Test zero dropouts between equal values are filled."""
        assert interpolate_sensor_gaps([200, 0, 0, 200]) == [200, 200, 200, 200]

    def test_linear_fill(self):
        """Test the fill ramps between neighbours."""
        assert interpolate_sensor_gaps([100, 0, 200]) == [100, 150, 200]

    def test_long_gap_kept(self):
        """Test that gaps longer than 10 samples are real stops."""
        samples = [200] + [0] * 11 + [200]

        assert interpolate_sensor_gaps(samples) == samples

    def test_input_not_modified(self):
        """Test a new list is returned."""
        samples = [200, 0, 200]
        interpolate_sensor_gaps(samples)

        assert samples == [200, 0, 200]


class TestMmpCalculator:
    """Tests for MmpCalculator."""

    def test_best_averages(self):
        """Test the best window is found for each duration."""
        samples = [100] * 10 + [300] * 5 + [100] * 10
        calc = MmpCalculator([1, 5, 10])

        result = calc.calculate(samples)

        assert result == [PdcPoint(1, 300), PdcPoint(5, 300), PdcPoint(10, 200)]

    def test_skips_durations_longer_than_ride(self):
        """Test durations beyond the ride length are omitted."""
        result = MmpCalculator.standard().calculate([250] * 90)

        assert max(p.duration_secs for p in result) == 60

    def test_calculate_single(self):
        """Test single duration lookup."""
        calc = MmpCalculator.standard()

        assert calc.calculate_single([100, 200, 300], 2) == 250
        assert calc.calculate_single([100, 200, 300], 4) is None
        assert calc.calculate_single([], 1) is None

    def test_empty_ride(self):
        """Test no samples gives no points."""
        assert MmpCalculator.standard().calculate([]) == []

    def test_with_interpolation(self):
        """Test dropouts are filled before extraction."""
        result = MmpCalculator([3]).calculate_with_interpolation([300, 0, 300])

        assert result == [PdcPoint(3, 300)]


class TestPdcBatchProcessor:
    """Tests for PdcBatchProcessor."""

    def test_accumulates_rides(self):
        """Test bests are merged across rides."""
        processor = PdcBatchProcessor()

        processor.process_ride([200] * 60)
        changed = processor.process_ride([150] * 30 + [400] * 5)

        assert processor.ride_count == 2
        assert processor.pdc.power_at(5) == 400
        assert processor.pdc.power_at(60) == 200
        assert PdcPoint(5, 400) in changed
