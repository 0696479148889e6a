"""Tests for post-ride analytics triggers."""

import pytest

from ride_analytics.analytics.pdc import PdcPoint, PowerDurationCurve
from ride_analytics.analytics.triggers import AnalyticsTriggers


def make_curve():
    """3, 5, 10 and 20 minute bests."""
    return PowerDurationCurve.from_points(
        [PdcPoint(180, 320), PdcPoint(300, 290), PdcPoint(600, 270), PdcPoint(1200, 250)]
    )


@pytest.fixture
def triggers():
    return AnalyticsTriggers(weight_kg=75.0)


class TestUpdatePdcFromRide:
    """Tests for extracting new bests from a ride."""

    def test_first_ride_sets_bests(self, triggers):
        """Test every duration is new on an empty curve."""
        updated = triggers.update_pdc_from_ride([200] * 600, PowerDurationCurve())

        five_min = next(p for p in updated if p.duration_secs == 300)
        assert five_min.power_watts == 200
        assert max(p.duration_secs for p in updated) == 600

    def test_lower_power_is_not_a_best(self, triggers):
        """Test efforts below the curve are ignored."""
        existing = PowerDurationCurve.from_points([PdcPoint(300, 250)])

        updated = triggers.update_pdc_from_ride([200] * 600, existing)

        assert all(p.duration_secs != 300 for p in updated)

    def test_empty_ride(self, triggers):
        """Test a ride without samples changes nothing."""
        assert triggers.update_pdc_from_ride([], make_curve()) == []


class TestMaybeRecalculateCp:
    """Tests for the CP refit trigger."""

    def test_refits_on_window_improvement(self, triggers):
        """Test a new 10 minute best refits CP."""
        model = triggers.maybe_recalculate_cp([PdcPoint(600, 275)], make_curve())

        assert model is not None
        assert model.cp > 0
        assert model.w_prime > 0

    def test_short_improvement_skips_refit(self, triggers):
        """Test a new 1 minute best leaves CP alone."""
        assert triggers.maybe_recalculate_cp([PdcPoint(60, 500)], make_curve()) is None

    def test_insufficient_curve_skips_refit(self, triggers):
        """Test fewer than three window efforts skips the fit."""
        pdc = PowerDurationCurve.from_points([PdcPoint(300, 290), PdcPoint(600, 270)])

        assert triggers.maybe_recalculate_cp([PdcPoint(600, 270)], pdc) is None

    def test_failed_fit_returns_none(self, triggers):
        """Test a non-physical curve does not raise."""
        pdc = PowerDurationCurve.from_points(
            [PdcPoint(180, 250), PdcPoint(720, 260), PdcPoint(1200, 270)]
        )

        assert triggers.maybe_recalculate_cp([PdcPoint(720, 260)], pdc) is None


class TestMaybeRecalculateVo2max:
    """Tests for the VO2max trigger."""

    def test_five_minute_improvement(self):
        """Test a new 5 minute best recomputes VO2max."""
        triggers = AnalyticsTriggers(weight_kg=70.0)
        pdc = PowerDurationCurve.from_points([PdcPoint(300, 350)])

        result = triggers.maybe_recalculate_vo2max([PdcPoint(300, 350)], pdc)

        assert result.vo2max == pytest.approx(61.0)

    def test_other_improvement(self, triggers):
        """Test bests at other durations do not touch VO2max."""
        assert triggers.maybe_recalculate_vo2max([PdcPoint(600, 275)], make_curve()) is None


class TestRunAllTriggers:
    """Tests for the full post-ride pipeline."""

    def test_new_five_minute_best(self, triggers):
        """Test a 5 minute effort updates the curve, CP and VO2max."""
        existing = make_curve()

        result = triggers.run_all_triggers([300] * 300, existing)

        assert result.pdc_updated == [PdcPoint(300, 300)]
        assert result.pdc.power_at(300) == 300
        assert existing.power_at(300) == 290
        assert result.cp_recalculated
        assert result.new_cp_model.cp > 0
        assert result.vo2max_recalculated
        assert result.new_vo2max.vo2max == pytest.approx(50.2)

    def test_sprint_only_ride(self, triggers):
        """Test short bests update the curve without refitting models."""
        result = triggers.run_all_triggers([500] * 60, make_curve())

        assert result.pdc_updated
        assert all(p.duration_secs <= 60 for p in result.pdc_updated)
        assert result.pdc.power_at(60) == 500
        assert not result.cp_recalculated
        assert not result.vo2max_recalculated

    def test_no_new_bests(self, triggers):
        """Test an easy ride leaves everything untouched."""
        result = triggers.run_all_triggers([100] * 600, make_curve())

        assert result.pdc_updated == []
        assert result.pdc is None
        assert result.new_cp_model is None
        assert result.new_vo2max is None

    def test_to_dict(self, triggers):
        """Test serialization of a result with refreshed models."""
        data = triggers.run_all_triggers([300] * 300, make_curve()).to_dict()

        assert data["pdc_updated"] == [{"duration_secs": 300, "power_watts": 300}]
        assert data["cp_recalculated"] is True
        assert data["new_vo2max"]["method"] == "five_minute_power"
