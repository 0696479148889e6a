"""Tests for Critical Power fitting."""

import pytest

from ride_analytics.analytics.critical_power import CpFitter, CpModel
from ride_analytics.analytics.pdc import PdcPoint, PowerDurationCurve
from ride_analytics.config import Settings
from ride_analytics.exceptions import (
    FittingFailedError,
    InsufficientDataError,
    InvalidDurationRangeError,
)


class TestCpFitter:
    """Tests for CpFitter."""

    def test_fit_realistic_efforts(self):
        """Test fitting 3, 12 and 20 minute efforts."""
        pdc = PowerDurationCurve.from_points(
            [PdcPoint(180, 361), PdcPoint(720, 278), PdcPoint(1200, 267)]
        )

        model = CpFitter().fit(pdc)

        assert 245 <= model.cp <= 255
        assert 19000 <= model.w_prime <= 21000
        assert model.r_squared > 0.95

    def test_points_outside_window_ignored(self):
        """Test sprint and long efforts do not change the fit."""
        base = [PdcPoint(180, 361), PdcPoint(720, 278), PdcPoint(1200, 267)]
        extra = base + [PdcPoint(5, 1100), PdcPoint(3600, 230)]

        fitter = CpFitter()

        assert fitter.fit(PowerDurationCurve.from_points(extra)) == fitter.fit(
            PowerDurationCurve.from_points(base)
        )

    def test_too_few_points(self):
        """Test fewer than three points is insufficient."""
        pdc = PowerDurationCurve.from_points([PdcPoint(180, 361), PdcPoint(720, 278)])

        with pytest.raises(InsufficientDataError) as exc_info:
            CpFitter().fit(pdc)

        assert exc_info.value.count == 2
        assert exc_info.value.required == 3

    def test_no_points_in_window(self):
        """Test a curve without 2-20 minute efforts."""
        pdc = PowerDurationCurve.from_points(
            [PdcPoint(5, 1000), PdcPoint(60, 500), PdcPoint(3600, 220)]
        )

        with pytest.raises(InvalidDurationRangeError):
            CpFitter().fit(pdc)

    def test_two_points_in_window(self):
        """Test three points overall but only two inside the window is insufficient."""
        pdc = PowerDurationCurve.from_points(
            [PdcPoint(5, 1100), PdcPoint(300, 330), PdcPoint(1200, 270)]
        )

        assert not pdc.has_sufficient_data_for_cp()
        with pytest.raises(InsufficientDataError) as exc_info:
            CpFitter().fit(pdc)

        assert exc_info.value.count == 2
        assert exc_info.value.required == 3

    def test_single_duration_is_singular(self):
        """Test a regression with one distinct duration fails."""
        with pytest.raises(FittingFailedError):
            CpFitter().fit_points([(300, 300), (300, 310), (300, 320)])

    def test_non_physical_fit(self):
        """Test power rising with duration gives negative W'."""
        with pytest.raises(FittingFailedError) as exc_info:
            CpFitter().fit_points([(180, 250), (720, 260), (1200, 270)])

        assert "positive" in exc_info.value.reason

    def test_custom_window(self):
        """Test the window comes from settings."""
        fitter = CpFitter.from_settings(Settings(cp_min_duration_secs=60, cp_max_duration_secs=600))

        assert fitter.min_duration == 60
        assert fitter.max_duration == 600


class TestCpModel:
    """Tests for CpModel."""

    @pytest.fixture
    def model(self):
        return CpModel(cp=250, w_prime=20000, r_squared=0.99)

    def test_time_to_exhaustion(self, model):
        """Test W' lasts 400s at 50W above CP."""
        assert model.time_to_exhaustion(300) == pytest.approx(400.0)

    def test_time_to_exhaustion_at_cp(self, model):
        """Test CP itself is sustainable."""
        assert model.time_to_exhaustion(250) is None
        assert model.time_to_exhaustion(200) is None

    def test_power_at_duration(self, model):
        """Test the inverse of time to exhaustion."""
        assert model.power_at_duration(400) == 300
        assert model.power_at_duration(0) == 0

    def test_w_prime_remaining(self, model):
        """Test W' depletion above CP."""
        assert model.w_prime_remaining(300, 200) == 10000
        assert model.w_prime_remaining(200, 600) == 20000
        assert model.w_prime_remaining(300, 500) == -5000

    def test_serialization(self, model):
        """Test to_dict/from_dict."""
        assert CpModel.from_dict(model.to_dict()) == model
