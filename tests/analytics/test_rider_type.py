"""Tests for rider type classification."""

import pytest

from ride_analytics.analytics.pdc import PdcPoint, PowerDurationCurve
from ride_analytics.analytics.rider_type import PowerProfile, RiderClassifier, RiderType


class TestClassify:
    """Tests for the ordered classification rules."""

    @pytest.fixture
    def classifier(self):
        return RiderClassifier(ftp=250)

    def test_sprinter(self, classifier):
        """Test very high 5 second power."""
        profile = PowerProfile(neuromuscular=190, anaerobic=120, vo2max=110, threshold=100)

        assert classifier.classify(profile) == RiderType.SPRINTER

    def test_pursuiter(self, classifier):
        """Test strong 1 minute power with a good sprint."""
        profile = PowerProfile(neuromuscular=160, anaerobic=135, vo2max=110, threshold=100)

        assert classifier.classify(profile) == RiderType.PURSUITER

    def test_time_trialist(self, classifier):
        """Test strong 5 minute power with a modest sprint."""
        profile = PowerProfile(neuromuscular=140, anaerobic=120, vo2max=110, threshold=100)

        assert classifier.classify(profile) == RiderType.TIME_TRIALIST

    def test_all_rounder(self, classifier):
        """Test a profile matching no specialist rule."""
        profile = PowerProfile(neuromuscular=170, anaerobic=125, vo2max=80, threshold=100)

        assert classifier.classify(profile) == RiderType.ALL_ROUNDER

    def test_sprinter_rule_wins_first(self, classifier):
        """Test rules are checked in order."""
        profile = PowerProfile(neuromuscular=200, anaerobic=140, vo2max=120, threshold=100)

        assert classifier.classify(profile) == RiderType.SPRINTER

    def test_missing_component_is_unknown(self, classifier):
        """Test any zero component short-circuits to unknown."""
        profile = PowerProfile(neuromuscular=0, anaerobic=140, vo2max=120, threshold=100)

        assert classifier.classify(profile) == RiderType.UNKNOWN


class TestProfileFromPdc:
    """Tests for normalizing a curve against FTP."""

    def test_profile_percentages(self):
        """Test 5s, 1min and 5min power as %FTP."""
        pdc = PowerDurationCurve.from_points(
            [PdcPoint(5, 1000), PdcPoint(60, 500), PdcPoint(300, 350)]
        )

        profile = RiderClassifier(ftp=250).profile_from_pdc(pdc)

        assert profile.neuromuscular == pytest.approx(400.0)
        assert profile.anaerobic == pytest.approx(200.0)
        assert profile.vo2max == pytest.approx(140.0)
        assert profile.threshold == 100.0

    def test_zero_ftp(self):
        """Test no FTP yields an empty profile and unknown type."""
        pdc = PowerDurationCurve.from_points([PdcPoint(5, 1000)])
        classifier = RiderClassifier(ftp=0)

        assert classifier.profile_from_pdc(pdc) == PowerProfile()
        assert classifier.classify_from_pdc(pdc) == RiderType.UNKNOWN

    def test_empty_curve(self):
        """Test an empty curve is unknown."""
        assert RiderClassifier(ftp=250).classify_from_pdc(PowerDurationCurve()) == RiderType.UNKNOWN


class TestPowerProfile:
    """Tests for strength and weakness reporting."""

    def test_strongest_and_weakest(self):
        """Test areas are scored against typical ratios."""
        profile = PowerProfile(neuromuscular=190, anaerobic=120, vo2max=110, threshold=100)

        assert profile.strongest_area() == "Neuromuscular (5s)"
        assert profile.weakest_area() == "Anaerobic (1min)"

    def test_empty_profile_defaults_to_threshold(self):
        """Test no data reports threshold for both."""
        profile = PowerProfile()

        assert profile.strongest_area() == "Threshold"
        assert profile.weakest_area() == "Threshold"


class TestRiderTypeText:
    """Tests for rider type display text."""

    def test_every_type_has_text(self):
        """Test all text tables cover every type."""
        for rider_type in RiderType:
            assert rider_type.display_name
            assert rider_type.description
            assert rider_type.training_focus
            assert rider_type.training_recommendations
            assert rider_type.suited_events

    def test_display_name(self):
        """Test a display name."""
        assert RiderType.TIME_TRIALIST.display_name == "Time Trialist"
