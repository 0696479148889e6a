"""Tests for shared prediction types."""

from ride_analytics.prediction.types import Confidence, PredictionSource, PredictionType


class TestPredictionSource:
    """Tests for PredictionSource."""

    def test_staleness(self):
        """Test only live predictions are fresh."""
        assert not PredictionSource.REMOTE.may_be_stale
        assert PredictionSource.CACHED.may_be_stale
        assert PredictionSource.LOCAL_FALLBACK.may_be_stale

    def test_description(self):
        """Test the fallback description."""
        assert PredictionSource.LOCAL_FALLBACK.description == "Offline calculation"


class TestPredictionType:
    """Tests for PredictionType."""

    def test_cache_expiry(self):
        """Test expiry hours per type."""
        assert PredictionType.FTP_PREDICTION.cache_expiry_hours == 168
        assert PredictionType.DIFFICULTY_ESTIMATE.cache_expiry_hours == 1


class TestConfidence:
    """Tests for the generic confidence scale."""

    def test_from_float(self):
        """Test score thresholds."""
        assert Confidence.from_float(0.1) == Confidence.INSUFFICIENT
        assert Confidence.from_float(0.3) == Confidence.LOW
        assert Confidence.from_float(0.5) == Confidence.MEDIUM
        assert Confidence.from_float(0.9) == Confidence.HIGH

    def test_ordering(self):
        """Test levels compare by value."""
        assert Confidence.INSUFFICIENT < Confidence.LOW < Confidence.MEDIUM < Confidence.HIGH
        assert Confidence.HIGH >= Confidence.HIGH

    def test_label(self):
        """Test display labels."""
        assert Confidence.INSUFFICIENT.label == "Insufficient Data"
        assert Confidence.MEDIUM.label == "Medium"
