"""Tests for training goal records."""

from datetime import date

import pytest

from ride_analytics.goals import (
    GoalStatus,
    GoalType,
    MetricType,
    TargetMetric,
    TrainingGoal,
)


class TestGoalType:
    """Tests for GoalType."""

    def test_event_types(self):
        """Test which goal types are events."""
        assert GoalType.CENTURY_RIDE.is_event
        assert not GoalType.BUILD_THRESHOLD.is_event

    def test_display_names(self):
        """Test every type has a display name."""
        for goal_type in GoalType:
            assert goal_type.display_name


class TestTargetMetric:
    """Tests for TargetMetric."""

    def test_progress(self):
        """Test progress is capped at 100%."""
        assert TargetMetric(MetricType.CTL, 80.0, 60.0).progress_percent() == pytest.approx(75.0)
        assert TargetMetric(MetricType.CTL, 80.0, 90.0).progress_percent() == 100.0
        assert TargetMetric(MetricType.CTL, 80.0).progress_percent() is None

    def test_from_dict(self):
        """Test parsing."""
        metric = TargetMetric.from_dict({"metric_type": "ftp", "target_value": 300})

        assert metric.metric_type == MetricType.FTP
        assert metric.target_value == 300.0


class TestTrainingGoal:
    """Tests for TrainingGoal."""

    def test_days_until_target(self):
        """Test the countdown to the target date."""
        goal = TrainingGoal(
            user_id="u1",
            goal_type=GoalType.GRAN_FONDO,
            title="Fondo",
            target_date=date(2024, 9, 1),
        )

        assert goal.days_until_target(date(2024, 8, 1)) == 31
        assert goal.status.is_active

    def test_no_target_date(self):
        """Test goals without a date have no countdown."""
        goal = TrainingGoal(user_id="u1", goal_type=GoalType.GET_FASTER, title="Faster")

        assert goal.days_until_target() is None

    def test_to_dict(self):
        """Test serialization."""
        goal = TrainingGoal(
            user_id="u1",
            goal_type=GoalType.TIME_TRIAL,
            title="TT",
            status=GoalStatus.ON_HOLD,
            target_metric=TargetMetric(MetricType.FTP, 300.0),
        )

        data = goal.to_dict()

        assert data["goal_type"] == "time_trial"
        assert data["status"] == "on_hold"
        assert data["target_metric"]["metric_type"] == "ftp"
        assert data["target_date"] is None
