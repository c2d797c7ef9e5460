"""
Unit tests for profile based goals and heart-rate zones.
"""

import pytest

from healthdial.core.health_metrics import (
    activity_multiplier,
    active_minutes_daily_goal,
    basal_metabolic_rate,
    calorie_goal,
    heart_rate_zone,
    zone_from_age,
    zone_from_table,
)
from healthdial.core.providers import ProfileSample

ZONES = [100, 120, 140, 160, 180, 200]


class TestCalorieGoal:
    """Tests for the Mifflin-St Jeor based daily calorie goal."""

    @pytest.mark.unit
    def test_worked_example(self, profile):
        """BMR 1873.75 x 1.55 for activity class 50."""
        assert basal_metabolic_rate(70, 175, 30, 'male') == pytest.approx(1873.75)
        assert calorie_goal(profile) == 2904

    @pytest.mark.unit
    def test_female_constant(self):
        assert basal_metabolic_rate(60, 165, 40, 'female') == pytest.approx(600 + 1031.25 - 200 - 161)

    @pytest.mark.unit
    def test_gender_is_case_insensitive(self):
        assert basal_metabolic_rate(70, 175, 30, 'MALE') == pytest.approx(1873.75)

    @pytest.mark.unit
    def test_unknown_gender_has_no_goal(self):
        profile = ProfileSample(weight_kg=70, height_cm=175, age=30, gender='other', activity_class=50)
        assert calorie_goal(profile) is None

    @pytest.mark.unit
    @pytest.mark.parametrize("missing", ['weight_kg', 'height_cm', 'age', 'gender', 'activity_class'])
    def test_missing_field_skips_goal(self, missing):
        fields = dict(weight_kg=70, height_cm=175, age=30, gender='male', activity_class=50)
        fields[missing] = None
        assert calorie_goal(ProfileSample(**fields)) is None

    @pytest.mark.unit
    def test_no_profile(self):
        assert calorie_goal(None) is None


class TestActivityMultiplier:
    """Tests for the five activity tiers."""

    @pytest.mark.unit
    @pytest.mark.parametrize("score, expected", [
        (0, 1.2),
        (19, 1.2),
        (20, 1.375),
        (39, 1.375),
        (40, 1.55),
        (59, 1.55),
        (60, 1.725),
        (79, 1.725),
        (80, 1.9),
        (100, 1.9),
    ])
    def test_tiers(self, score, expected):
        assert activity_multiplier(score) == expected


class TestActiveMinutesGoal:

    @pytest.mark.unit
    def test_weekly_goal_split_over_seven_days(self):
        assert active_minutes_daily_goal(210) == pytest.approx(30)
        assert active_minutes_daily_goal(150) == pytest.approx(150 / 7)

    @pytest.mark.unit
    def test_defaults_to_thirty(self):
        assert active_minutes_daily_goal(None) == 30
        assert active_minutes_daily_goal(0) == 30


class TestHeartRateZone:
    """Tests for zone lookup and the age based fallback."""

    @pytest.mark.unit
    def test_worked_example_is_zone_three(self):
        assert zone_from_table(150, ZONES) == 3

    @pytest.mark.unit
    @pytest.mark.parametrize("bpm, expected", [
        (60, 0),
        (100, 1),
        (139, 2),
        (140, 3),
        (179, 4),
        (180, 5),
        (230, 5),
    ])
    def test_table_boundaries(self, bpm, expected):
        assert zone_from_table(bpm, ZONES) == expected

    @pytest.mark.unit
    @pytest.mark.parametrize("bpm, expected", [
        (90, 1),    # 47% of 190
        (120, 2),   # 63%
        (140, 3),   # 74%
        (160, 4),   # 84%
        (180, 5),   # 95%
    ])
    def test_age_fallback_bands(self, bpm, expected):
        assert zone_from_age(bpm, 30) == expected

    @pytest.mark.unit
    def test_table_preferred_over_age(self):
        profile = ProfileSample(age=30, heart_rate_zones=ZONES)
        assert heart_rate_zone(150, profile) == 3

    @pytest.mark.unit
    def test_age_used_without_table(self):
        assert heart_rate_zone(150, ProfileSample(age=30)) == 3  # 79% of 190

    @pytest.mark.unit
    def test_unknown_without_table_or_age(self):
        assert heart_rate_zone(150, ProfileSample()) is None
        assert heart_rate_zone(150, None) is None
        assert heart_rate_zone(None, ProfileSample(age=30)) is None
