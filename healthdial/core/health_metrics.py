"""
Health Metrics - goals and zones derived from the user profile
"""
import bisect
from typing import Optional, Sequence

from .providers import ProfileSample

# (upper bound of activity-class score, TDEE multiplier)
ACTIVITY_MULTIPLIERS = (
    (20, 1.2),
    (40, 1.375),
    (60, 1.55),
    (80, 1.725),
)
ACTIVITY_MULTIPLIER_MAX = 1.9

DEFAULT_ACTIVE_MINUTES_GOAL = 30.0

# Fraction-of-max-heart-rate thresholds for the age based fallback
AGE_ZONE_THRESHOLDS = (0.6, 0.7, 0.8, 0.9)


def activity_multiplier(activity_class: float) -> float:
    """Map a 0-100 activity-class score to one of five TDEE multipliers."""
    for upper, multiplier in ACTIVITY_MULTIPLIERS:
        if activity_class < upper:
            return multiplier
    return ACTIVITY_MULTIPLIER_MAX


def basal_metabolic_rate(weight_kg: float, height_cm: float, age: int, gender: str) -> Optional[float]:
    """
    Mifflin-St Jeor basal metabolic rate in kcal/day.
    
    Returns:
        BMR, or None for a gender the equation has no constant for
    """
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    gender = (gender or '').lower()
    if gender == 'male':
        return base + 5
    if gender == 'female':
        return base - 161
    return None


def calorie_goal(profile: Optional[ProfileSample]) -> Optional[int]:
    """
    Daily calorie goal (TDEE) from the user profile.
    
    Returns:
        Rounded kcal goal, or None if any required profile field is missing
    """
    if profile is None:
        return None
    fields = (profile.weight_kg, profile.height_cm, profile.age, profile.gender, profile.activity_class)
    if any(field is None for field in fields):
        return None
    
    bmr = basal_metabolic_rate(profile.weight_kg, profile.height_cm, profile.age, profile.gender)
    if bmr is None:
        return None
    return int(round(bmr * activity_multiplier(profile.activity_class)))


def active_minutes_daily_goal(week_goal: Optional[float]) -> float:
    """Daily share of the weekly active-minutes goal, 30 when unknown."""
    if not week_goal or week_goal <= 0:
        return DEFAULT_ACTIVE_MINUTES_GOAL
    return week_goal / 7.0


def zone_from_table(bpm: float, zones: Sequence[int]) -> int:
    """
    Heart-rate zone 0-5 from a 6-entry ascending boundary table.
    
    Below the first boundary is zone 0; [zones[i], zones[i+1]) is zone i+1;
    at or above the last boundary is zone 5.
    """
    return min(bisect.bisect_right(zones, bpm), 5)


def zone_from_age(bpm: float, age: int) -> Optional[int]:
    """Heart-rate zone 1-5 from the percentage of 220 - age."""
    max_hr = 220 - age
    if max_hr <= 0:
        return None
    return bisect.bisect_right(AGE_ZONE_THRESHOLDS, bpm / max_hr) + 1


def heart_rate_zone(bpm: Optional[float], profile: Optional[ProfileSample]) -> Optional[int]:
    """
    Resolve the heart-rate zone using the profile zone table, falling back
    to an age based estimate.
    
    Returns:
        Zone number, or None when neither source is available
    """
    if bpm is None or profile is None:
        return None
    if profile.heart_rate_zones and len(profile.heart_rate_zones) == 6:
        return zone_from_table(bpm, profile.heart_rate_zones)
    if profile.age:
        return zone_from_age(bpm, profile.age)
    return None
