"""
Shared pytest fixtures for Health Dial tests.
"""

import os
import sys
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

# Add project root to path for imports
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from healthdial.core.providers import (  # noqa: E402
    ActivitySample,
    BodyBatterySample,
    HeartRateSample,
    ProfileSample,
    ProviderSet,
    StatusSample,
    WeatherSample,
)
from healthdial.hardware.display_info import DeviceContext  # noqa: E402


class StubProvider:
    """Provider double returning queued samples; exceptions in the queue are raised."""

    def __init__(self, *samples):
        self.samples = list(samples)
        self.calls = 0

    def _next(self):
        self.calls += 1
        if not self.samples:
            return None
        sample = self.samples.pop(0) if len(self.samples) > 1 else self.samples[0]
        if isinstance(sample, Exception):
            raise sample
        return sample

    fetch = _next
    latest = _next
    current = _next
    get = _next


@pytest.fixture
def now():
    """Fixed frame time: mid-morning on a weekday."""
    return datetime(2026, 10, 19, 10, 30, 15, tzinfo=ZoneInfo('UTC'))


@pytest.fixture
def profile():
    """Profile from the calorie goal worked example."""
    return ProfileSample(weight_kg=70, height_cm=175, age=30, gender='male', activity_class=50)


@pytest.fixture
def activity():
    return ActivitySample(
        calories=1452,
        steps=4000,
        step_goal=8000,
        active_minutes=15,
        active_minutes_week_goal=210,
        time_to_recovery=24.0,
        stress_score=35,
    )


@pytest.fixture
def weather(now):
    return WeatherSample(
        condition='Partly cloudy',
        temperature_c=17.4,
        uv_index=4,
        precip_chance=30,
        sunrise=now.replace(hour=7, minute=0, second=0),
        sunset=now.replace(hour=18, minute=15, second=0),
    )


@pytest.fixture
def providers(activity, weather, profile):
    """A full set of healthy providers."""
    return ProviderSet(
        activity=StubProvider(activity),
        heart_rate=StubProvider(HeartRateSample(bpm=150)),
        body_battery=StubProvider(BodyBatterySample(percent=64)),
        weather=StubProvider(weather),
        profile=StubProvider(profile),
        status=StubProvider(StatusSample(do_not_disturb=True, notification_count=2)),
    )


@pytest.fixture
def device():
    """416px round panel that supports off-screen buffers."""
    return DeviceContext(width=416, height=416, buffered=True)


@pytest.fixture
def direct_device():
    """Same panel without off-screen buffer support."""
    return DeviceContext(width=416, height=416, buffered=False)


@pytest.fixture
def later(now):
    """Helper returning now + seconds."""
    return lambda seconds: now + timedelta(seconds=seconds)
