"""
Providers - typed telemetry samples and the interfaces that supply them.

Every provider returns an optional sample. poll() is the single call site
for providers: anything a provider raises is logged and treated as "no
sample this cycle".
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Protocol, TypeVar

from .logging_service import get_logger

T = TypeVar('T')

# Heart-rate sensors report this when no reading is available
INVALID_HEART_RATE = 255


@dataclass(frozen=True)
class ActivitySample:
    calories: Optional[int] = None
    steps: Optional[int] = None
    step_goal: Optional[int] = None
    active_minutes: Optional[int] = None
    active_minutes_week_goal: Optional[int] = None
    time_to_recovery: Optional[float] = None  # hours
    stress_score: Optional[int] = None
    
    def is_valid(self) -> bool:
        return any(
            value is not None
            for value in (self.calories, self.steps, self.active_minutes, self.stress_score)
        )


@dataclass(frozen=True)
class HeartRateSample:
    bpm: Optional[int]
    
    def is_valid(self) -> bool:
        return self.bpm is not None and 0 < self.bpm != INVALID_HEART_RATE


@dataclass(frozen=True)
class BodyBatterySample:
    percent: Optional[float]
    
    def is_valid(self) -> bool:
        return self.percent is not None and 0 <= self.percent <= 100


@dataclass(frozen=True)
class WeatherSample:
    condition: str
    temperature_c: Optional[float]
    uv_index: Optional[float] = None
    precip_chance: Optional[int] = None
    sunrise: Optional[datetime] = None
    sunset: Optional[datetime] = None
    
    def is_valid(self) -> bool:
        return self.temperature_c is not None


@dataclass(frozen=True)
class ProfileSample:
    weight_kg: Optional[float] = None
    height_cm: Optional[float] = None
    age: Optional[int] = None
    gender: Optional[str] = None  # 'male' | 'female'
    activity_class: Optional[int] = None  # 0-100
    heart_rate_zones: Optional[List[int]] = None  # 6 ascending boundaries
    
    def is_valid(self) -> bool:
        return True


@dataclass(frozen=True)
class StatusSample:
    do_not_disturb: bool = False
    notification_count: int = 0
    
    def is_valid(self) -> bool:
        return self.notification_count >= 0


class ActivityProvider(Protocol):
    def fetch(self) -> Optional[ActivitySample]: ...


class HeartRateProvider(Protocol):
    def latest(self) -> Optional[HeartRateSample]: ...


class BodyBatteryProvider(Protocol):
    def latest(self) -> Optional[BodyBatterySample]: ...


class WeatherProvider(Protocol):
    def current(self) -> Optional[WeatherSample]: ...


class ProfileProvider(Protocol):
    def get(self) -> Optional[ProfileSample]: ...


class StatusProvider(Protocol):
    def get(self) -> Optional[StatusSample]: ...


@dataclass
class ProviderSet:
    """Bundle of the providers attached to this device. Any may be absent."""
    activity: Optional[ActivityProvider] = None
    heart_rate: Optional[HeartRateProvider] = None
    body_battery: Optional[BodyBatteryProvider] = None
    weather: Optional[WeatherProvider] = None
    profile: Optional[ProfileProvider] = None
    status: Optional[StatusProvider] = None


def poll(fetch: Optional[Callable[[], Optional[T]]], name: str) -> Optional[T]:
    """
    Call a provider and return a valid sample or None.
    
    Args:
        fetch: Bound provider method, or None when the provider is absent
        name: Provider name for logging
    
    Returns:
        The sample if one arrived and passed is_valid(), else None
    """
    if fetch is None:
        return None
    try:
        sample = fetch()
    except Exception as e:
        get_logger().provider_failure(name, e)
        return None
    if sample is None:
        return None
    if not sample.is_valid():
        get_logger().provider_failure(name, f"invalid sample {sample}")
        return None
    return sample
