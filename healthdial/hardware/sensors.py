"""
Simulated Sensors - bench stand-ins for the watch telemetry providers

Values wander within realistic bounds and readings occasionally drop out,
so the cache retention and expiry paths get exercised while running on a
desk.
"""
import random
from datetime import datetime, timedelta
from typing import Optional

from ..core.providers import (
    ActivitySample,
    BodyBatterySample,
    HeartRateSample,
    ProfileSample,
    ProviderSet,
    StatusSample,
    WeatherSample,
)

CONDITIONS = ['Clear', 'Partly cloudy', 'Cloudy', 'Rain', 'Fog']


class SimulatedSensors:
    """
    One random walk behind all simulated readings.
    """
    
    def __init__(self, seed: Optional[int] = None, dropout: float = 0.1):
        """
        Initialize simulated sensors.
        
        Args:
            seed: Random seed for repeatable runs
            dropout: Probability that any single read returns nothing
        """
        self._random = random.Random(seed)
        self._dropout = dropout
        
        self._bpm = 68.0
        self._body_battery = 80.0
        self._stress = 25.0
        self._steps = 0
        self._calories = 600
        self._active_minutes = 0
        self._temperature = 14.0
        self._condition = self._random.choice(CONDITIONS)
    
    def _drop(self) -> bool:
        return self._random.random() < self._dropout
    
    def _walk(self, value: float, step: float, low: float, high: float) -> float:
        return max(low, min(high, value + self._random.uniform(-step, step)))
    
    def activity(self) -> Optional[ActivitySample]:
        if self._drop():
            return None
        self._steps += self._random.randint(0, 25)
        self._calories += self._random.randint(0, 2)
        if self._random.random() < 0.05:
            self._active_minutes += 1
        self._stress = self._walk(self._stress, 3, 0, 100)
        return ActivitySample(
            calories=self._calories,
            steps=self._steps,
            step_goal=8000,
            active_minutes=self._active_minutes,
            active_minutes_week_goal=150,
            time_to_recovery=18.0,
            stress_score=int(self._stress),
        )
    
    def weather(self) -> Optional[WeatherSample]:
        if self._drop():
            return None
        self._temperature = self._walk(self._temperature, 0.2, -20, 40)
        today = datetime.now().replace(minute=0, second=0, microsecond=0)
        return WeatherSample(
            condition=self._condition,
            temperature_c=self._temperature,
            uv_index=3,
            precip_chance=20,
            sunrise=today.replace(hour=6),
            sunset=today.replace(hour=18) + timedelta(minutes=30),
        )
    
    def profile(self) -> Optional[ProfileSample]:
        return ProfileSample(weight_kg=70, height_cm=175, age=30, gender='male', activity_class=50)
    
    def heart_rate(self) -> Optional[HeartRateSample]:
        if self._drop():
            return None
        self._bpm = self._walk(self._bpm, 4, 45, 180)
        return HeartRateSample(bpm=int(self._bpm))
    
    def body_battery(self) -> Optional[BodyBatterySample]:
        if self._drop():
            return None
        self._body_battery = self._walk(self._body_battery, 0.5, 5, 100)
        return BodyBatterySample(percent=round(self._body_battery))
    
    def status(self) -> Optional[StatusSample]:
        return StatusSample(do_not_disturb=False, notification_count=self._random.randint(0, 1))


class SimulatedProvider:
    """Base for providers that read from a shared SimulatedSensors"""
    
    def __init__(self, sensors: SimulatedSensors):
        self._sensors = sensors


class SimulatedActivityProvider(SimulatedProvider):
    def fetch(self) -> Optional[ActivitySample]:
        return self._sensors.activity()


class SimulatedHeartRateProvider(SimulatedProvider):
    def latest(self) -> Optional[HeartRateSample]:
        return self._sensors.heart_rate()


class SimulatedBodyBatteryProvider(SimulatedProvider):
    def latest(self) -> Optional[BodyBatterySample]:
        return self._sensors.body_battery()


class SimulatedWeatherProvider(SimulatedProvider):
    def current(self) -> Optional[WeatherSample]:
        return self._sensors.weather()


class SimulatedProfileProvider(SimulatedProvider):
    def get(self) -> Optional[ProfileSample]:
        return self._sensors.profile()


class SimulatedStatusProvider(SimulatedProvider):
    def get(self) -> Optional[StatusSample]:
        return self._sensors.status()


def simulated_providers(seed: Optional[int] = None, dropout: float = 0.1) -> ProviderSet:
    """Build a ProviderSet backed by one SimulatedSensors instance"""
    sensors = SimulatedSensors(seed, dropout)
    return ProviderSet(
        activity=SimulatedActivityProvider(sensors),
        heart_rate=SimulatedHeartRateProvider(sensors),
        body_battery=SimulatedBodyBatteryProvider(sensors),
        weather=SimulatedWeatherProvider(sensors),
        profile=SimulatedProfileProvider(sensors),
        status=SimulatedStatusProvider(sensors),
    )
