"""
Day/Night - sunrise/sunset from weather, else resolved once per calendar day
"""
from datetime import date, datetime, tzinfo
from typing import Optional, Tuple

from astral import Observer
from astral.sun import sun

from .logging_service import get_logger
from .providers import WeatherSample

# Used when neither the weather sample nor a location gives sun times
FALLBACK_DAY_START_HOUR = 6
FALLBACK_DAY_END_HOUR = 18


def _align(moment: datetime, now: datetime) -> datetime:
    """Make moment comparable with now (both naive or both aware)."""
    if now.tzinfo is None and moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    if now.tzinfo is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=now.tzinfo)
    if now.tzinfo is not None:
        return moment.astimezone(now.tzinfo)
    return moment


class DayNightTracker:
    """
    Tracks whether it is currently day.
    
    Weather sun times are taken whenever a pair dated today arrives that
    differs from the cached one. Without them, astral (or the fixed
    fallback hours) is resolved once per calendar day. Every other frame
    only compares the clock against the cached pair.
    """
    
    def __init__(self, latitude: Optional[float] = None, longitude: Optional[float] = None):
        self._observer: Optional[Observer] = None
        if latitude is not None and longitude is not None:
            self._observer = Observer(latitude=latitude, longitude=longitude)
        
        self._day: Optional[date] = None
        self._sun_times: Optional[Tuple[datetime, datetime]] = None
        self._is_day = True
        self.lookups = 0
    
    def update(self, now: datetime, weather: Optional[WeatherSample] = None) -> bool:
        """
        Refresh the flag for this frame.
        
        Args:
            now: Current time
            weather: Cached weather sample, may carry sunrise/sunset
        
        Returns:
            True if it is day
        """
        today = now.date()
        weather_times = self._weather_times(now, weather)
        if weather_times is not None:
            if self._day != today or weather_times != self._sun_times:
                self._day = today
                self._sun_times = weather_times
                self.lookups += 1
        elif self._day != today:
            self._day = today
            self._sun_times = self._astral_times(now)
            self.lookups += 1
        
        if self._sun_times is None:
            self._is_day = FALLBACK_DAY_START_HOUR <= now.hour < FALLBACK_DAY_END_HOUR
        else:
            sunrise, sunset = self._sun_times
            self._is_day = _align(sunrise, now) <= now < _align(sunset, now)
        return self._is_day
    
    def _weather_times(self, now: datetime,
                       weather: Optional[WeatherSample]) -> Optional[Tuple[datetime, datetime]]:
        """Sunrise and sunset from the weather sample, only if they are for today"""
        if weather is None or not weather.sunrise or not weather.sunset:
            return None
        if _align(weather.sunrise, now).date() != now.date():
            return None
        return (weather.sunrise, weather.sunset)
    
    def _astral_times(self, now: datetime) -> Optional[Tuple[datetime, datetime]]:
        """Today's sunrise and sunset for the configured location"""
        if self._observer is None:
            return None
        
        tz: Optional[tzinfo] = now.tzinfo
        try:
            times = sun(self._observer, date=now.date(), tzinfo=tz) if tz else sun(self._observer, date=now.date())
        except ValueError as e:
            # Polar day/night: the sun does not cross the horizon today
            get_logger().debug(f"No sunrise/sunset today: {e}")
            return None
        return (times['sunrise'], times['sunset'])
    
    @property
    def is_day(self) -> bool:
        return self._is_day
