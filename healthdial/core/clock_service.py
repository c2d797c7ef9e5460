"""
Clock Service - Time, hand angles and low-power scheduling
Handles timezone-aware time retrieval for the analog dial
"""
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .logging_service import get_logger


@dataclass(frozen=True)
class HandAngles:
    """Hand angles in radians, clockwise from 12 o'clock."""
    hour: float
    minute: float
    second: float


def is_in_time_window(current_hour: int, start_hour: int, end_hour: int) -> bool:
    """Check if current hour is within [start, end), wrapping past midnight."""
    if start_hour == end_hour:
        return False
    if start_hour < end_hour:
        return start_hour <= current_hour < end_hour
    return current_hour >= start_hour or current_hour < end_hour


class ClockService:
    """
    Centralized clock/time service with timezone support.
    """
    
    def __init__(self, timezone: str = 'UTC', low_power_start_hour: int = 23,
                 low_power_end_hour: int = 6):
        """
        Initialize clock service with timezone.
        
        Args:
            timezone: IANA timezone string (e.g., 'Europe/London')
            low_power_start_hour: Hour the dimmed cadence starts
            low_power_end_hour: Hour the dimmed cadence ends
        """
        self._timezone = timezone
        self._tz_obj: Optional[ZoneInfo] = None
        self._low_power_start = low_power_start_hour
        self._low_power_end = low_power_end_hour
        self._load_timezone()
    
    def _load_timezone(self) -> None:
        """Load timezone object, fallback to UTC on error"""
        try:
            self._tz_obj = ZoneInfo(self._timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            get_logger().warning(f"Invalid timezone '{self._timezone}', using UTC: {e}")
            self._timezone = 'UTC'
            self._tz_obj = ZoneInfo('UTC')
    
    def get_current_time(self) -> datetime:
        """
        Get current time in configured timezone.
        
        Returns:
            Timezone-aware datetime object
        """
        return datetime.now(self._tz_obj)
    
    def hand_angles(self, now: Optional[datetime] = None) -> HandAngles:
        """
        Hand angles quantized to what each hand can visibly show.
        
        The hour hand moves once per minute, the minute hand once per
        minute and the second hand once per second.
        """
        now = now or self.get_current_time()
        minutes_of_half_day = (now.hour % 12) * 60 + now.minute
        return HandAngles(
            hour=2 * math.pi * minutes_of_half_day / 720.0,
            minute=2 * math.pi * now.minute / 60.0,
            second=2 * math.pi * now.second / 60.0,
        )
    
    def is_low_power(self, now: Optional[datetime] = None) -> bool:
        """True inside the dimmed window, when the face redraws less often"""
        now = now or self.get_current_time()
        return is_in_time_window(now.hour, self._low_power_start, self._low_power_end)
    
    def format_date(self, now: Optional[datetime] = None) -> str:
        """Short date for the standard info cluster, e.g. 'MON 19'"""
        now = now or self.get_current_time()
        return f"{now.strftime('%a').upper()} {now.day}"
    
    @property
    def timezone(self) -> str:
        """Get current timezone string"""
        return self._timezone
