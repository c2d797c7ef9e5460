"""
Cached Metric - one telemetry value with its own expiration
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Generic, Optional, TypeVar

T = TypeVar('T')


class Metric(Enum):
    HEART_RATE = 'heart_rate'
    BODY_BATTERY = 'body_battery'
    STRESS = 'stress'
    ACTIVITY = 'activity'
    WEATHER = 'weather'
    PROFILE = 'profile'
    STATUS = 'status'


DEFAULT_EXPIRATIONS: Dict[Metric, timedelta] = {
    Metric.HEART_RATE: timedelta(minutes=2),
    Metric.BODY_BATTERY: timedelta(minutes=15),
    Metric.STRESS: timedelta(minutes=15),
    Metric.ACTIVITY: timedelta(minutes=30),
    Metric.WEATHER: timedelta(hours=1),
    Metric.PROFILE: timedelta(hours=24),
    Metric.STATUS: timedelta(minutes=5),
}


@dataclass
class CachedMetric(Generic[T]):
    """
    A cached sample that disappears once it is older than its expiration.
    
    A fresh sample always replaces the value. Without one, the previous
    value is kept until now - last_update exceeds expiration, then both
    fields are cleared. A seeded value starts its expiration clock on the
    first refresh cycle.
    """
    expiration: timedelta
    value: Optional[T] = None
    last_update: Optional[datetime] = None
    
    def seed(self, value: T) -> None:
        """Set a default before the first refresh"""
        self.value = value
    
    def refresh(self, sample: Optional[T], now: datetime) -> bool:
        """
        Apply one refresh cycle.
        
        Args:
            sample: New sample, or None if nothing arrived this cycle
            now: Current time
        
        Returns:
            True if the cell expired on this cycle
        """
        if sample is not None:
            self.value = sample
            self.last_update = now
            return False
        
        if self.last_update is None:
            if self.value is not None:
                self.last_update = now
            return False
        
        if now - self.last_update > self.expiration:
            self.value = None
            self.last_update = None
            return True
        return False
    
    def age(self, now: datetime) -> Optional[timedelta]:
        if self.last_update is None:
            return None
        return now - self.last_update
    
    @property
    def available(self) -> bool:
        return self.value is not None
