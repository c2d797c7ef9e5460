"""
Telemetry Cache - per-metric caches refreshed from providers each frame,
and the UI state derived from them.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..ui.icons import IconId, weather_icon
from ..ui.layout import Anchor, DeviceLayout
from ..ui.theme import Theme
from .cached_metric import DEFAULT_EXPIRATIONS, CachedMetric, Metric
from .geometry import radial_offset
from .health_metrics import active_minutes_daily_goal, calorie_goal, heart_rate_zone
from .logging_service import get_logger
from .providers import (
    ActivitySample,
    BodyBatterySample,
    HeartRateSample,
    ProfileSample,
    ProviderSet,
    StatusSample,
    WeatherSample,
    poll,
)

# Hours of recovery shown as a full ring
RECOVERY_FULL_HOURS = 96.0

PLACEHOLDER = '--'


@dataclass(frozen=True)
class ProgressEntry:
    percentage: float
    color: int


@dataclass(frozen=True)
class ClusterElement:
    """One text or icon item; x is the left edge, y the vertical middle."""
    key: str
    x: float
    y: float
    text: str = ''
    color: int = Theme.FG_PRIMARY
    icon: Optional[IconId] = None
    size: int = 0


@dataclass
class DerivedUIState:
    progress: List[ProgressEntry] = field(default_factory=list)
    recovery_percentage: Optional[float] = None
    heart_rate_color: int = Theme.HR_DEFAULT
    is_day: bool = True
    do_not_disturb: bool = False
    notifications: bool = False
    weather_cluster: List[ClusterElement] = field(default_factory=list)
    standard_cluster: List[ClusterElement] = field(default_factory=list)


TextMeasure = Callable[[str, int], float]


class TelemetryCache:
    """
    Owns one CachedMetric per telemetry category.
    
    refresh() is the only writer. Stress arrives inside the activity
    sample but expires on its own schedule.
    """
    
    def __init__(self, expirations: Optional[Mapping[Metric, timedelta]] = None):
        self._cells: Dict[Metric, CachedMetric[Any]] = {
            metric: CachedMetric(expiration=DEFAULT_EXPIRATIONS[metric]) for metric in Metric
        }
        if expirations is not None:
            self.configure(expirations)
    
    def configure(self, expirations: Mapping[Metric, timedelta]) -> None:
        """Apply expiration durations computed by the layout engine"""
        for metric, expiration in expirations.items():
            self._cells[metric].expiration = expiration
    
    def seed(self, metric: Metric, value: Any) -> None:
        self._cells[metric].seed(value)
    
    def cell(self, metric: Metric) -> CachedMetric[Any]:
        return self._cells[metric]
    
    def value(self, metric: Metric) -> Any:
        return self._cells[metric].value
    
    def refresh(self, providers: ProviderSet, now: datetime) -> None:
        """
        Poll every provider once and update the caches.
        
        Args:
            providers: Attached providers; absent ones count as no sample
            now: Timestamp of this cycle
        """
        activity: Optional[ActivitySample] = poll(
            providers.activity.fetch if providers.activity else None, 'activity')
        stress = None
        if activity is not None and activity.stress_score is not None and activity.stress_score >= 0:
            stress = activity.stress_score
        
        samples = {
            Metric.ACTIVITY: activity,
            Metric.STRESS: stress,
            Metric.HEART_RATE: poll(
                providers.heart_rate.latest if providers.heart_rate else None, 'heart rate'),
            Metric.BODY_BATTERY: poll(
                providers.body_battery.latest if providers.body_battery else None, 'body battery'),
            Metric.WEATHER: poll(
                providers.weather.current if providers.weather else None, 'weather'),
            Metric.PROFILE: poll(
                providers.profile.get if providers.profile else None, 'profile'),
            Metric.STATUS: poll(
                providers.status.get if providers.status else None, 'status'),
        }
        
        for metric, sample in samples.items():
            if self._cells[metric].refresh(sample, now):
                get_logger().debug(f"{metric.value} expired, hiding it")
    
    def progress_entries(self) -> List[ProgressEntry]:
        """
        Progress rings in fixed order: body battery, stress, steps,
        calories, active minutes. Missing inputs or goals <= 0 leave the
        entry out. Percentages are not clamped here.
        """
        entries: List[ProgressEntry] = []
        
        body_battery: Optional[BodyBatterySample] = self.value(Metric.BODY_BATTERY)
        if body_battery is not None:
            entries.append(ProgressEntry(float(body_battery.percent), Theme.BODY_BATTERY))
        
        stress: Optional[int] = self.value(Metric.STRESS)
        if stress is not None:
            entries.append(ProgressEntry(float(stress), Theme.STRESS))
        
        activity: Optional[ActivitySample] = self.value(Metric.ACTIVITY)
        if activity is None:
            return entries
        
        if activity.steps is not None and activity.step_goal and activity.step_goal > 0:
            entries.append(ProgressEntry(activity.steps / activity.step_goal * 100, Theme.STEPS))
        
        goal = calorie_goal(self.value(Metric.PROFILE))
        if activity.calories is not None and goal and goal > 0:
            entries.append(ProgressEntry(activity.calories / goal * 100, Theme.CALORIES))
        
        if activity.active_minutes is not None:
            daily = active_minutes_daily_goal(activity.active_minutes_week_goal)
            entries.append(ProgressEntry(activity.active_minutes / daily * 100, Theme.ACTIVE_MINUTES))
        
        return entries
    
    def recovery_percentage(self) -> Optional[float]:
        activity: Optional[ActivitySample] = self.value(Metric.ACTIVITY)
        if activity is None or not activity.time_to_recovery or activity.time_to_recovery <= 0:
            return None
        return activity.time_to_recovery / RECOVERY_FULL_HOURS * 100
    
    def heart_rate_color(self) -> int:
        heart_rate: Optional[HeartRateSample] = self.value(Metric.HEART_RATE)
        if heart_rate is None:
            return Theme.HR_DEFAULT
        profile: Optional[ProfileSample] = self.value(Metric.PROFILE)
        return Theme.heart_rate_color(heart_rate_zone(heart_rate.bpm, profile))
    
    def derive(self, layout: DeviceLayout, measure: TextMeasure, radius_offset: float,
               date_text: str, is_day: bool) -> DerivedUIState:
        """
        Build this frame's UI state from the cache contents.
        
        Args:
            layout: Device layout
            measure: Text width function (text, font size) -> pixels
            radius_offset: Current burn-in offset
            date_text: Preformatted date for the standard cluster
            is_day: Day/night flag for weather icons
        """
        status: Optional[StatusSample] = self.value(Metric.STATUS)
        hr_color = self.heart_rate_color()
        return DerivedUIState(
            progress=self.progress_entries(),
            recovery_percentage=self.recovery_percentage(),
            heart_rate_color=hr_color,
            is_day=is_day,
            do_not_disturb=bool(status and status.do_not_disturb),
            notifications=bool(status and status.notification_count > 0),
            weather_cluster=self._weather_cluster(layout, measure, radius_offset, is_day),
            standard_cluster=self._standard_cluster(layout, measure, radius_offset, date_text, hr_color),
        )
    
    def _anchor(self, layout: DeviceLayout, anchor: Anchor, radius_offset: float):
        x, y = layout.anchors[anchor]
        return radial_offset(x, y, radius_offset, layout.center_x, layout.center_y)
    
    def _weather_cluster(self, layout: DeviceLayout, measure: TextMeasure,
                         radius_offset: float, is_day: bool) -> List[ClusterElement]:
        """Icon and temperature on one row, precipitation and UV below; grows rightward"""
        weather: Optional[WeatherSample] = self.value(Metric.WEATHER)
        if weather is None:
            return []
        
        ax, ay = self._anchor(layout, Anchor.WEATHER_GROUP, radius_offset)
        data_size = layout.data_font.size
        small_size = layout.small_font.size
        icon_size = layout.data_font.height
        line = layout.data_font.height + 2
        
        elements = [
            ClusterElement('weather_icon', ax, ay, icon=weather_icon(weather.condition, is_day), size=icon_size),
            ClusterElement('temperature', ax + icon_size + 2, ay,
                           text=f"{round(weather.temperature_c)}°", size=data_size),
        ]
        
        details = []
        if weather.precip_chance is not None:
            details.append(f"{weather.precip_chance}%")
        if weather.uv_index is not None:
            details.append(f"UV {round(weather.uv_index)}")
        if details:
            elements.append(ClusterElement('weather_details', ax, ay + line, text=' '.join(details),
                                           color=Theme.FG_SECONDARY, size=small_size))
        
        # Keep the widest row clear of the dial center
        widest = max(
            (e.x - ax) + (icon_size if e.icon else measure(e.text, e.size))
            for e in elements
        )
        limit = layout.center_x - ax - layout.data_font.digit_width
        if widest > limit > 0:
            shift = widest - limit
            elements = [ClusterElement(e.key, e.x - shift, e.y, e.text, e.color, e.icon, e.size)
                        for e in elements]
        return elements
    
    def _standard_cluster(self, layout: DeviceLayout, measure: TextMeasure,
                          radius_offset: float, date_text: str, hr_color: int) -> List[ClusterElement]:
        """Date, heart rate and steps, right-aligned against the anchor"""
        ax, ay = self._anchor(layout, Anchor.STANDARD_GROUP, radius_offset)
        data_size = layout.data_font.size
        small_size = layout.small_font.size
        line = layout.data_font.height + 2
        
        heart_rate: Optional[HeartRateSample] = self.value(Metric.HEART_RATE)
        activity: Optional[ActivitySample] = self.value(Metric.ACTIVITY)
        
        rows = [
            ('date', date_text, Theme.FG_SECONDARY, small_size, ay - line),
            ('heart_rate', str(heart_rate.bpm) if heart_rate else PLACEHOLDER, hr_color, data_size, ay),
            ('steps', str(activity.steps) if activity and activity.steps is not None else PLACEHOLDER,
             Theme.FG_PRIMARY, small_size, ay + line),
        ]
        return [
            ClusterElement(key, ax - measure(text, size), y, text=text, color=color, size=size)
            for key, text, color, size, y in rows
        ]
