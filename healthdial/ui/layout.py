"""
Layout - one-time geometry for the dial

Everything that depends only on the panel is worked out on the first frame
and kept for the life of the process: anchor points, font metrics, hand
polygons, ring radii and the pre-rendered tick layer.
"""
import time
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Dict, Iterable, Mapping, Optional, Tuple

from PIL import Image, ImageDraw

from ..core.geometry import Point, hand_polygon, polar_point
from ..core.logging_service import get_logger
from ..core.cached_metric import DEFAULT_EXPIRATIONS, Metric
from ..hardware.display_info import DeviceContext, FontMetrics, SurfaceCapability
from .theme import Theme, to_rgb

DATA_RADIUS_FACTOR = 0.6

# Hour-hand width in pixels keyed by screen width
HOUR_HAND_WIDTHS = {
    218: 9,
    240: 10,
    260: 11,
    280: 12,
    360: 14,
    390: 16,
    416: 17,
    454: 18,
}

MINUTE_WIDTH_FACTOR = 0.8
LUME_WIDTH_FACTOR = 0.45
LUME_LENGTH_FACTOR = 0.85
TIP_FACTOR = 1.12

TICK_COUNT = 60


class Anchor(Enum):
    DO_NOT_DISTURB = 'do_not_disturb'
    NOTIFICATIONS = 'notifications'
    WEATHER_GROUP = 'weather_group'
    STANDARD_GROUP = 'standard_group'
    RECOVERY = 'recovery'


# (angle in degrees, radius as a fraction of half the screen width)
ANCHOR_POSITIONS = {
    Anchor.DO_NOT_DISTURB: (248.0, 0.5),
    Anchor.NOTIFICATIONS: (292.0, 0.5),
    Anchor.WEATHER_GROUP: (180.0, DATA_RADIUS_FACTOR),
    Anchor.STANDARD_GROUP: (0.0, DATA_RADIUS_FACTOR),
    Anchor.RECOVERY: (270.0, 0.58),
}


@dataclass(frozen=True)
class HandTemplates:
    hour_outline: Tuple[Point, ...]
    hour_fill: Tuple[Point, ...]
    hour_lume: Tuple[Point, ...]
    minute_outline: Tuple[Point, ...]
    minute_fill: Tuple[Point, ...]
    minute_lume: Tuple[Point, ...]
    second_length: float
    second_tail: float


@dataclass(frozen=True)
class RingGeometry:
    pen_width: int
    outer_radius: float
    gap: int
    
    def radius(self, index: int) -> float:
        """Pen-center radius of the index-th ring, counting inward"""
        return self.outer_radius - index * (self.pen_width + self.gap)


@dataclass(frozen=True)
class TickGeometry:
    outer_radius: float
    minute_length: float
    hour_length: float
    minute_pen: int = 1
    hour_pen: int = 3


@dataclass(frozen=True)
class DeviceLayout:
    width: int
    height: int
    center_x: float
    center_y: float
    data_radius: float
    anchors: Mapping[Anchor, Point]
    data_font: FontMetrics
    small_font: FontMetrics
    digits_width: float
    hands: HandTemplates
    rings: RingGeometry
    ticks: TickGeometry
    recovery_radius: float
    capability: SurfaceCapability
    dial_buffers: Optional[Mapping[int, Image.Image]]
    expirations: Mapping[Metric, timedelta]
    
    def dial_buffer(self, radius_offset: int) -> Optional[Image.Image]:
        if self.dial_buffers is None:
            return None
        return self.dial_buffers.get(radius_offset)


def hour_hand_width(width: int) -> int:
    """Hour-hand width for a screen width, scaled when the size is unknown"""
    if width in HOUR_HAND_WIDTHS:
        return HOUR_HAND_WIDTHS[width]
    return max(3, int(round(width * 0.04)))


def build_hand_templates(width: int) -> HandTemplates:
    """Outline, fill and lume polygons for the hour and minute hands"""
    half = width / 2.0
    hour_width = hour_hand_width(width)
    minute_width = hour_width * MINUTE_WIDTH_FACTOR
    hour_length = half * 0.48
    minute_length = half * 0.72
    tail = half * 0.1
    
    def variants(length: float, hand_width: float):
        outline = hand_polygon(length + 1, tail + 1, hand_width + 2, TIP_FACTOR)
        fill = hand_polygon(length, tail, hand_width, TIP_FACTOR)
        lume = hand_polygon(length * LUME_LENGTH_FACTOR, -length * 0.3,
                            hand_width * LUME_WIDTH_FACTOR, TIP_FACTOR)
        return tuple(outline), tuple(fill), tuple(lume)
    
    hour = variants(hour_length, hour_width)
    minute = variants(minute_length, minute_width)
    return HandTemplates(*hour, *minute, second_length=half * 0.8, second_tail=tail * 1.5)


def draw_ticks(draw: ImageDraw.ImageDraw, cx: float, cy: float, ticks: TickGeometry,
               radius_offset: float = 0) -> None:
    """Draw 60 minute marks with a heavier mark every fifth minute"""
    outer = ticks.outer_radius + radius_offset
    for i in range(TICK_COUNT):
        angle = 90.0 - i * 6.0
        heavy = i % 5 == 0
        length = ticks.hour_length if heavy else ticks.minute_length
        start = polar_point(angle, cx, cy, outer - length)
        end = polar_point(angle, cx, cy, outer)
        draw.line([start, end],
                  fill=to_rgb(Theme.FG_PRIMARY if heavy else Theme.FG_DIM),
                  width=ticks.hour_pen if heavy else ticks.minute_pen)


def prerender_ticks(width: int, height: int, cx: float, cy: float, ticks: TickGeometry,
                    offsets: Iterable[int]) -> Dict[int, Image.Image]:
    """Draw the tick layer once per burn-in offset onto transparent buffers"""
    buffers = {}
    for offset in sorted(set(offsets)):
        layer = Image.new('RGBA', (width, height), (0, 0, 0, 0))
        draw_ticks(ImageDraw.Draw(layer), cx, cy, ticks, offset)
        buffers[offset] = layer
    return buffers


class LayoutEngine:
    """
    Builds the DeviceLayout on first use and hands back the same instance
    on every later call.
    """
    
    def __init__(self, expiration_seconds: Optional[Mapping[str, float]] = None,
                 burn_in_offsets: Iterable[int] = (0,)):
        """
        Initialize layout engine.
        
        Args:
            expiration_seconds: Per-metric overrides keyed by Metric value
            burn_in_offsets: Radius offsets the tick layer must exist for
        """
        self._expiration_seconds = dict(expiration_seconds or {})
        self._burn_in_offsets = tuple(burn_in_offsets) or (0,)
        self._device_width: Optional[int] = None
        self._layout: Optional[DeviceLayout] = None
        self.builds = 0
    
    def ensure(self, device: DeviceContext) -> DeviceLayout:
        """Return the layout, computing it if this is the first call"""
        if self._device_width is None:
            self._layout = self._build(device)
            self._device_width = device.width
        return self._layout
    
    @property
    def layout(self) -> Optional[DeviceLayout]:
        return self._layout
    
    def _expirations(self) -> Dict[Metric, timedelta]:
        expirations = dict(DEFAULT_EXPIRATIONS)
        for metric in Metric:
            seconds = self._expiration_seconds.get(metric.value)
            if seconds is None:
                continue
            try:
                expirations[metric] = timedelta(seconds=float(seconds))
            except (TypeError, ValueError):
                get_logger().warning(f"Bad expiration for {metric.value}: {seconds!r}, keeping default")
        return expirations
    
    def _build(self, device: DeviceContext) -> DeviceLayout:
        t_start = time.time()
        self.builds += 1
        
        expirations = self._expirations()
        
        width, height = device.width, device.height
        half = width / 2.0
        cx, cy = width / 2.0, height / 2.0
        data_radius = DATA_RADIUS_FACTOR * half
        
        anchors = {
            anchor: polar_point(angle, cx, cy, fraction * half)
            for anchor, (angle, fraction) in ANCHOR_POSITIONS.items()
        }
        
        data_size = Theme.data_font_size(width)
        data_font = device.font_metrics(data_size)
        small_font = device.font_metrics(Theme.small_font_size(width))
        digits_width = device.text_width('000', data_size)
        
        hands = build_hand_templates(width)
        
        pen = max(3, int(round(width * 0.016)))
        rings = RingGeometry(pen_width=pen, outer_radius=half - pen / 2.0 - 1, gap=Theme.RING_GAP)
        innermost_edge = rings.radius(4) - pen / 2.0
        ticks = TickGeometry(
            outer_radius=innermost_edge - Theme.PADDING_SMALL,
            minute_length=width * 0.03,
            hour_length=width * 0.06,
        )
        
        dial_buffers = None
        if device.capability is SurfaceCapability.BUFFERED:
            dial_buffers = prerender_ticks(width, height, cx, cy, ticks, self._burn_in_offsets)
        
        layout = DeviceLayout(
            width=width,
            height=height,
            center_x=cx,
            center_y=cy,
            data_radius=data_radius,
            anchors=anchors,
            data_font=data_font,
            small_font=small_font,
            digits_width=digits_width,
            hands=hands,
            rings=rings,
            ticks=ticks,
            recovery_radius=width * 0.05,
            capability=device.capability,
            dial_buffers=dial_buffers,
            expirations=expirations,
        )
        
        elapsed = (time.time() - t_start) * 1000
        get_logger().info(
            f"Layout computed for {width}x{height} in {elapsed:.1f}ms "
            f"(tick buffers: {len(dial_buffers) if dial_buffers else 'none'})"
        )
        return layout
