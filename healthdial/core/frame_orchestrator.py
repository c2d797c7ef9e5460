"""
Frame Orchestrator - runs the per-frame sequence

burn-in tick -> layout (first frame only) -> cache refresh -> derive -> render
"""
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from PIL import Image

from ..hardware.display_info import DeviceContext
from ..ui.face_renderer import FaceRenderer
from ..ui.layout import LayoutEngine
from .burn_in import BurnInShifter
from .cached_metric import Metric
from .clock_service import ClockService
from .day_night import DayNightTracker
from .logging_service import get_logger
from .providers import ProviderSet
from .telemetry_cache import DerivedUIState, TelemetryCache

STATS_EVERY_FRAMES = 300


@dataclass
class FrameContext:
    """All state shared between frames, owned by the orchestrator."""
    device: DeviceContext
    providers: ProviderSet
    clock: ClockService
    layout_engine: LayoutEngine
    cache: TelemetryCache
    burn_in: BurnInShifter
    day_night: DayNightTracker
    renderer: FaceRenderer


class FrameOrchestrator:
    """
    Produces one frame per call. Frames must not overlap; the caller runs
    render_frame() from a single thread.
    """
    
    def __init__(self, context: FrameContext, update_interval: float = 1.0,
                 low_power_interval: float = 60.0):
        """
        Initialize orchestrator.
        
        Args:
            context: Shared frame state
            update_interval: Seconds between frames while active
            low_power_interval: Seconds between frames while dimmed
        """
        self._ctx = context
        self._update_interval = update_interval
        self._low_power_interval = low_power_interval
        self._cache_configured = False
        self._derived: Optional[DerivedUIState] = None
        
        self._frame_count = 0
        self._render_ms_total = 0.0
    
    def render_frame(self, now: Optional[datetime] = None) -> Image.Image:
        """
        Run one full frame.
        
        Args:
            now: Frame timestamp, defaults to the clock service time
        
        Returns:
            The rendered frame
        """
        t_start = time.time()
        ctx = self._ctx
        
        burn_in = ctx.burn_in.tick()
        
        layout = ctx.layout_engine.ensure(ctx.device)
        if not self._cache_configured:
            ctx.cache.configure(layout.expirations)
            self._cache_configured = True
        
        now = now or ctx.clock.get_current_time()
        ctx.cache.refresh(ctx.providers, now)
        is_day = ctx.day_night.update(now, ctx.cache.value(Metric.WEATHER))
        
        self._derived = ctx.cache.derive(
            layout,
            ctx.device.text_width,
            burn_in.radius_offset,
            ctx.clock.format_date(now),
            is_day,
        )
        
        frame = ctx.renderer.render(
            layout,
            self._derived,
            burn_in,
            ctx.clock.hand_angles(now),
            show_seconds=not ctx.clock.is_low_power(now),
        )
        
        self._record_stats((time.time() - t_start) * 1000)
        return frame
    
    def next_interval(self, now: Optional[datetime] = None) -> float:
        """Seconds until the next frame is due"""
        if self._ctx.clock.is_low_power(now):
            return self._low_power_interval
        return self._update_interval
    
    def _record_stats(self, elapsed_ms: float) -> None:
        self._frame_count += 1
        self._render_ms_total += elapsed_ms
        if self._frame_count % STATS_EVERY_FRAMES == 0:
            average = self._render_ms_total / STATS_EVERY_FRAMES
            get_logger().frame_stats(self._frame_count, average)
            self._render_ms_total = 0.0
    
    @property
    def derived(self) -> Optional[DerivedUIState]:
        """UI state of the last rendered frame"""
        return self._derived
    
    @property
    def frame_count(self) -> int:
        return self._frame_count
    
    @property
    def context(self) -> FrameContext:
        return self._ctx
