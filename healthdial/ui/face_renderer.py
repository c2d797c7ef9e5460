"""
Face Renderer - composes one frame of the dial
"""
from typing import Sequence

from PIL import Image, ImageDraw

from ..core.burn_in import BurnInState
from ..core.clock_service import HandAngles
from ..core.geometry import Point, bounding_box, offset_polygon, radial_offset, rotate_and_translate
from ..core.telemetry_cache import ClusterElement, DerivedUIState
from ..hardware.display_info import DeviceContext
from .arcs import draw_bottom_balanced_arc, draw_percentage_arc
from .icons import IconAtlas, IconId
from .layout import Anchor, DeviceLayout, draw_ticks
from .theme import Theme, to_rgb


class FaceRenderer:
    """
    Draws the dial from the static layout, the derived UI state and the
    burn-in offset. Holds no per-frame state of its own.
    """
    
    def __init__(self, device: DeviceContext, icons: IconAtlas):
        self._device = device
        self._icons = icons
    
    def render(self, layout: DeviceLayout, state: DerivedUIState, burn_in: BurnInState,
               angles: HandAngles, show_seconds: bool = True) -> Image.Image:
        """
        Render a complete frame.
        
        Args:
            layout: Device layout
            state: This frame's derived UI state
            burn_in: Current burn-in state
            angles: Hand angles
            show_seconds: Draw the second hand (off in low-power mode)
        
        Returns:
            RGB image the size of the panel
        """
        offset = burn_in.radius_offset
        frame = Image.new('RGB', (layout.width, layout.height), to_rgb(Theme.BG_PRIMARY))
        draw = ImageDraw.Draw(frame)
        
        self._draw_dial(frame, draw, layout, offset)
        self._draw_progress(draw, layout, state, offset)
        self._draw_recovery(frame, draw, layout, state, offset)
        self._draw_status_icons(frame, layout, state, offset)
        self._draw_cluster(frame, draw, state.weather_cluster)
        self._draw_cluster(frame, draw, state.standard_cluster)
        self._draw_hands(draw, layout, angles, offset, show_seconds)
        return frame
    
    def _draw_dial(self, frame: Image.Image, draw: ImageDraw.ImageDraw,
                   layout: DeviceLayout, offset: int) -> None:
        buffer = layout.dial_buffer(offset)
        if buffer is not None:
            frame.paste(buffer, (0, 0), buffer)
        else:
            draw_ticks(draw, layout.center_x, layout.center_y, layout.ticks, offset)
    
    def _draw_progress(self, draw: ImageDraw.ImageDraw, layout: DeviceLayout,
                       state: DerivedUIState, offset: int) -> None:
        rings = layout.rings
        for index, entry in enumerate(state.progress):
            draw_percentage_arc(draw, layout.center_x, layout.center_y, rings.radius(index),
                                rings.pen_width, entry.percentage, entry.color, offset)
    
    def _draw_recovery(self, frame: Image.Image, draw: ImageDraw.ImageDraw,
                       layout: DeviceLayout, state: DerivedUIState, offset: int) -> None:
        if state.recovery_percentage is None:
            return
        x, y = self._anchor(layout, Anchor.RECOVERY, offset)
        pen = max(2, layout.rings.pen_width // 2)
        draw_bottom_balanced_arc(draw, x, y, layout.recovery_radius, pen,
                                 state.recovery_percentage, Theme.RECOVERY)
        self._icons.draw(frame, IconId.RECOVERY, x, y)
    
    def _draw_status_icons(self, frame: Image.Image, layout: DeviceLayout,
                           state: DerivedUIState, offset: int) -> None:
        if state.do_not_disturb:
            self._icons.draw(frame, IconId.DO_NOT_DISTURB, *self._anchor(layout, Anchor.DO_NOT_DISTURB, offset))
        if state.notifications:
            self._icons.draw(frame, IconId.NOTIFICATIONS, *self._anchor(layout, Anchor.NOTIFICATIONS, offset))
    
    def _draw_cluster(self, frame: Image.Image, draw: ImageDraw.ImageDraw,
                      elements: Sequence[ClusterElement]) -> None:
        for element in elements:
            if element.icon is not None:
                self._icons.draw(frame, element.icon, element.x + element.size / 2, element.y)
            elif element.text:
                draw.text((element.x, element.y), element.text, font=self._device.font(element.size),
                          fill=to_rgb(element.color), anchor='lm')
    
    def _draw_hands(self, draw: ImageDraw.ImageDraw, layout: DeviceLayout, angles: HandAngles,
                    offset: int, show_seconds: bool) -> None:
        hands = layout.hands
        cx, cy = layout.center_x, layout.center_y
        
        for angle, outline, fill, lume in (
            (angles.hour, hands.hour_outline, hands.hour_fill, hands.hour_lume),
            (angles.minute, hands.minute_outline, hands.minute_fill, hands.minute_lume),
        ):
            draw.polygon(self._place(outline, angle, layout, offset), fill=to_rgb(Theme.HAND_OUTLINE))
            draw.polygon(self._place(fill, angle, layout, offset), fill=to_rgb(Theme.HAND_FILL))
            draw.polygon(self._place(lume, angle, layout, offset), fill=to_rgb(Theme.HAND_LUME))
        
        if show_seconds:
            tip, tail = rotate_and_translate(
                [(0.0, -hands.second_length - offset), (0.0, hands.second_tail)], angles.second, cx, cy)
            draw.line([tail, tip], fill=to_rgb(Theme.SECOND_HAND), width=2)
        
        cap = max(3, layout.width * 0.015)
        draw.ellipse(bounding_box(cx, cy, cap), fill=to_rgb(Theme.SECOND_HAND if show_seconds else Theme.HAND_FILL))
    
    def _place(self, template: Sequence[Point], angle: float, layout: DeviceLayout, offset: int):
        points = rotate_and_translate(template, angle, layout.center_x, layout.center_y)
        return offset_polygon(points, offset, layout.center_x, layout.center_y)
    
    def _anchor(self, layout: DeviceLayout, anchor: Anchor, offset: int) -> Point:
        x, y = layout.anchors[anchor]
        return radial_offset(x, y, offset, layout.center_x, layout.center_y)
