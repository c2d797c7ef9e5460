"""
Arcs - percentage rings with a stepped black-to-color gradient

Pillow measures arc angles in degrees clockwise from 3 o'clock, so 12
o'clock is -90 and 6 o'clock is 90. Radii passed here are measured to the
middle of the pen.
"""
import math
from typing import List, Tuple

from PIL import ImageDraw

from ..core.geometry import bounding_box, polar_point
from .theme import to_rgb

BLACK = 0x000000

# Each gradient step runs this many percentage points into the next one
STEP_OVERLAP = 1.0

TWELVE_O_CLOCK = -90.0
SIX_O_CLOCK = 90.0

ArcStep = Tuple[float, float, int]


def clamp_percentage(percentage: float) -> float:
    return max(0.0, min(100.0, float(percentage)))


def eased_ratio(ratio: float) -> float:
    """Ease-in curve that front-loads the color change: ratio ** 1.5."""
    ratio = max(0.0, min(1.0, ratio))
    return max(0.0, min(1.0, ratio ** 1.5))


def lerp_eased(start: int, end: int, ratio: float) -> int:
    """
    Blend two packed RGB colors channel by channel.
    
    Args:
        start: Color at ratio 0
        end: Color at ratio 1
        ratio: Blend position, clamped to [0, 1]
    
    Returns:
        Packed 0xRRGGBB color
    """
    t = eased_ratio(ratio)
    color = 0
    for shift in (16, 8, 0):
        a = (start >> shift) & 0xFF
        b = (end >> shift) & 0xFF
        channel = int(round(a + (b - a) * t))
        color |= max(0, min(255, channel)) << shift
    return color


def gradient_step_count(percentage: float) -> int:
    """
    Number of gradient steps for an arc: floor(p * (3.2 - 2.0 * p / 100)).
    
    Larger arcs get proportionally more steps. Any visible arc gets at
    least one.
    """
    p = clamp_percentage(percentage)
    if p <= 0:
        return 0
    return max(1, int(math.floor(p * (3.2 - 2.0 * (p / 100.0)))))


def arc_steps(percentage: float, color: int) -> List[ArcStep]:
    """
    Split a percentage arc into gradient steps.
    
    Returns:
        (start_percent, end_percent, color) per step, in drawing order
    """
    p = clamp_percentage(percentage)
    count = gradient_step_count(p)
    if count == 0:
        return []
    
    step_size = p / count
    steps = []
    for i in range(count):
        start = i * step_size
        end = min(start + step_size + STEP_OVERLAP, p)
        steps.append((start, end, lerp_eased(BLACK, color, start / p)))
    return steps


def draw_percentage_arc(draw: ImageDraw.ImageDraw, cx: float, cy: float, radius: float,
                        pen_width: int, percentage: float, color: int,
                        radius_offset: float = 0) -> int:
    """
    Draw a clockwise ring segment from 12 o'clock covering percentage of the
    circle, fading in from black and finished with a round cap.
    
    Returns:
        Number of gradient steps drawn
    """
    steps = arc_steps(percentage, color)
    if not steps:
        return 0
    
    r = radius + radius_offset
    box = bounding_box(cx, cy, r + pen_width / 2.0)
    for start, end, step_color in steps:
        draw.arc(box, TWELVE_O_CLOCK + start * 3.6, TWELVE_O_CLOCK + end * 3.6,
                 fill=to_rgb(step_color), width=pen_width)
    
    # Cap at the terminal angle in the full color
    p = clamp_percentage(percentage)
    tip_x, tip_y = polar_point(90.0 - p * 3.6, cx, cy, r)
    draw.ellipse(bounding_box(tip_x, tip_y, pen_width / 1.8), fill=to_rgb(color))
    return len(steps)


def draw_bottom_balanced_arc(draw: ImageDraw.ImageDraw, cx: float, cy: float, radius: float,
                             pen_width: int, percentage: float, color: int,
                             radius_offset: float = 0) -> bool:
    """
    Draw a single-color arc centered on 6 o'clock spreading evenly left and
    right. At 100% or more the full circle is drawn.
    
    Returns:
        True if anything was drawn
    """
    if percentage <= 0:
        return False
    
    r = radius + radius_offset
    box = bounding_box(cx, cy, r + pen_width / 2.0)
    fill = to_rgb(color)
    if percentage >= 100:
        draw.arc(box, 0, 360, fill=fill, width=pen_width)
        return True
    
    half_sweep = percentage * 3.6 / 2.0
    draw.arc(box, SIX_O_CLOCK - half_sweep, SIX_O_CLOCK + half_sweep, fill=fill, width=pen_width)
    for dial_angle in (270.0 - half_sweep, 270.0 + half_sweep):
        end_x, end_y = polar_point(dial_angle, cx, cy, r)
        draw.ellipse(bounding_box(end_x, end_y, pen_width / 2.0), fill=fill)
    return True
