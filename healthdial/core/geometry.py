"""
Geometry - angle/coordinate math and hand polygons for the dial.

All functions are pure. Angles passed to polar_point follow the dial
convention: 0 degrees is east (3 o'clock) and angles grow counter-clockwise
on screen, so the screen Y component is inverted.
"""
import math
from typing import List, Sequence, Tuple

Point = Tuple[float, float]


def polar_point(angle_deg: float, cx: float, cy: float, radius: float) -> Point:
    """
    Place a point on a circle around (cx, cy).
    
    Args:
        angle_deg: Angle in degrees, 0 = east, counter-clockwise positive
        cx: Circle center X
        cy: Circle center Y
        radius: Distance from center
    
    Returns:
        Tuple of (x, y) screen coordinates
    """
    rad = math.radians(angle_deg)
    return (cx + radius * math.cos(rad), cy - radius * math.sin(rad))


def radial_offset(x: float, y: float, offset: float, cx: float = 0.0, cy: float = 0.0) -> Point:
    """
    Push a point away from (or toward) the center by a number of pixels.
    
    The point's vector from the center is scaled by (r + offset) / r.
    A point sitting exactly on the center is returned unchanged.
    """
    dx = x - cx
    dy = y - cy
    r = math.hypot(dx, dy)
    if r == 0:
        return (x, y)
    scale = (r + offset) / r
    return (cx + dx * scale, cy + dy * scale)


def hand_polygon(length: float, tail_length: float, width: float, tip_factor: float) -> List[Point]:
    """
    Build a dart-shaped hand centered on the origin and pointing up (-Y).
    
    Args:
        length: Distance from the pivot to the shoulders
        tail_length: Distance the hand extends behind the pivot
        width: Full hand width at tail and shoulders
        tip_factor: Tip distance as a multiple of length
    
    Returns:
        Five points: tail-left, shoulder-left, tip, shoulder-right, tail-right
    """
    half = width / 2.0
    return [
        (-half, tail_length),
        (-half, -length),
        (0.0, -length * tip_factor),
        (half, -length),
        (half, tail_length),
    ]


def rotate_and_translate(points: Sequence[Point], angle_rad: float,
                         origin_x: float, origin_y: float) -> List[Point]:
    """
    Rotate points about the origin, then move them to (origin_x, origin_y).
    
    With screen Y pointing down a positive angle turns clockwise, which is
    the direction clock hands travel.
    """
    cos_a = math.cos(angle_rad)
    sin_a = math.sin(angle_rad)
    return [
        (x * cos_a - y * sin_a + origin_x, x * sin_a + y * cos_a + origin_y)
        for x, y in points
    ]


def offset_polygon(points: Sequence[Point], offset: float, cx: float, cy: float) -> List[Point]:
    """Apply radial_offset to every point of a polygon."""
    return [radial_offset(x, y, offset, cx, cy) for x, y in points]


def bounding_box(cx: float, cy: float, radius: float) -> Tuple[float, float, float, float]:
    """Pillow-style [x0, y0, x1, y1] box for a circle."""
    return (cx - radius, cy - radius, cx + radius, cy + radius)
