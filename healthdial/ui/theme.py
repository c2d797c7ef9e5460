"""
Theme - Dark dial palette and font sizing
"""
from typing import Tuple


def to_rgb(color: int) -> Tuple[int, int, int]:
    """Unpack a 0xRRGGBB color into a Pillow RGB tuple."""
    return ((color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF)


class Theme:
    """
    Dark theme configuration for the dial.
    
    Colors are packed 0xRRGGBB integers so they can be interpolated
    channel-wise.
    """
    
    # Color Palette
    BG_PRIMARY = 0x000000         # Pure black background
    FG_PRIMARY = 0xFFFFFF         # White for main text
    FG_SECONDARY = 0xAAAAAA       # Light gray for secondary text
    FG_DIM = 0x555555             # Dim gray for minute ticks
    
    # Hands
    HAND_OUTLINE = 0x000000
    HAND_FILL = 0xDDDDDD
    HAND_LUME = 0x7FFFD4
    SECOND_HAND = 0xFF5500
    
    # Progress arcs
    BODY_BATTERY = 0x00AAFF
    STRESS = 0xFFAA00
    STEPS = 0x00FF55
    CALORIES = 0xFF3355
    ACTIVE_MINUTES = 0xAA55FF
    RECOVERY = 0x55AAAA
    
    # Heart-rate zones 0-5
    HR_DEFAULT = 0xFFFFFF
    HR_ZONES = (
        0xAAAAAA,  # resting
        0x55AAFF,  # warm up
        0x00FF55,  # easy
        0xFFFF00,  # aerobic
        0xFFAA00,  # threshold
        0xFF0000,  # maximum
    )
    
    # Font sizes as a fraction of screen width
    FONT_SCALE_DATA = 0.065
    FONT_SCALE_SMALL = 0.045
    
    # Spacing and Layout
    PADDING_SMALL = 4
    RING_GAP = 2
    
    @staticmethod
    def heart_rate_color(zone) -> int:
        """
        Get color for a heart-rate zone.
        
        Args:
            zone: Zone number 0-5, or None when unknown
        
        Returns:
            Packed color
        """
        if zone is None:
            return Theme.HR_DEFAULT
        return Theme.HR_ZONES[max(0, min(zone, len(Theme.HR_ZONES) - 1))]
    
    @staticmethod
    def data_font_size(width: int) -> int:
        """Font size for data values on a screen of the given width"""
        return max(10, int(width * Theme.FONT_SCALE_DATA))
    
    @staticmethod
    def small_font_size(width: int) -> int:
        """Font size for secondary labels on a screen of the given width"""
        return max(8, int(width * Theme.FONT_SCALE_SMALL))
