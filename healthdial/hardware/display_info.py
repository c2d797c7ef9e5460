"""
Display Info - Screen size, fonts and surface capability of the device
"""
import os
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from PIL import Image, ImageFont

from ..core.logging_service import get_logger

FONT_PATHS = [
    '/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf',
    '/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf',
    '/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf',
]

# Round AMOLED panel used when nothing else is known
FALLBACK_SIZE = (416, 416)


class SurfaceCapability(Enum):
    BUFFERED = 'buffered'  # off-screen images can be kept between frames
    DIRECT = 'direct'      # everything is drawn straight into the frame


@dataclass(frozen=True)
class FontMetrics:
    size: int
    height: int
    digit_width: float


class DeviceContext:
    """
    Everything the face needs to know about the panel it draws on.
    
    Size and surface capability are resolved once; fonts are loaded lazily
    and cached per size.
    """
    
    def __init__(self, width: int = 0, height: int = 0, font_file: str = '',
                 buffered: Optional[bool] = True):
        """
        Initialize device context.
        
        Args:
            width: Panel width, 0 to auto-detect
            height: Panel height, 0 to auto-detect
            font_file: TrueType font, searched in FONT_PATHS when empty
            buffered: Allow off-screen buffers; None to probe
        """
        self._width = width
        self._height = height
        if not width or not height:
            self._width, self._height = self.detect()
        
        self._font_file = font_file or self._find_font()
        self._fonts: Dict[int, ImageFont.ImageFont] = {}
        self._capability = self._resolve_capability(buffered)
    
    def detect(self) -> Tuple[int, int]:
        """
        Detect screen resolution using pygame.
        
        Returns:
            Tuple of (width, height) in pixels
        """
        try:
            import pygame
            pygame.display.init()
            info = pygame.display.Info()
            if info.current_w > 0 and info.current_h > 0:
                side = min(info.current_w, info.current_h)
                return (side, side)
        except Exception as e:
            get_logger().warning(f"Display detection failed: {e}")
        return FALLBACK_SIZE
    
    def _find_font(self) -> str:
        for path in FONT_PATHS:
            if os.path.exists(path):
                return path
        get_logger().warning("No TrueType font found, using Pillow default font")
        return ''
    
    def _resolve_capability(self, buffered: Optional[bool]) -> SurfaceCapability:
        """Decide once whether static layers may be pre-rendered off-screen"""
        if buffered is False:
            capability = SurfaceCapability.DIRECT
        else:
            try:
                Image.new('RGBA', (self._width, self._height))
                capability = SurfaceCapability.BUFFERED
            except (MemoryError, ValueError) as e:
                get_logger().warning(f"Off-screen buffers unavailable: {e}")
                capability = SurfaceCapability.DIRECT
        get_logger().info(f"Surface capability: {capability.value}")
        return capability
    
    def font(self, size: int) -> ImageFont.ImageFont:
        """Get a font of the given pixel size"""
        if size not in self._fonts:
            if self._font_file:
                try:
                    self._fonts[size] = ImageFont.truetype(self._font_file, size)
                except OSError as e:
                    get_logger().error(f"Failed to load font {self._font_file}: {e}")
                    self._font_file = ''
            if size not in self._fonts:
                self._fonts[size] = ImageFont.load_default(size=size)
        return self._fonts[size]
    
    def font_metrics(self, size: int) -> FontMetrics:
        """Measure line height and the width of one digit"""
        font = self.font(size)
        left, top, right, bottom = font.getbbox('0Ag')
        return FontMetrics(size=size, height=bottom - top, digit_width=font.getlength('0'))
    
    def text_width(self, text: str, size: int) -> float:
        return self.font(size).getlength(text)
    
    @property
    def width(self) -> int:
        return self._width
    
    @property
    def height(self) -> int:
        return self._height
    
    @property
    def capability(self) -> SurfaceCapability:
        return self._capability
    
    def __repr__(self) -> str:
        """Developer representation"""
        return f"DeviceContext(width={self._width}, height={self._height}, capability={self._capability.value})"
