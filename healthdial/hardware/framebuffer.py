"""
Framebuffer - write rendered frames straight to a Linux framebuffer device
"""
from pathlib import Path

import numpy as np
from PIL import Image

from ..core.logging_service import get_logger


def to_rgb565(image: Image.Image) -> bytes:
    """Pack an image into little-endian RGB565"""
    rgb_image = image.convert('RGB')
    arr = np.asarray(rgb_image, dtype=np.uint8)
    r = (arr[:, :, 0] >> 3).astype(np.uint16)
    g = (arr[:, :, 1] >> 2).astype(np.uint16)
    b = (arr[:, :, 2] >> 3).astype(np.uint16)
    return ((r << 11) | (g << 5) | b).astype('<u2').tobytes()


class FramebufferOutput:
    """
    Full-frame writer for /dev/fbN. Frames smaller than the framebuffer
    are centered on a black canvas.
    """
    
    def __init__(self, device: str = '/dev/fb0'):
        self._device = device
        sysfs = Path('/sys/class/graphics') / Path(device).name
        self._width, self._height = self._read_size(sysfs)
        self._bpp = self._read_bpp(sysfs)
        get_logger().info(f"Framebuffer {device}: {self._width}x{self._height} @ {self._bpp}bpp")
    
    def _read_size(self, sysfs: Path):
        """Get framebuffer dimensions."""
        try:
            w, h = (sysfs / 'virtual_size').read_text().strip().split(',')
            return int(w), int(h)
        except (OSError, ValueError):
            return 480, 480
    
    def _read_bpp(self, sysfs: Path) -> int:
        """Read framebuffer bits-per-pixel from sysfs, default to 16 if unknown."""
        try:
            return int((sysfs / 'bits_per_pixel').read_text().strip())
        except (OSError, ValueError):
            return 16
    
    def encode(self, frame: Image.Image) -> bytes:
        """Convert a frame to the framebuffer's pixel format"""
        if frame.size != (self._width, self._height):
            canvas = Image.new('RGB', (self._width, self._height), (0, 0, 0))
            canvas.paste(frame, ((self._width - frame.width) // 2, (self._height - frame.height) // 2))
            frame = canvas
        
        if self._bpp == 32:
            return frame.convert('RGBA').tobytes('raw', 'BGRA')
        if self._bpp == 16:
            return to_rgb565(frame)
        return frame.convert('RGB').tobytes('raw', 'BGR')
    
    def show(self, frame: Image.Image) -> None:
        """Write one frame; I/O failures are logged and the frame dropped"""
        try:
            with open(self._device, 'wb') as fb:
                fb.write(self.encode(frame))
        except OSError as e:
            get_logger().error(f"Failed to write to framebuffer: {e}")
    
    def stop(self) -> None:
        """Nothing is held open between frames"""
