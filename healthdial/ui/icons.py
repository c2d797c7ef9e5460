"""
Icons - enumerated icon ids and a fixed-size lookup into one shared atlas
"""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from PIL import Image

from ..core.logging_service import get_logger


class IconId(Enum):
    DO_NOT_DISTURB = 0
    NOTIFICATIONS = 1
    HEART = 2
    STEPS = 3
    RECOVERY = 4
    CLEAR_DAY = 5
    CLEAR_NIGHT = 6
    PARTLY_CLOUDY = 7
    CLOUDY = 8
    RAIN = 9
    SNOW = 10
    THUNDER = 11
    FOG = 12
    UNKNOWN_WEATHER = 13


@dataclass(frozen=True)
class IconRect:
    x: int
    y: int
    w: int
    h: int


def weather_icon(condition: str, is_day: bool = True) -> IconId:
    """
    Map a weather condition string to an icon.
    
    Args:
        condition: Weather condition (e.g., 'Clear', 'Partly cloudy', 'Rain')
        is_day: Picks the sun or moon variant for clear skies
    """
    condition_lower = (condition or '').lower()
    
    if 'thunder' in condition_lower or 'storm' in condition_lower:
        return IconId.THUNDER
    elif 'snow' in condition_lower or 'sleet' in condition_lower or 'hail' in condition_lower:
        return IconId.SNOW
    elif 'rain' in condition_lower or 'drizzle' in condition_lower or 'shower' in condition_lower:
        return IconId.RAIN
    elif 'fog' in condition_lower or 'mist' in condition_lower or 'haze' in condition_lower:
        return IconId.FOG
    elif 'partly' in condition_lower or 'few' in condition_lower:
        return IconId.PARTLY_CLOUDY
    elif 'cloud' in condition_lower or 'overcast' in condition_lower:
        return IconId.CLOUDY
    elif 'clear' in condition_lower or 'sun' in condition_lower or 'fair' in condition_lower:
        return IconId.CLEAR_DAY if is_day else IconId.CLEAR_NIGHT
    else:
        return IconId.UNKNOWN_WEATHER


class IconAtlas:
    """
    One shared atlas image plus a lookup table indexed by IconId.value.
    
    Icons with no table entry, or an atlas that failed to load, resolve to
    None and are simply not drawn.
    """
    
    def __init__(self, image: Optional[Image.Image], table: Sequence[Optional[IconRect]]):
        if len(table) != len(IconId):
            raise ValueError(f"Icon table needs {len(IconId)} entries, got {len(table)}")
        self._image = image
        self._table: List[Optional[IconRect]] = list(table)
        self._sprites: Dict[IconId, Image.Image] = {}
    
    @classmethod
    def empty(cls) -> 'IconAtlas':
        return cls(None, [None] * len(IconId))
    
    @classmethod
    def load(cls, atlas_path: str, rects: Dict[str, Sequence[int]]) -> 'IconAtlas':
        """
        Load the atlas image and build the table from a name -> [x, y, w, h]
        mapping, as found under `icons.table` in the config.
        """
        if not atlas_path or not Path(atlas_path).exists():
            get_logger().info("No icon atlas configured, icons disabled")
            return cls.empty()
        
        table: List[Optional[IconRect]] = [None] * len(IconId)
        for name, rect in (rects or {}).items():
            try:
                icon = IconId[name.upper()]
                table[icon.value] = IconRect(*(int(v) for v in rect))
            except (KeyError, TypeError, ValueError):
                get_logger().warning(f"Ignoring bad icon table entry {name}: {rect}")
        
        try:
            image = Image.open(atlas_path).convert('RGBA')
        except OSError as e:
            get_logger().error(f"Failed to load icon atlas {atlas_path}: {e}")
            return cls.empty()
        
        get_logger().info(f"Loaded icon atlas {atlas_path} ({sum(r is not None for r in table)} icons)")
        return cls(image, table)
    
    def resolve(self, icon: IconId) -> Optional[IconRect]:
        if self._image is None:
            return None
        return self._table[icon.value]
    
    def sprite(self, icon: IconId) -> Optional[Image.Image]:
        """Cropped icon image, cached after first use"""
        rect = self.resolve(icon)
        if rect is None:
            return None
        if icon not in self._sprites:
            self._sprites[icon] = self._image.crop((rect.x, rect.y, rect.x + rect.w, rect.y + rect.h))
        return self._sprites[icon]
    
    def draw(self, target: Image.Image, icon: IconId, x: float, y: float) -> bool:
        """
        Paste an icon centered on (x, y).
        
        Returns:
            True if the icon was drawn
        """
        sprite = self.sprite(icon)
        if sprite is None:
            return False
        left = int(round(x - sprite.width / 2))
        top = int(round(y - sprite.height / 2))
        target.paste(sprite, (left, top), sprite)
        return True
