"""
Burn-In Shifter - periodic radius shift for always-on panels
"""
from dataclasses import dataclass
from typing import Sequence, Tuple

DEFAULT_INTERVAL = 30
DEFAULT_SEQUENCE = (0, 1)


@dataclass(frozen=True)
class BurnInState:
    tick: int
    radius_offset: int


class BurnInShifter:
    """
    Cyclic frame counter that steps the drawing radius through a fixed
    sequence of small pixel offsets.
    
    Every interval-th tick the offset becomes
    sequence[(tick // interval) % len(sequence)].
    """
    
    def __init__(self, interval: int = DEFAULT_INTERVAL,
                 sequence: Sequence[int] = DEFAULT_SEQUENCE, enabled: bool = True):
        """
        Initialize the shifter.
        
        Args:
            interval: Frames between offset changes
            sequence: Offsets in pixels, cycled in order
            enabled: When False the offset stays at 0
        """
        if interval <= 0:
            raise ValueError(f"Burn-in interval must be positive, got {interval}")
        if not sequence:
            raise ValueError("Burn-in sequence must not be empty")
        
        self._interval = interval
        self._sequence: Tuple[int, ...] = tuple(int(v) for v in sequence)
        self._enabled = enabled
        self._tick = 0
        self._radius_offset = self._sequence[0] if enabled else 0
    
    def tick(self) -> BurnInState:
        """Advance one frame and return the new state"""
        self._tick += 1
        if self._enabled and self._tick % self._interval == 0:
            index = (self._tick // self._interval) % len(self._sequence)
            self._radius_offset = self._sequence[index]
        return self.state
    
    @property
    def state(self) -> BurnInState:
        return BurnInState(self._tick, self._radius_offset)
    
    @property
    def radius_offset(self) -> int:
        return self._radius_offset
    
    @property
    def sequence(self) -> Tuple[int, ...]:
        return self._sequence
