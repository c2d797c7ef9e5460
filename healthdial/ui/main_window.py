"""
Main Window - pygame presentation of rendered frames
"""
import time
from typing import Optional

import pygame
from PIL import Image

from ..core.frame_orchestrator import FrameOrchestrator
from ..core.logging_service import LoggingService

# Longest single sleep while waiting for the next frame, so close events
# are still noticed during the low-power cadence
EVENT_POLL_SECONDS = 0.1


class MainWindow:
    """
    Main pygame window for the dial.
    """
    
    def __init__(
        self,
        orchestrator: FrameOrchestrator,
        logger: LoggingService,
        width: int = 416,
        height: int = 416,
        fullscreen: bool = False,
    ):
        """
        Initialize main window.
        
        Args:
            orchestrator: Produces frames
            logger: Logging service
            width: Window width
            height: Window height
            fullscreen: Whether to run fullscreen
        """
        self._orchestrator = orchestrator
        self._logger = logger
        
        self._width = width
        self._height = height
        self._fullscreen = fullscreen
        
        self._screen: Optional[pygame.Surface] = None
        self._running = False
    
    def initialize(self) -> None:
        """Initialize pygame display"""
        self._logger.info("Initializing UI window")
        pygame.display.init()
        
        flags = pygame.FULLSCREEN if self._fullscreen else 0
        self._screen = pygame.display.set_mode((self._width, self._height), flags)
        pygame.display.set_caption("Health Dial")
        if self._fullscreen:
            pygame.mouse.set_visible(False)
        
        self._logger.info(f"UI initialized: {self._width}x{self._height}")
    
    def show(self, frame: Image.Image) -> None:
        """Blit a rendered frame centered in the window"""
        surface = pygame.image.frombuffer(frame.tobytes(), frame.size, 'RGB')
        self._screen.fill((0, 0, 0))
        self._screen.blit(surface, ((self._width - frame.width) // 2, (self._height - frame.height) // 2))
        pygame.display.flip()
    
    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.stop()
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                self.stop()
    
    def start(self, frames: Optional[int] = None) -> None:
        """
        Run the frame loop (blocking).
        
        Args:
            frames: Stop after this many frames, run until closed if None
        """
        self._running = True
        rendered = 0
        while self._running:
            self.show(self._orchestrator.render_frame())
            rendered += 1
            if frames is not None and rendered >= frames:
                break
            
            deadline = time.time() + self._orchestrator.next_interval()
            while self._running and time.time() < deadline:
                self._handle_events()
                time.sleep(min(EVENT_POLL_SECONDS, max(0.0, deadline - time.time())))
        self.stop()
    
    def stop(self) -> None:
        """Stop the loop and close the window"""
        if self._screen is None:
            return
        self._running = False
        pygame.display.quit()
        self._screen = None
        self._logger.info("UI window closed")
    
    def is_running(self) -> bool:
        """Check if window is running"""
        return self._running
