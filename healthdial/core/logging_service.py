"""
Logging Service - one named stdout logger shared by every part of the dial
"""
import sys
import logging
from typing import Any, Dict, Iterable, Optional

LOGGER_NAME = 'health-dial'
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

BANNER_RULE = '=' * 60


def resolve_level(level: Any) -> int:
    """Map a level name (any case) or number to a logging level, INFO if unknown"""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


class LoggingService:
    """
    Thin wrapper over a stdlib logger with the dial's recurring messages.
    
    Provider failures are routine on a wrist-worn sensor link, so they are
    kept at DEBUG; frame statistics and lifecycle banners go out at INFO.
    """
    
    def __init__(self, name: str = LOGGER_NAME, level: str = 'INFO'):
        """
        Initialize logging service.
        
        Args:
            name: Logger name
            level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        self._logger = logging.getLogger(name)
        self._handler = logging.StreamHandler(sys.stdout)
        self._handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        
        self._logger.handlers.clear()
        self._logger.addHandler(self._handler)
        self._logger.propagate = False
        self.configure(level)
    
    def configure(self, level: Any) -> None:
        """Change the level of the logger and its handler"""
        resolved = resolve_level(level)
        self._logger.setLevel(resolved)
        self._handler.setLevel(resolved)
    
    def debug(self, message: str) -> None:
        self._logger.debug(message)
    
    def info(self, message: str) -> None:
        self._logger.info(message)
    
    def warning(self, message: str) -> None:
        self._logger.warning(message)
    
    def error(self, message: str, exc_info: bool = False) -> None:
        self._logger.error(message, exc_info=exc_info)
    
    def critical(self, message: str, exc_info: bool = False) -> None:
        self._logger.critical(message, exc_info=exc_info)
    
    def provider_failure(self, provider: str, reason: Any) -> None:
        """A provider raised or returned a sentinel; the frame carries on"""
        self._logger.debug(f"{provider} provider gave no sample: {reason}")
    
    def frame_stats(self, frames: int, average_ms: float) -> None:
        self._logger.info(f"Frame stats: {frames} renders, avg {average_ms:.1f}ms/render")
    
    def _banner(self, lines: Iterable[str]) -> None:
        self._logger.info(BANNER_RULE)
        for line in lines:
            self._logger.info(line)
        self._logger.info(BANNER_RULE)
    
    def startup_banner(self, version: str, config: Dict[str, Any]) -> None:
        """
        Log a startup summary.
        
        Args:
            version: Application version
            config: Full configuration dict
        """
        display = config.get('display', {})
        burn_in = config.get('burn_in', {})
        location = config.get('location', {})
        has_location = location.get('latitude') is not None and location.get('longitude') is not None
        self._banner([
            f"Health Dial v{version} starting up",
            f"Python: {sys.version.split()[0]}",
            f"Timezone: {config.get('timezone', 'UTC')}",
            f"Display: {display.get('width', 0)}x{display.get('height', 0)} -> {display.get('output', 'window')}",
            f"Burn-in shift: {'every %s frames' % burn_in.get('interval') if burn_in.get('enabled') else 'disabled'}",
            f"Sun times: {'astral' if has_location else 'weather only'}",
            f"Sensors: {'simulated' if config.get('sensors', {}).get('simulate') else 'none attached'}",
        ])
    
    def shutdown_banner(self) -> None:
        self._banner(["Health Dial shutting down"])
    
    @property
    def logger(self) -> logging.Logger:
        """Underlying stdlib logger"""
        return self._logger


_logging_service: Optional[LoggingService] = None


def get_logger(name: str = LOGGER_NAME, level: str = 'INFO') -> LoggingService:
    """
    Get or create the logging service singleton.
    
    Arguments only take effect on the first call.
    """
    global _logging_service
    if _logging_service is None:
        _logging_service = LoggingService(name, level)
    return _logging_service
