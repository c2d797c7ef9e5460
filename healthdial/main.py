"""
Main entry point for Health Dial
"""
import argparse
import signal
import sys
import time
from pathlib import Path
from typing import Optional

from healthdial.core.burn_in import BurnInShifter
from healthdial.core.clock_service import ClockService
from healthdial.core.config_service import config
from healthdial.core.day_night import DayNightTracker
from healthdial.core.frame_orchestrator import FrameContext, FrameOrchestrator
from healthdial.core.logging_service import get_logger
from healthdial.core.providers import ProviderSet
from healthdial.core.telemetry_cache import TelemetryCache
from healthdial.hardware.display_info import DeviceContext
from healthdial.hardware.sensors import simulated_providers
from healthdial.ui.face_renderer import FaceRenderer
from healthdial.ui.icons import IconAtlas
from healthdial.ui.layout import LayoutEngine

VERSION = '1.0.0'


class Application:
    """
    Main application orchestrator.
    """
    
    def __init__(self, config_path: Optional[Path] = None):
        """Initialize application"""
        config.reload(config_path)
        
        log_level = config.get('logging.level', 'INFO')
        self._logger = get_logger('health-dial', log_level)
        self._logger.configure(log_level)
        self._logger.startup_banner(VERSION, config.get_all())
        
        self._orchestrator: Optional[FrameOrchestrator] = None
        self._output = None
        self._running = False
    
    def _build_providers(self) -> ProviderSet:
        if config.get('sensors.simulate', True):
            self._logger.info("Using simulated sensors")
            return simulated_providers()
        self._logger.warning("No telemetry providers attached, data fields will stay blank")
        return ProviderSet()
    
    def _build_burn_in(self) -> BurnInShifter:
        enabled = config.get('burn_in.enabled', True)
        try:
            return BurnInShifter(
                interval=int(config.get('burn_in.interval', 30)),
                sequence=config.get('burn_in.sequence', [0, 1]),
                enabled=enabled,
            )
        except (TypeError, ValueError) as e:
            self._logger.warning(f"Invalid burn-in settings ({e}), using defaults")
            return BurnInShifter(enabled=enabled)
    
    def _config_interval(self, key: str, default: float) -> float:
        """Positive frame interval in seconds, default on bad values"""
        raw = config.get(key, default)
        try:
            interval = float(raw)
        except (TypeError, ValueError):
            interval = 0.0
        if not interval > 0 or interval == float('inf'):
            self._logger.warning(f"Invalid {key}: {raw!r}, using {default}")
            return default
        return interval
    
    def _config_hour(self, key: str, default: int) -> int:
        """Hour of day 0-23, default on bad values"""
        raw = config.get(key, default)
        try:
            hour = int(raw)
        except (TypeError, ValueError):
            hour = -1
        if not 0 <= hour <= 23:
            self._logger.warning(f"Invalid {key}: {raw!r}, using {default}")
            return default
        return hour
    
    def _initialize_services(self) -> None:
        """Initialize all services"""
        self._logger.info("Initializing services")
        
        clock = ClockService(
            config.get('timezone', 'UTC'),
            low_power_start_hour=self._config_hour('display.low_power_start_hour', 23),
            low_power_end_hour=self._config_hour('display.low_power_end_hour', 6),
        )
        self._logger.info(f"Clock service initialized: timezone={clock.timezone}")
        
        device = DeviceContext(
            width=config.get('display.width', 0),
            height=config.get('display.height', 0),
            font_file=config.get('display.font_file', ''),
            buffered=config.get('display.buffered', True),
        )
        self._logger.info(f"Device: {device!r}")
        
        burn_in = self._build_burn_in()
        icons = IconAtlas.load(config.get('icons.atlas_path', ''), config.get('icons.table', {}))
        
        context = FrameContext(
            device=device,
            providers=self._build_providers(),
            clock=clock,
            layout_engine=LayoutEngine(
                expiration_seconds=config.get('telemetry.expiration_seconds', {}),
                burn_in_offsets=burn_in.sequence,
            ),
            cache=TelemetryCache(),
            burn_in=burn_in,
            day_night=DayNightTracker(config.get('location.latitude'), config.get('location.longitude')),
            renderer=FaceRenderer(device, icons),
        )
        self._orchestrator = FrameOrchestrator(
            context,
            update_interval=self._config_interval('display.update_interval', 1.0),
            low_power_interval=self._config_interval('display.low_power_interval', 60.0),
        )
    
    def _initialize_output(self, output: str) -> None:
        """Open the configured output device"""
        device = self._orchestrator.context.device
        if output == 'framebuffer':
            from healthdial.hardware.framebuffer import FramebufferOutput
            self._output = FramebufferOutput(config.get('display.framebuffer_device', '/dev/fb0'))
        else:
            from healthdial.ui.main_window import MainWindow
            self._output = MainWindow(
                self._orchestrator,
                self._logger,
                width=device.width,
                height=device.height,
                fullscreen=config.get('display.fullscreen', False),
            )
            self._output.initialize()
    
    @property
    def orchestrator(self) -> Optional[FrameOrchestrator]:
        return self._orchestrator
    
    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown"""
        def signal_handler(signum, frame):
            self._logger.info(f"Received signal {signum}, shutting down")
            self.shutdown()
            sys.exit(0)
        
        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)
    
    def snapshot(self, path: Path) -> None:
        """Render a single frame to a PNG file"""
        self._initialize_services()
        frame = self._orchestrator.render_frame()
        frame.save(path, 'PNG')
        self._logger.info(f"Snapshot written to {path}")
    
    def _run_loop(self, frames: Optional[int]) -> None:
        """Frame loop for outputs without their own event loop"""
        self._running = True
        rendered = 0
        while self._running:
            self._output.show(self._orchestrator.render_frame())
            rendered += 1
            if frames is not None and rendered >= frames:
                break
            interval = self._orchestrator.next_interval()
            now_ts = time.time()
            time.sleep(max(0.0, interval - (now_ts % interval)))
    
    def run(self, frames: Optional[int] = None) -> None:
        """Run the application"""
        try:
            self._setup_signal_handlers()
            self._initialize_services()
            
            output = config.get('display.output', 'window')
            self._initialize_output(output)
            self._logger.info(f"Application started successfully (output={output})")
            
            if output == 'framebuffer':
                self._run_loop(frames)
            else:
                self._output.start(frames)
        
        except KeyboardInterrupt:
            self._logger.info("Keyboard interrupt received")
        except Exception as e:
            self._logger.critical(f"Fatal error: {e}", exc_info=True)
            raise
        finally:
            self.shutdown()
    
    def shutdown(self) -> None:
        """Cleanup and shutdown"""
        if self._output is None and not self._running:
            return
        self._logger.info("Shutting down application")
        self._running = False
        if self._output is not None:
            self._output.stop()
            self._output = None
        self._logger.shutdown_banner()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Analog health dial for small displays")
    parser.add_argument('--config', type=Path, help="YAML config file")
    parser.add_argument('--snapshot', type=Path, help="Render one frame to this PNG and exit")
    parser.add_argument('--frames', type=int, help="Stop after this many frames")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)
    app = Application(args.config)
    if args.snapshot or config.get('display.output') == 'snapshot':
        app.snapshot(args.snapshot or Path('health-dial.png'))
        return
    app.run(args.frames)


if __name__ == '__main__':
    main()
