"""
Configuration Service - YAML config with environment variable overrides
"""
import os
import yaml
from copy import deepcopy
from typing import Any, Callable, Dict, Optional, Tuple
from pathlib import Path


DEFAULTS: Dict[str, Any] = {
    'timezone': 'UTC',
    'display': {
        'width': 416,
        'height': 416,
        'fullscreen': False,
        'output': 'window',
        'buffered': True,
        'font_file': '',
        'update_interval': 1.0,
        'low_power_interval': 60.0,
        'low_power_start_hour': 23,
        'low_power_end_hour': 6,
        'framebuffer_device': '/dev/fb0',
    },
    'burn_in': {
        'enabled': True,
        'interval': 30,
        'sequence': [0, 1],
    },
    'telemetry': {
        'expiration_seconds': {
            'heart_rate': 120,
            'body_battery': 900,
            'stress': 900,
            'activity': 1800,
            'weather': 3600,
            'profile': 86400,
            'status': 300,
        }
    },
    'location': {
        'latitude': None,
        'longitude': None,
    },
    'icons': {
        'atlas_path': '',
        'table': {},
    },
    'sensors': {
        'simulate': True,
    },
    'logging': {
        'level': 'INFO',
    },
}


def _truthy(value: str) -> bool:
    return value.lower() in ('true', '1', 'yes', 'on')


# (environment variable, config key, parser)
ENV_OVERRIDES: Tuple[Tuple[str, str, Callable[[str], Any]], ...] = (
    ('TIMEZONE', 'timezone', str),
    ('DISPLAY_WIDTH', 'display.width', int),
    ('DISPLAY_HEIGHT', 'display.height', int),
    ('DISPLAY_FULLSCREEN', 'display.fullscreen', _truthy),
    ('DISPLAY_OUTPUT', 'display.output', str.lower),
    ('DISPLAY_BUFFERED', 'display.buffered', _truthy),
    ('BURN_IN_ENABLED', 'burn_in.enabled', _truthy),
    ('LOCATION_LATITUDE', 'location.latitude', float),
    ('LOCATION_LONGITUDE', 'location.longitude', float),
    ('SENSORS_SIMULATE', 'sensors.simulate', _truthy),
    ('LOG_LEVEL', 'logging.level', str.upper),
)

SEARCH_PATHS = (
    Path("/data/config.yaml"),
    Path("config/default.yaml"),
    Path(__file__).parent.parent / "config" / "default.yaml",
)


class ConfigService:
    """
    Dial configuration: built-in defaults, then the first YAML file found,
    then environment variables on top.
    
    Runs before logging is set up, so problems are reported with print().
    """
    
    _instance: Optional['ConfigService'] = None
    _config: Dict[str, Any] = {}
    
    def __new__(cls):
        """One shared instance per process"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance
    
    def __init__(self):
        if not self._config:
            self.reload()
    
    def reload(self, path: Optional[Path] = None) -> None:
        """
        Rebuild the configuration from scratch.
        
        Args:
            path: Explicit config file, tried before SEARCH_PATHS
        """
        self._config = self._merge(deepcopy(DEFAULTS), self._load_yaml_config(path))
        self._apply_env_overrides()
    
    def _load_yaml_config(self, path: Optional[Path] = None) -> Dict[str, Any]:
        """Return the first readable YAML mapping, or {} if none loads"""
        candidates = ([Path(path)] if path is not None else []) + list(SEARCH_PATHS)
        for candidate in candidates:
            if not candidate.exists():
                continue
            try:
                with open(candidate, 'r') as f:
                    loaded = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                print(f"Warning: Failed to load {candidate}: {e}")
                continue
            if isinstance(loaded, dict):
                return loaded
            print(f"Warning: {candidate} is not a mapping, ignoring it")
        return {}
    
    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge override into base"""
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                self._merge(base[key], value)
            else:
                base[key] = value
        return base
    
    def _apply_env_overrides(self) -> None:
        for env_name, key, parse in ENV_OVERRIDES:
            raw = os.environ.get(env_name)
            if not raw:
                continue
            try:
                self.set(key, parse(raw))
            except ValueError:
                print(f"Warning: Ignoring {env_name}={raw!r}, keeping {key}={self.get(key)!r}")
    
    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dotted key, e.g. config.get('burn_in.interval').
        Missing keys and explicit nulls both return default.
        """
        node: Any = self._config
        for part in key.split('.'):
            if not isinstance(node, dict) or node.get(part) is None:
                return default
            node = node[part]
        return node
    
    def get_all(self) -> Dict[str, Any]:
        """Deep copy of the whole configuration"""
        return deepcopy(self._config)
    
    def set(self, key: str, value: Any) -> None:
        """Set a dotted key, creating intermediate sections"""
        *sections, leaf = key.split('.')
        target = self._config
        for section in sections:
            target = target.setdefault(section, {})
        target[leaf] = value


# Global instance
config = ConfigService()
