"""
Unit tests for the configuration service.
"""

import pytest

from healthdial.core.config_service import DEFAULTS, ConfigService

ENV_KEYS = (
    'TIMEZONE', 'DISPLAY_WIDTH', 'DISPLAY_HEIGHT', 'DISPLAY_FULLSCREEN', 'DISPLAY_OUTPUT',
    'DISPLAY_BUFFERED', 'BURN_IN_ENABLED', 'LOCATION_LATITUDE', 'LOCATION_LONGITUDE',
    'SENSORS_SIMULATE', 'LOG_LEVEL',
)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text(
        "timezone: Europe/London\n"
        "display:\n"
        "  width: 360\n"
        "burn_in:\n"
        "  interval: 10\n"
    )
    return path


@pytest.fixture
def service(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    svc = ConfigService()
    yield svc
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    svc.reload()


class TestConfigService:
    """Tests for YAML loading and environment overrides."""

    @pytest.mark.unit
    def test_singleton(self):
        assert ConfigService() is ConfigService()

    @pytest.mark.unit
    def test_yaml_merged_over_defaults(self, service, config_file):
        service.reload(config_file)
        assert service.get('timezone') == 'Europe/London'
        assert service.get('display.width') == 360
        assert service.get('display.height') == DEFAULTS['display']['height']
        assert service.get('burn_in.interval') == 10
        assert service.get('burn_in.sequence') == [0, 1]

    @pytest.mark.unit
    def test_env_overrides_yaml(self, service, config_file, monkeypatch):
        monkeypatch.setenv('DISPLAY_WIDTH', '454')
        monkeypatch.setenv('TIMEZONE', 'America/New_York')
        monkeypatch.setenv('BURN_IN_ENABLED', 'false')
        monkeypatch.setenv('DISPLAY_OUTPUT', 'Snapshot')
        monkeypatch.setenv('LOCATION_LATITUDE', '51.5')
        monkeypatch.setenv('LOG_LEVEL', 'debug')
        service.reload(config_file)
        assert service.get('display.width') == 454
        assert service.get('timezone') == 'America/New_York'
        assert service.get('burn_in.enabled') is False
        assert service.get('display.output') == 'snapshot'
        assert service.get('location.latitude') == pytest.approx(51.5)
        assert service.get('logging.level') == 'DEBUG'

    @pytest.mark.unit
    def test_bad_numeric_env_ignored(self, service, config_file, monkeypatch):
        monkeypatch.setenv('DISPLAY_WIDTH', 'wide')
        monkeypatch.setenv('LOCATION_LONGITUDE', 'west')
        service.reload(config_file)
        assert service.get('display.width') == 360
        assert service.get('location.longitude') is None

    @pytest.mark.unit
    def test_get_default_for_missing_key(self, service):
        assert service.get('display.nope', 'fallback') == 'fallback'
        assert service.get('timezone.too.deep', 7) == 7

    @pytest.mark.unit
    def test_set_creates_nested_keys(self, service):
        service.set('extra.nested.value', 3)
        assert service.get('extra.nested.value') == 3

    @pytest.mark.unit
    def test_get_all_is_a_copy(self, service):
        snapshot = service.get_all()
        snapshot['display']['width'] = 1
        assert service.get('display.width') != 1
