"""
설정 로드 테스트

환경변수에서 Settings를 구성하는 build_settings를 검증합니다.
"""

import pytest

from picketline.main import _b, build_settings
from picketline.settings import Settings


ENV_VARS = [
    "OPL_API_BASE_URL", "OPL_API_TIMEOUT_SEC", "OPL_API_KEY", "OPL_RADIUS_METERS",
    "OPL_KV_PATH", "OPL_CREDENTIAL_PATH", "HA_BASE_URL", "HA_TOKEN",
    "HA_DEVICE_TRACKER", "HA_NOTIFY_SERVICE", "HA_POLL_INTERVAL_SEC",
    "MONITOR_ENABLED", "METRICS_ENABLED", "HTTP_PORT", "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestBuildSettings:
    """build_settings 테스트"""

    def test_defaults(self):
        settings = build_settings()
        defaults = Settings()
        assert settings == defaults
        assert settings.api.base_url == "https://onlinepicketline.com/api"
        assert settings.api.radius_meters is None
        assert settings.observability.http_port == 8099

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("OPL_API_BASE_URL", "http://localhost:3000/api")
        monkeypatch.setenv("OPL_API_TIMEOUT_SEC", "5")
        monkeypatch.setenv("OPL_API_KEY", "secret")
        monkeypatch.setenv("OPL_RADIUS_METERS", "25000")
        monkeypatch.setenv("OPL_KV_PATH", "/tmp/kv.db")
        monkeypatch.setenv("HA_TOKEN", "ha-token")
        monkeypatch.setenv("HA_DEVICE_TRACKER", "device_tracker.phone")
        monkeypatch.setenv("HA_POLL_INTERVAL_SEC", "30")
        monkeypatch.setenv("MONITOR_ENABLED", "false")
        monkeypatch.setenv("METRICS_ENABLED", "0")
        monkeypatch.setenv("HTTP_PORT", "9000")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        settings = build_settings()

        assert settings.api.base_url == "http://localhost:3000/api"
        assert settings.api.timeout_sec == 5.0
        assert settings.api.api_key == "secret"
        assert settings.api.radius_meters == 25000
        assert settings.storage.kv_path == "/tmp/kv.db"
        assert settings.ha.token == "ha-token"
        assert settings.ha.device_tracker == "device_tracker.phone"
        assert settings.ha.poll_interval_sec == 30.0
        assert settings.monitor.enabled is False
        assert settings.observability.metrics_enabled is False
        assert settings.observability.http_port == 9000
        assert settings.observability.log_level == "DEBUG"

    @pytest.mark.parametrize("value,expected", [
        ("1", True), ("true", True), ("YES", True), ("on", True),
        ("0", False), ("false", False), ("off", False), ("", False),
    ])
    def test_bool_env(self, monkeypatch, value, expected):
        monkeypatch.setenv("MONITOR_ENABLED", value)
        assert _b("MONITOR_ENABLED", True) is expected
