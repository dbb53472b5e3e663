"""
Test cases for the configuration management system.
Tests config loading, environment overrides and typed access.
"""

import dataclasses
import json
import os
from unittest.mock import patch

import pytest

from tracking_core.config_manager import (
    AppConfig,
    ConfigManager,
    TelemetryConfig,
    TrackingConfig,
)


@pytest.fixture
def clean_env():
    with patch.dict(os.environ, {}, clear=True):
        yield


@pytest.fixture
def config_file(tmp_path):
    return tmp_path / "tracking_config.json"


class TestConfigManager:
    """Test the ConfigManager class functionality."""

    def test_defaults_without_file(self, clean_env, config_file):
        """Missing file means defaults: tracking on but no endpoints."""
        manager = ConfigManager(str(config_file))

        tracking = manager.get_tracking_config()
        assert tracking.enabled
        assert tracking.ingestion_url == ""
        assert tracking.session_timeout_minutes == 30
        assert tracking.rotate_id_on_resume

        telemetry = manager.get_telemetry_config()
        assert not telemetry.is_enabled
        assert telemetry.build_mode == "production"
        assert not telemetry.is_development

    def test_load_config_from_file(self, clean_env, config_file):
        """File values override defaults section by section."""
        config_file.write_text(json.dumps({
            "tracking": {"ingestion_url": "http://ingest.test", "session_timeout_minutes": 15},
            "telemetry": {"endpoint_url": "https://telemetry.test/errors", "build_mode": "development"},
            "app": {"port": 9000}
        }))
        manager = ConfigManager(str(config_file))

        tracking = manager.get_tracking_config()
        assert tracking.ingestion_url == "http://ingest.test"
        assert tracking.session_timeout_minutes == 15
        assert tracking.request_timeout_seconds == 5.0

        telemetry = manager.get_telemetry_config()
        assert telemetry.is_enabled
        assert telemetry.is_development
        assert telemetry.user_agent == tracking.user_agent

        app_config = manager.get_app_config()
        assert app_config.port == 9000
        assert app_config.host == "127.0.0.1"

    def test_invalid_json_falls_back_to_defaults(self, clean_env, config_file):
        config_file.write_text("{not json")
        manager = ConfigManager(str(config_file))
        assert manager.get_tracking_config().ingestion_url == ""

    def test_environment_overrides_file(self, config_file):
        config_file.write_text(json.dumps({"tracking": {"ingestion_url": "http://file.test"}}))
        env = {
            "INGESTION_URL": "http://env.test",
            "TRACKING_ENABLED": "false",
            "SESSION_TIMEOUT_MINUTES": "45",
            "TELEMETRY_URL": "https://telemetry.env.test",
            "BUILD_MODE": "dev",
            "APP_PORT": "8123",
            "APP_DEBUG": "true"
        }
        with patch.dict(os.environ, env, clear=True):
            manager = ConfigManager(str(config_file))

        tracking = manager.get_tracking_config()
        assert tracking.ingestion_url == "http://env.test"
        assert not tracking.enabled
        assert tracking.session_timeout_minutes == 45
        assert manager.get_telemetry_config().endpoint_url == "https://telemetry.env.test"
        assert manager.get_telemetry_config().is_development
        assert manager.get_app_config() == AppConfig(host="127.0.0.1", port=8123, debug=True)

    def test_configs_are_immutable(self, clean_env, config_file):
        manager = ConfigManager(str(config_file))
        tracking = manager.get_tracking_config()
        with pytest.raises(dataclasses.FrozenInstanceError):
            tracking.ingestion_url = "http://elsewhere.test"

    def test_reload_picks_up_changes(self, clean_env, config_file):
        manager = ConfigManager(str(config_file))
        config_file.write_text(json.dumps({"telemetry": {"endpoint_url": "https://t.test"}}))
        manager.reload()
        assert manager.get_telemetry_config().endpoint_url == "https://t.test"

    def test_save_config_round_trip(self, clean_env, config_file):
        manager = ConfigManager(str(config_file))
        manager.save_config()
        saved = json.loads(config_file.read_text(encoding="utf-8"))
        assert set(saved) == {"tracking", "telemetry", "app"}
        assert ConfigManager(str(config_file)).get_tracking_config() == manager.get_tracking_config()

    def test_get_config_returns_copy(self, clean_env, config_file):
        manager = ConfigManager(str(config_file))
        raw = manager.get_config()
        raw["extra"] = {}
        assert "extra" not in manager.get_config()


class TestConfigDataclasses:
    """Test the typed configuration records."""

    def test_tracking_config(self):
        config = TrackingConfig(
            enabled=True,
            ingestion_url="http://ingest.test",
            session_timeout_minutes=30,
            expiry_check_interval_seconds=60,
            request_timeout_seconds=5.0,
            rotate_id_on_resume=False,
            user_agent="ua"
        )
        assert not config.rotate_id_on_resume

    def test_telemetry_config_modes(self):
        config = TelemetryConfig(endpoint_url="", build_mode="Debug",
                                 request_timeout_seconds=1.0, beacon_queue_size=1)
        assert config.is_development
        assert not config.is_enabled
        assert config.user_agent == ""
