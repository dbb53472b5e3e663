"""
Configuration management for the tracking core.
Handles loading, validating, and providing access to tracking, telemetry and
collector settings.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass


@dataclass(frozen=True)
class TrackingConfig:
    """Session and event tracking settings."""
    enabled: bool
    ingestion_url: str
    session_timeout_minutes: int
    expiry_check_interval_seconds: int
    request_timeout_seconds: float
    rotate_id_on_resume: bool
    user_agent: str


@dataclass(frozen=True)
class TelemetryConfig:
    """Error telemetry settings.

    An empty ``endpoint_url`` disables error reporting entirely.
    """
    endpoint_url: str
    build_mode: str
    request_timeout_seconds: float
    beacon_queue_size: int
    user_agent: str = ""

    @property
    def is_enabled(self) -> bool:
        return bool(self.endpoint_url)

    @property
    def is_development(self) -> bool:
        return self.build_mode.lower() in ("development", "dev", "debug")


@dataclass(frozen=True)
class AppConfig:
    """Development collector settings."""
    host: str
    port: int
    debug: bool


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class ConfigManager:
    """Manages tracking configuration loading and access."""

    def __init__(self, config_file: str = "tracking_config.json"):
        self.config_file = Path(config_file)
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        self._config = self._get_default_config()

        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
                    self._merge_config(file_config)
            except (json.JSONDecodeError, FileNotFoundError):
                # Keep default config if file is invalid or not found
                pass

        self._override_with_env()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "tracking": {
                "enabled": True,
                "ingestion_url": "",
                "session_timeout_minutes": 30,
                "expiry_check_interval_seconds": 60,
                "request_timeout_seconds": 5.0,
                "rotate_id_on_resume": True,
                "user_agent": "tracking-core/0.1"
            },
            "telemetry": {
                "endpoint_url": "",
                "build_mode": "production",
                "request_timeout_seconds": 5.0,
                "beacon_queue_size": 64
            },
            "app": {
                "host": "127.0.0.1",
                "port": 22582,
                "debug": False
            }
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config:
                if isinstance(values, dict):
                    self._config[section].update(values)
                else:
                    self._config[section] = values
            else:
                self._config[section] = values

    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        # Tracking settings
        if os.getenv("TRACKING_ENABLED"):
            self._config["tracking"]["enabled"] = _env_flag(os.getenv("TRACKING_ENABLED"))

        if os.getenv("INGESTION_URL"):
            self._config["tracking"]["ingestion_url"] = os.getenv("INGESTION_URL")

        if os.getenv("SESSION_TIMEOUT_MINUTES"):
            self._config["tracking"]["session_timeout_minutes"] = int(os.getenv("SESSION_TIMEOUT_MINUTES"))

        if os.getenv("TRACKING_USER_AGENT"):
            self._config["tracking"]["user_agent"] = os.getenv("TRACKING_USER_AGENT")

        # Telemetry settings
        if os.getenv("TELEMETRY_URL"):
            self._config["telemetry"]["endpoint_url"] = os.getenv("TELEMETRY_URL")

        if os.getenv("BUILD_MODE"):
            self._config["telemetry"]["build_mode"] = os.getenv("BUILD_MODE")

        # Collector settings
        if os.getenv("APP_HOST"):
            self._config["app"]["host"] = os.getenv("APP_HOST")

        if os.getenv("APP_PORT"):
            self._config["app"]["port"] = int(os.getenv("APP_PORT"))

        if os.getenv("APP_DEBUG"):
            self._config["app"]["debug"] = os.getenv("APP_DEBUG").lower() == "true"

    def get_tracking_config(self) -> TrackingConfig:
        """Get session and event tracking configuration."""
        tracking = self._config["tracking"]
        return TrackingConfig(
            enabled=bool(tracking["enabled"]),
            ingestion_url=tracking["ingestion_url"],
            session_timeout_minutes=int(tracking["session_timeout_minutes"]),
            expiry_check_interval_seconds=int(tracking["expiry_check_interval_seconds"]),
            request_timeout_seconds=float(tracking["request_timeout_seconds"]),
            rotate_id_on_resume=bool(tracking["rotate_id_on_resume"]),
            user_agent=tracking["user_agent"]
        )

    def get_telemetry_config(self) -> TelemetryConfig:
        """Get error telemetry configuration."""
        telemetry = self._config["telemetry"]
        return TelemetryConfig(
            endpoint_url=telemetry["endpoint_url"],
            build_mode=telemetry["build_mode"],
            request_timeout_seconds=float(telemetry["request_timeout_seconds"]),
            beacon_queue_size=int(telemetry["beacon_queue_size"]),
            user_agent=self._config["tracking"]["user_agent"]
        )

    def get_app_config(self) -> AppConfig:
        """Get collector application configuration."""
        app_config = self._config["app"]
        return AppConfig(
            host=app_config["host"],
            port=int(app_config["port"]),
            debug=bool(app_config["debug"])
        )

    def get_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)


# Global configuration instance, loaded once at import
config_manager = ConfigManager()


def get_tracking_config() -> TrackingConfig:
    """Get tracking configuration."""
    return config_manager.get_tracking_config()


def get_telemetry_config() -> TelemetryConfig:
    """Get telemetry configuration."""
    return config_manager.get_telemetry_config()


def get_app_config() -> AppConfig:
    """Get collector application configuration."""
    return config_manager.get_app_config()


def reload_config() -> None:
    """Reload configuration."""
    config_manager.reload()


def save_config() -> None:
    """Save configuration to file."""
    config_manager.save_config()
