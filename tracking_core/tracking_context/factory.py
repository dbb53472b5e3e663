"""
Factory for creating the tracking context (composition root).
"""
from datetime import timedelta
from typing import Callable, Optional

import requests

from ..config_manager import ConfigManager, TelemetryConfig, TrackingConfig
from ..event_tracking.factory import create_event_tracking_module
from ..platform_events.registry import PlatformEventSource
from ..session.manager import ExpiryMonitor, SessionManager
from ..telemetry.factory import create_telemetry_module
from .context import TrackingContext, set_strict_context_checks


def create_tracking_module(
    config: TrackingConfig,
    strict_checks: Optional[bool] = None,
    platform_events: Optional[PlatformEventSource] = None,
    http_session: Optional[requests.Session] = None,
) -> dict:
    """Create the tracking context with its session manager and tracker.

    Args:
        config: Immutable tracking configuration
        strict_checks: When given, sets whether out-of-scope
            ``use_tracking()`` raises; left unchanged otherwise
        platform_events: Shared host signal registry
        http_session: Optional preconfigured requests session

    Returns:
        Dictionary containing the context and its parts
    """
    session_manager = SessionManager(
        timeout=timedelta(minutes=config.session_timeout_minutes),
        rotate_id_on_resume=config.rotate_id_on_resume,
        user_agent=config.user_agent
    )

    event_module = create_event_tracking_module(
        session_manager=session_manager,
        ingestion_url=config.ingestion_url,
        enabled=config.enabled,
        timeout=config.request_timeout_seconds,
        user_agent=config.user_agent,
        http_session=http_session
    )
    dispatcher = event_module["dispatcher"]
    client = event_module["client"]

    if client is not None:
        session_manager.add_listener(
            lambda transition, snapshot: dispatcher.submit(client.send_session, transition, snapshot)
        )

    expiry_monitor = ExpiryMonitor(session_manager, interval=config.expiry_check_interval_seconds)

    context = TrackingContext(
        session_manager=session_manager,
        event_tracker=event_module["service"],
        platform_events=platform_events,
        expiry_monitor=expiry_monitor
    )

    if strict_checks is not None:
        set_strict_context_checks(strict_checks)

    return {
        "service": context,
        "session_manager": session_manager,
        "tracker": event_module["service"],
        "dispatcher": dispatcher,
        "client": client,
        "expiry_monitor": expiry_monitor
    }


def create_tracking_stack(
    manager: Optional[ConfigManager] = None,
    location_provider: Optional[Callable[[], Optional[str]]] = None,
    apply_build_mode: bool = False,
) -> dict:
    """Build tracking and telemetry from configuration read once at startup.

    Out-of-scope ``use_tracking()`` keeps raising unless the caller opts in
    with ``apply_build_mode``, which relaxes the check for non-development
    build modes.

    Args:
        manager: Configuration source; the global one by default
        location_provider: Current URL/path provider for error reports
        apply_build_mode: Derive strict scope checks from the configured
            build mode

    Returns:
        Dictionary with ``tracking`` (TrackingContext) and ``telemetry``
        (TelemetryTransport) plus the configs used
    """
    if manager is None:
        from ..config_manager import config_manager as manager

    tracking_config: TrackingConfig = manager.get_tracking_config()
    telemetry_config: TelemetryConfig = manager.get_telemetry_config()

    strict_checks = telemetry_config.is_development if apply_build_mode else None
    tracking_module = create_tracking_module(tracking_config, strict_checks=strict_checks)
    telemetry_module = create_telemetry_module(telemetry_config, location_provider=location_provider)

    return {
        "tracking": tracking_module["service"],
        "telemetry": telemetry_module["service"],
        "tracking_config": tracking_config,
        "telemetry_config": telemetry_config
    }
