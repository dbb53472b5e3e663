"""
Factory for creating the error telemetry module.
"""
from typing import Callable, Optional

import requests

from ..config_manager import TelemetryConfig
from .beacon import BeaconSender
from .transport import TelemetryTransport


def create_telemetry_module(
    config: TelemetryConfig,
    location_provider: Optional[Callable[[], Optional[str]]] = None,
    use_beacon: bool = True,
    http_session: Optional[requests.Session] = None,
) -> dict:
    """Create the telemetry module with its transport.

    No sender is built when the endpoint is not configured, so a disabled
    transport owns no threads or connections.

    Args:
        config: Immutable telemetry configuration
        location_provider: Returns the current URL or path for reports
        use_beacon: Prefer the queued beacon sender over direct requests
        http_session: Optional preconfigured requests session

    Returns:
        Dictionary containing the transport and beacon (if any)
    """
    beacon = None
    session = None
    if config.is_enabled:
        session = http_session or requests.Session()
        if use_beacon:
            beacon = BeaconSender(
                http_session=session,
                timeout=config.request_timeout_seconds,
                queue_size=config.beacon_queue_size
            )

    transport = TelemetryTransport(
        config=config,
        beacon=beacon,
        http_session=session,
        location_provider=location_provider
    )

    return {
        "service": transport,
        "beacon": beacon
    }
