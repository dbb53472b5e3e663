"""
Tracking Core

Client-side telemetry core: session lifecycle tracking, deduplicated
event/interaction recording and privacy-scrubbing error reporting.
"""

from .event_tracking import EventKind, EventTracker
from .session import SessionManager, SessionState
from .telemetry import ErrorBoundary, TelemetryTransport
from .tracking_context import (
    ConfigurationError,
    TrackingContext,
    create_tracking_module,
    create_tracking_stack,
    get_tracking,
    use_tracking,
)

__version__ = "0.1.0"

__all__ = [
    'ConfigurationError',
    'ErrorBoundary',
    'EventKind',
    'EventTracker',
    'SessionManager',
    'SessionState',
    'TelemetryTransport',
    'TrackingContext',
    'create_tracking_module',
    'create_tracking_stack',
    'get_tracking',
    'use_tracking',
]
