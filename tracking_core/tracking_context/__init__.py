"""
Tracking Context Subsystem

Composition of session and event tracking, scoped exposure of the tracking
API, and the composition-root factories.
"""

from .context import (
    DISABLED_TRACKING,
    ConfigurationError,
    TrackingAPI,
    TrackingContext,
    current_context,
    get_tracking,
    set_strict_context_checks,
    use_tracking,
)
from .factory import create_tracking_module, create_tracking_stack

__all__ = [
    'ConfigurationError',
    'DISABLED_TRACKING',
    'TrackingAPI',
    'TrackingContext',
    'create_tracking_module',
    'create_tracking_stack',
    'current_context',
    'get_tracking',
    'set_strict_context_checks',
    'use_tracking',
]
