"""
Error Telemetry Subsystem

Privacy-scrubbing, best-effort error reporting.
"""

from .beacon import BeaconSender
from .boundary import ErrorBoundary
from .models import MAX_COMPONENT_STACK_LENGTH, MAX_MESSAGE_LENGTH, MAX_NAME_LENGTH, ErrorReport
from .redaction import URL_PLACEHOLDER, redact_stack, sanitize_path
from .transport import TelemetryTransport, serialize_error

__all__ = [
    'BeaconSender',
    'ErrorBoundary',
    'ErrorReport',
    'MAX_COMPONENT_STACK_LENGTH',
    'MAX_MESSAGE_LENGTH',
    'MAX_NAME_LENGTH',
    'TelemetryTransport',
    'URL_PLACEHOLDER',
    'redact_stack',
    'sanitize_path',
    'serialize_error',
]
