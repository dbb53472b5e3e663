"""
Flask hooks for error telemetry.
"""

from typing import Optional

from flask import Flask, got_request_exception, has_request_context, request

from .transport import TelemetryTransport


def request_location() -> Optional[str]:
    """Path and query of the current request, if there is one."""
    if not has_request_context():
        return None
    return request.full_path


def register_error_reporting(app: Flask, transport: TelemetryTransport):
    """Report every unhandled request exception of ``app`` once.

    Flask's own error handling still decides the response.
    """
    def _report(sender, exception, **extra):
        endpoint = request.endpoint if has_request_context() else None
        transport.report_error(exception, {"componentStack": f"\n    in {endpoint or 'unknown'}"})

    got_request_exception.connect(_report, app, weak=False)
    return _report
