"""
Factory for creating the development collector app.
"""
from typing import Optional

from flask import Flask

from ..config_manager import TelemetryConfig
from ..telemetry.factory import create_telemetry_module
from ..telemetry.flask_integration import register_error_reporting, request_location
from .routes import create_collector_blueprint


def create_collector_app(
    received: Optional[list] = None,
    telemetry_config: Optional[TelemetryConfig] = None,
) -> Flask:
    """Create the collector Flask application.

    Args:
        received: Optional list collecting accepted payloads
        telemetry_config: When given, faults inside the collector itself
            are reported through a TelemetryTransport

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)
    app.register_blueprint(create_collector_blueprint(received))

    if telemetry_config is not None:
        transport = create_telemetry_module(
            telemetry_config,
            location_provider=request_location
        )["service"]
        register_error_reporting(app, transport)
        app.extensions["telemetry_transport"] = transport

    return app
