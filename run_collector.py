#!/usr/bin/env python3
"""
Runner script for the development collector.
Receives events, session snapshots and error reports and logs them.
"""

import argparse

from tracking_core.collector import create_collector_app
from tracking_core.config_manager import get_app_config, get_telemetry_config
from tracking_core.logging_config import setup_logging, stop_logging


def main() -> None:
    app_config = get_app_config()

    parser = argparse.ArgumentParser(description="Run the tracking development collector")
    parser.add_argument("--host", default=app_config.host)
    parser.add_argument("--port", type=int, default=app_config.port)
    parser.add_argument("--debug", action="store_true", default=app_config.debug)
    args = parser.parse_args()

    setup_logging(debug=args.debug)
    app = create_collector_app(telemetry_config=get_telemetry_config())
    try:
        print(f"Starting collector on http://{args.host}:{args.port}")
        app.run(host=args.host, port=args.port, debug=args.debug)
    finally:
        stop_logging()


if __name__ == "__main__":
    main()
