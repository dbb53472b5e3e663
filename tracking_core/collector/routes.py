"""
Collector Routes

Flask routes that receive events, session snapshots and error reports during
development. Payloads are validated and logged; nothing is stored.
"""

import json
import logging
from dataclasses import asdict

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from ..event_tracking.models import EventPayload
from ..session.models import SessionState
from ..telemetry.models import ErrorReport

logger = logging.getLogger(__name__)

SESSION_TRANSITIONS = {"started", "resumed", "expired", "cleared"}


def _read_json() -> dict:
    """Parse the request body; beacons may not send a JSON content type."""
    data = request.get_json(silent=True)
    if data is None:
        raw = request.get_data(as_text=True) or "{}"
        try:
            data = json.loads(raw)
        except ValueError:
            data = None
    return data if isinstance(data, dict) else {}


def create_collector_blueprint(received: list = None):
    """Create a Flask blueprint for the development collector.

    Args:
        received: Optional list that accepted payloads are appended to, for
            inspection in tests and local debugging

    Returns:
        Flask blueprint with collector routes
    """
    bp = Blueprint('collector', __name__)

    def _accept(kind: str, body: dict):
        if received is not None:
            received.append((kind, body))
        return jsonify({"status": "ok"}), 202

    @bp.route("/events", methods=["POST"])
    def ingest_event():
        """Ingest one tracked event."""
        payload = EventPayload.from_dict(_read_json())
        if not payload.validate():
            return jsonify({"error": "invalid-event"}), 400

        logger.info(f"Event {payload.kind}/{payload.action_type or payload.interaction_type} for session {payload.session_id}")
        return _accept("event", asdict(payload))

    @bp.route("/sessions", methods=["POST"])
    def ingest_session():
        """Ingest a session lifecycle snapshot."""
        body = _read_json()
        if not isinstance(body.get("id"), str) or body.get("transition") not in SESSION_TRANSITIONS:
            return jsonify({"error": "invalid-session"}), 400
        try:
            SessionState(body.get("state"))
        except ValueError:
            return jsonify({"error": "invalid-session"}), 400

        logger.info(f"Session {body['id']} {body['transition']}")
        return _accept("session", body)

    @bp.route("/telemetry/errors", methods=["POST"])
    def ingest_error_report():
        """Ingest one error report."""
        try:
            report = ErrorReport.model_validate(_read_json())
        except ValidationError as exc:
            return jsonify({"error": "invalid-report", "details": exc.error_count()}), 400

        logger.warning(f"Client error reported: {report.name}: {report.message} at {report.path or '-'}")
        return _accept("error", report.model_dump(by_alias=True, exclude_none=True))

    return bp
