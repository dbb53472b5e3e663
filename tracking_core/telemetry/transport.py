"""
Error Telemetry Transport

Builds redacted ErrorReports from caught faults and ships them to the
configured telemetry endpoint. Reporting is best effort and never raises:
it runs inside fault-handling code and must not become a fault source.
"""

import logging
import threading
import traceback
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Set

import requests

from ..config_manager import TelemetryConfig
from .beacon import BeaconSender
from .models import MAX_COMPONENT_STACK_LENGTH, MAX_MESSAGE_LENGTH, MAX_NAME_LENGTH, ErrorReport
from .redaction import redact_stack, redact_text, sanitize_path, truncate

logger = logging.getLogger(__name__)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def _field(obj: Any, key: str) -> Any:
    """Read ``key`` from a mapping or attribute without letting lookups raise."""
    if obj is None:
        return None
    try:
        if isinstance(obj, dict):
            return obj.get(key)
        return getattr(obj, key, None)
    except Exception:
        return None


def _error_name(error: Any) -> str:
    if isinstance(error, BaseException):
        return type(error).__name__
    name = _field(error, "name")
    if not isinstance(name, str) or not name:
        return "Error"
    return redact_text(name)[:MAX_NAME_LENGTH]


def _error_message(error: Any) -> str:
    if isinstance(error, BaseException):
        try:
            message = str(error)
        except Exception:
            message = None
    else:
        message = _field(error, "message")
    if not isinstance(message, str):
        return "unknown"
    return redact_text(message)[:MAX_MESSAGE_LENGTH]


def _error_stack(error: Any) -> Optional[str]:
    if isinstance(error, BaseException):
        if error.__traceback__ is None:
            return None
        return "".join(traceback.format_exception(type(error), error, error.__traceback__))
    stack = _field(error, "stack")
    return stack if isinstance(stack, str) else None


def _component_stack(info: Any) -> Optional[str]:
    component_stack = _field(info, "componentStack")
    if component_stack is None:
        component_stack = _field(info, "component_stack")
    if not isinstance(component_stack, str) or not component_stack:
        return None
    return truncate(redact_stack(component_stack), MAX_COMPONENT_STACK_LENGTH)


def serialize_error(
    error: Any,
    info: Any = None,
    location: Optional[str] = None,
    user_agent: Optional[str] = None,
    build_mode: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> ErrorReport:
    """Build an ErrorReport from an arbitrary fault object.

    Malformed faults fall back to ``name="Error"`` and ``message="unknown"``.
    No application state other than the listed fields is read.
    """
    return ErrorReport(
        name=_error_name(error),
        message=_error_message(error),
        stack=redact_stack(_error_stack(error)),
        component_stack=_component_stack(info),
        path=sanitize_path(location),
        timestamp=timestamp or _utc_timestamp(),
        user_agent=user_agent or None,
        build_mode=build_mode or None
    )


class TelemetryTransport:
    """Ships one ErrorReport per ``report_error`` call."""

    def __init__(
        self,
        config: TelemetryConfig,
        beacon: Optional[BeaconSender] = None,
        http_session: Optional[requests.Session] = None,
        location_provider: Optional[Callable[[], Optional[str]]] = None,
    ):
        """Initialize the transport.

        Args:
            config: Immutable telemetry configuration; no endpoint disables
                the transport completely
            beacon: Preferred non-blocking sender, if the host provides one
            http_session: Session for the keepalive fallback request
            location_provider: Returns the current URL or path, if known
        """
        self.config = config
        self.beacon = beacon
        self.http_session = http_session
        self.location_provider = location_provider
        self._pending: Set[threading.Thread] = set()
        self._pending_lock = threading.Lock()

    @property
    def is_enabled(self) -> bool:
        return self.config.is_enabled

    def _current_location(self) -> Optional[str]:
        if self.location_provider is None:
            return None
        try:
            return self.location_provider()
        except Exception:
            return None

    def report_error(self, error: Any, info: Any = None) -> None:
        """Report a caught fault. Never raises."""
        if not self.config.endpoint_url:
            return
        try:
            report = serialize_error(
                error,
                info,
                location=self._current_location(),
                user_agent=self.config.user_agent,
                build_mode=self.config.build_mode
            )
            payload = report.to_json()

            if self.beacon is not None and self._send_beacon(payload):
                return

            self._post_keepalive(payload)
        except Exception as exc:
            logger.debug(f"Dropping error report: {exc}")

    def _send_beacon(self, payload: str) -> bool:
        try:
            return bool(self.beacon.send(self.config.endpoint_url, payload))
        except Exception as exc:
            logger.debug(f"Beacon rejected error report: {exc}")
            return False

    def _post_keepalive(self, payload: str) -> threading.Thread:
        """POST ``payload`` on a non-daemon thread so it outlives teardown."""
        thread = threading.Thread(
            target=self._deliver,
            args=(payload,),
            daemon=False,
            name="TelemetryKeepalive"
        )
        with self._pending_lock:
            self._pending.add(thread)
        thread.start()
        return thread

    def _deliver(self, payload: str) -> None:
        try:
            session = self.http_session or requests
            session.post(
                self.config.endpoint_url,
                data=payload.encode("utf-8"),
                headers={"Content-Type": "application/json"},
                timeout=self.config.request_timeout_seconds
            )
        except Exception as exc:
            logger.debug(f"Error report delivery failed: {exc}")
        finally:
            with self._pending_lock:
                self._pending.discard(threading.current_thread())

    def flush(self, timeout: Optional[float] = None) -> None:
        """Wait for queued beacon payloads and fallback requests to finish."""
        if self.beacon is not None:
            self.beacon.flush()
        with self._pending_lock:
            pending = list(self._pending)
        for thread in pending:
            thread.join(timeout)
