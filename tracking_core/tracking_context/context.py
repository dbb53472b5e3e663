"""
Tracking Context

Wires one SessionManager and one EventTracker together and exposes the
stable tracking API to the code running inside its scope.
"""

import contextvars
import logging
from dataclasses import dataclass
from typing import Any, Callable, Hashable, List, Optional

from ..event_tracking.event_tracker import EventTracker
from ..platform_events.registry import PlatformEventSource, PlatformSignal, Subscription
from ..session.manager import ExpiryMonitor, SessionManager

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Tracking API used outside the scope of a TrackingContext."""


@dataclass(frozen=True)
class TrackingAPI:
    """Snapshot of the tracking surface handed to UI code."""

    session_id: Optional[str]
    is_tracking: bool
    track_event: Callable[..., bool]
    track_interaction: Callable[..., bool]


def _not_tracking(*args, **kwargs) -> bool:
    return False


DISABLED_TRACKING = TrackingAPI(
    session_id=None,
    is_tracking=False,
    track_event=_not_tracking,
    track_interaction=_not_tracking
)

_active_context: contextvars.ContextVar = contextvars.ContextVar("tracking_context", default=None)
_strict_checks = True


def set_strict_context_checks(strict: bool) -> None:
    """Choose whether out-of-scope ``use_tracking()`` raises (development) or degrades (production)."""
    global _strict_checks
    _strict_checks = bool(strict)


def strict_context_checks() -> bool:
    return _strict_checks


class TrackingContext:
    """Composition of session and event tracking for one browsing context."""

    ACTIVITY_SIGNALS = (PlatformSignal.POINTER, PlatformSignal.KEYDOWN, PlatformSignal.SCROLL)

    def __init__(
        self,
        session_manager: SessionManager,
        event_tracker: EventTracker,
        platform_events: Optional[PlatformEventSource] = None,
        expiry_monitor: Optional[ExpiryMonitor] = None,
    ):
        """Initialize the context.

        Args:
            session_manager: Owner of the session state
            event_tracker: Tracker bound to the same session manager
            platform_events: Host signal registry; a private one by default
            expiry_monitor: Periodic expiry check run while attached
        """
        if event_tracker.session_manager is not session_manager:
            raise ConfigurationError("EventTracker must share the context's SessionManager")
        self.session_manager = session_manager
        self.event_tracker = event_tracker
        self.platform_events = platform_events or PlatformEventSource()
        self.expiry_monitor = expiry_monitor
        self._attached = False
        self._tokens: List[contextvars.Token] = []

    # ------------------------------------------------------------------
    # Exposed API
    # ------------------------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self.event_tracker.enabled

    @property
    def session_id(self) -> Optional[str]:
        if not self.enabled:
            return None
        return self.session_manager.session_id

    @property
    def is_tracking(self) -> bool:
        return self.enabled and self.session_manager.is_active

    @property
    def is_attached(self) -> bool:
        return self._attached

    def api(self) -> TrackingAPI:
        return TrackingAPI(
            session_id=self.session_id,
            is_tracking=self.is_tracking,
            track_event=self.track_event,
            track_interaction=self.track_interaction
        )

    def track_page_view(self, path: str, title: Optional[str] = None) -> bool:
        return self.event_tracker.track_page_view(path, title)

    def track_event(self, action_type: str, action_category: str, details: Optional[dict] = None) -> bool:
        return self.event_tracker.track_event(action_type, action_category, details)

    def track_activity(self, activity_type: str, **kwargs) -> bool:
        return self.event_tracker.track_activity(activity_type, **kwargs)

    def track_interaction(
        self,
        content_type: str,
        content_id: str,
        interaction_type: str,
        value: Optional[str] = None
    ) -> bool:
        return self.event_tracker.track_interaction(content_type, content_id, interaction_type, value)

    def set_current_user(self, user_id: Optional[str]) -> None:
        """Authentication collaborator hook; a sign-out clears the session."""
        if self.session_manager.set_user(user_id):
            self.event_tracker.reset_page_path()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def attach(self) -> None:
        """Start the session and subscribe activity listeners."""
        if self._attached:
            return
        for signal in self.ACTIVITY_SIGNALS:
            self.platform_events.subscribe(self, signal, self._on_activity)
        self.platform_events.subscribe(self, PlatformSignal.BEFORE_UNLOAD, self._on_unload)
        if self.enabled:
            self.session_manager.get_or_create_session()
            if self.expiry_monitor is not None:
                self.expiry_monitor.start()
        self._attached = True

    def detach(self) -> None:
        """Unsubscribe every listener owned by this context and stop the monitor.

        In-flight deliveries are left to finish on their own.
        """
        if not self._attached:
            return
        removed = self.platform_events.unsubscribe(self)
        if self.expiry_monitor is not None:
            self.expiry_monitor.stop()
        self._attached = False
        logger.debug(f"Tracking context detached, {removed} listeners removed")

    def close(self) -> None:
        """Detach and wait for queued deliveries."""
        self.detach()
        shutdown = getattr(self.event_tracker.dispatcher, "shutdown", None)
        if shutdown is not None:
            shutdown(wait=True)

    def __enter__(self) -> "TrackingContext":
        self.attach()
        self._tokens.append(_active_context.set(self))
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        _active_context.reset(self._tokens.pop())
        if not self._tokens:
            self.detach()
        return False

    def _on_activity(self, payload: Any = None) -> None:
        if self.enabled:
            self.session_manager.touch_activity()

    def _on_unload(self, payload: Any = None) -> None:
        self.session_manager.expire_session()

    # ------------------------------------------------------------------
    # Content visibility
    # ------------------------------------------------------------------

    def watch_content(self, owner: Hashable, content_type: str, content_id: str) -> Subscription:
        """Record one ``view`` interaction the first time the content is visible.

        Intersection payloads are mappings with ``content_id`` and
        ``visible`` keys. The owner must call ``release(owner)`` when it
        detaches.
        """
        subscription: Optional[Subscription] = None

        def _on_intersection(payload: Any) -> None:
            if not isinstance(payload, dict):
                return
            if str(payload.get("content_id")) != str(content_id) or not payload.get("visible"):
                return
            if subscription is not None:
                subscription.cancel()
            self.track_interaction(content_type, content_id, "view")

        subscription = self.platform_events.subscribe(owner, PlatformSignal.INTERSECTION, _on_intersection)
        return subscription

    def release(self, owner: Hashable) -> int:
        """Drop every platform listener registered for ``owner``."""
        return self.platform_events.unsubscribe(owner)


def use_tracking(strict: Optional[bool] = None) -> TrackingAPI:
    """Return the tracking API of the enclosing TrackingContext scope.

    Outside any scope this raises ConfigurationError when strict checks are
    on (development builds). With strict checks off it logs the mistake and
    returns a disabled API.
    """
    context = _active_context.get()
    if context is not None:
        return context.api()
    if strict is None:
        strict = _strict_checks
    if strict:
        raise ConfigurationError(
            "use_tracking() must be called within a TrackingContext scope; "
            "wrap the caller in `with context:` or pass the context explicitly"
        )
    logger.error("use_tracking() called outside a TrackingContext scope; tracking disabled for this caller")
    return DISABLED_TRACKING


def get_tracking() -> Optional[TrackingAPI]:
    """Return the scoped tracking API, or None outside any scope."""
    context = _active_context.get()
    return context.api() if context is not None else None


def current_context() -> Optional[TrackingContext]:
    return _active_context.get()
