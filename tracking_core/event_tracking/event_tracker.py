"""
Event Tracker

Records page views, custom activities and content interactions for the
current session and hands each one to the dispatcher.
"""

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from ..session.manager import SessionManager
from .event_types import ActivityCategory, EventKind
from .models import Event, freeze_details

logger = logging.getLogger(__name__)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


class EventTracker:
    """Main event tracking system.

    All ``track_*`` methods return True when an event was handed off for
    delivery and False otherwise. They never raise.
    """

    def __init__(
        self,
        session_manager: SessionManager,
        dispatcher,
        enabled: bool = True,
        timestamp_factory: Callable[[], str] = _utc_timestamp,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        """Initialize the event tracker.

        Args:
            session_manager: Source of the current session id
            dispatcher: Object with ``dispatch(event)``; see EventDispatcher
            enabled: When False every call is a silent no-op
            timestamp_factory: Returns the event timestamp string
            monotonic: Clock used for time-on-page
        """
        self.session_manager = session_manager
        self.dispatcher = dispatcher
        self.enabled = enabled
        self._timestamp = timestamp_factory
        self._monotonic = monotonic
        self._lock = threading.Lock()
        self._last_path: Optional[str] = None
        self._last_path_at: Optional[float] = None

    @property
    def last_path(self) -> Optional[str]:
        return self._last_path

    def reset_page_path(self) -> None:
        """Forget the remembered path so the next page view is always counted."""
        with self._lock:
            self._last_path = None
            self._last_path_at = None

    def _current_session_id(self) -> Optional[str]:
        if not self.enabled:
            return None
        self.session_manager.touch_activity()
        session_id, is_active = self.session_manager.get_or_create_session()
        return session_id if is_active else None

    def _emit(self, event: Event) -> bool:
        self.dispatcher.dispatch(event)
        return True

    def track_page_view(self, path: str, title: Optional[str] = None) -> bool:
        """Track a navigation to ``path`` (pathname plus query string).

        Consecutive calls with the same path are re-renders, not navigation,
        and are ignored.
        """
        if not self.enabled:
            return False
        try:
            with self._lock:
                if path == self._last_path:
                    return False
                previous_path = self._last_path
                previous_at = self._last_path_at
                now = self._monotonic()
                self._last_path = path
                self._last_path_at = now

            session_id = self._current_session_id()
            if session_id is None:
                return False

            details: Dict[str, Any] = {"path": path, "title": title or "Untitled Page"}
            if previous_path is not None:
                details["previous_path"] = previous_path
                details["time_on_previous_page_seconds"] = int(now - previous_at)

            event = Event(
                session_id=session_id,
                kind=EventKind.PAGE_VIEW,
                category=ActivityCategory.NAVIGATION.value,
                timestamp=self._timestamp(),
                action_type=EventKind.PAGE_VIEW.value,
                details=freeze_details(details),
                value=path
            )
            self.session_manager.count_page_view()
            logger.debug(f"Page view tracked: {path}")
            return self._emit(event)
        except Exception as exc:
            logger.warning(f"Failed to track page view {path!r}: {exc}")
            return False

    def track_event(
        self,
        action_type: str,
        action_category: str,
        details: Optional[Dict[str, Any]] = None
    ) -> bool:
        """Track a custom activity.

        Args:
            action_type: What happened, e.g. ``rsvp_submit``
            action_category: Grouping, e.g. ``engagement``
            details: Optional str-keyed scalar metadata

        Returns:
            True if the event was handed to the dispatcher
        """
        try:
            session_id = self._current_session_id()
            if session_id is None:
                return False
            event = Event(
                session_id=session_id,
                kind=EventKind.CUSTOM_ACTIVITY,
                category=str(action_category),
                timestamp=self._timestamp(),
                action_type=str(action_type),
                details=freeze_details(details)
            )
            self.session_manager.count_action()
            logger.debug(f"Event tracked: {action_type} ({action_category})")
            return self._emit(event)
        except Exception as exc:
            logger.warning(f"Failed to track event {action_type!r}: {exc}")
            return False

    def track_activity(
        self,
        activity_type: str,
        category: str = ActivityCategory.ENGAGEMENT.value,
        details: Optional[Dict[str, Any]] = None
    ) -> bool:
        """Shorthand for ``track_event`` with a default category."""
        return self.track_event(activity_type, category, details)

    def track_interaction(
        self,
        content_type: str,
        content_id: str,
        interaction_type: str,
        value: Optional[str] = None
    ) -> bool:
        """Track an interaction with a piece of content.

        Args:
            content_type: e.g. ``photo`` or ``guestbook``
            content_id: Identifier of the content item
            interaction_type: e.g. ``view``, ``favorite``
            value: Optional interaction value, e.g. ``add`` / ``remove``

        Returns:
            True if the event was handed to the dispatcher
        """
        try:
            session_id = self._current_session_id()
            if session_id is None:
                return False
            event = Event(
                session_id=session_id,
                kind=EventKind.INTERACTION,
                category=str(content_type),
                timestamp=self._timestamp(),
                interaction_type=str(interaction_type),
                details=freeze_details({"content_id": str(content_id)}),
                value=None if value is None else str(value)
            )
            self.session_manager.count_action()
            logger.debug(f"Interaction tracked: {content_type}/{content_id} {interaction_type}")
            return self._emit(event)
        except Exception as exc:
            logger.warning(f"Failed to track interaction {interaction_type!r}: {exc}")
            return False
