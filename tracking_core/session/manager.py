"""
Session Manager

Owns session identity and the Active / Expired / Cleared lifecycle for one
browsing context.
"""

import logging
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from .models import Session, SessionState
from .user_agent import parse_user_agent

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TIMEOUT = timedelta(minutes=30)
DEFAULT_EXPIRY_CHECK_INTERVAL = 60.0

SessionListener = Callable[[str, Dict[str, Any]], None]


def generate_session_id() -> str:
    """Return a collision-resistant random session id."""
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    """Tracks the single session of a browsing context.

    State machine::

        Absent  -> Active   first use
        Active  -> Expired  no activity for ``timeout``
        Expired -> Active   new activity (new id when ``rotate_id_on_resume``)
        *       -> Cleared  logout
        Cleared -> Active   next creation, always with a new id

    Listeners receive ``(transition, snapshot)`` where transition is one of
    ``started``, ``resumed``, ``expired`` or ``cleared``.
    """

    def __init__(
        self,
        timeout: timedelta = DEFAULT_SESSION_TIMEOUT,
        rotate_id_on_resume: bool = True,
        user_agent: Optional[str] = None,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = generate_session_id,
    ):
        """Initialize the session manager.

        Args:
            timeout: Inactivity window after which the session expires
            rotate_id_on_resume: Mint a new id when an expired session resumes
            user_agent: User agent used to fill browser/os/device metadata
            clock: Returns the current aware datetime
            id_factory: Produces new session ids
        """
        if timeout <= timedelta(0):
            raise ValueError("Session timeout must be positive")
        self.timeout = timeout
        self.rotate_id_on_resume = rotate_id_on_resume
        self._clock = clock
        self._id_factory = id_factory
        self._agent_info = parse_user_agent(user_agent)
        self._lock = threading.RLock()
        self._session: Optional[Session] = None
        self._user_id: Optional[str] = None
        self._used_ids: Set[str] = set()
        self._listeners: List[SessionListener] = []

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: SessionListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, notifications: List[Tuple[str, Dict[str, Any]]]) -> None:
        """Deliver lifecycle notifications outside the lock."""
        with self._lock:
            listeners = list(self._listeners)
        for transition, snapshot in notifications:
            for listener in listeners:
                try:
                    listener(transition, snapshot)
                except Exception as exc:
                    logger.warning(f"Session listener failed on {transition}: {exc}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def current(self) -> Optional[Session]:
        """The current session record (read-only by convention)."""
        return self._session

    @property
    def session_id(self) -> Optional[str]:
        session = self._session
        return session.id if session else None

    @property
    def is_active(self) -> bool:
        session = self._session
        return bool(session and session.is_active)

    def _new_id(self) -> str:
        new_id = self._id_factory()
        while new_id in self._used_ids:
            new_id = self._id_factory()
        self._used_ids.add(new_id)
        return new_id

    def _create_locked(self, now: datetime) -> Session:
        self._session = Session(
            id=self._new_id(),
            started_at=now,
            last_activity_at=now,
            user_id=self._user_id,
            **self._agent_info
        )
        logger.info(f"Session started: {self._session.id}")
        return self._session

    def _expire_locked(self, now: datetime) -> Optional[Dict[str, Any]]:
        session = self._session
        if session is None or session.state is not SessionState.ACTIVE:
            return None
        session.state = SessionState.EXPIRED
        session.ended_at = now
        logger.info(f"Session expired: {session.id}")
        return session.to_dict()

    def _check_expiry_locked(self, now: datetime) -> Optional[Dict[str, Any]]:
        session = self._session
        if session is None or session.state is not SessionState.ACTIVE:
            return None
        if now - session.last_activity_at > self.timeout:
            return self._expire_locked(now)
        return None

    def get_or_create_session(self) -> Tuple[str, bool]:
        """Return ``(session_id, is_active)``, creating a session if absent or cleared."""
        notifications = []
        with self._lock:
            now = self._clock()
            expired = self._check_expiry_locked(now)
            if expired:
                notifications.append(("expired", expired))
            if self._session is None or self._session.state is SessionState.CLEARED:
                session = self._create_locked(now)
                notifications.append(("started", session.to_dict()))
            result = (self._session.id, self._session.is_active)
        self._notify(notifications)
        return result

    def touch_activity(self) -> Optional[str]:
        """Record activity on the current session.

        An expired session becomes active again. Returns the id of the
        touched session, or None when there is nothing to touch.
        """
        notifications = []
        with self._lock:
            now = self._clock()
            expired = self._check_expiry_locked(now)
            if expired:
                notifications.append(("expired", expired))
            session = self._session
            if session is None or session.state is SessionState.CLEARED:
                result = None
            elif session.state is SessionState.EXPIRED:
                if self.rotate_id_on_resume:
                    session = self._create_locked(now)
                    notifications.append(("started", session.to_dict()))
                else:
                    session.state = SessionState.ACTIVE
                    session.ended_at = None
                    session.last_activity_at = now
                    logger.info(f"Session resumed: {session.id}")
                    notifications.append(("resumed", session.to_dict()))
                result = session.id
            else:
                session.last_activity_at = now
                result = session.id
        self._notify(notifications)
        return result

    def check_expiry(self) -> bool:
        """Expire the session if the inactivity window has elapsed."""
        with self._lock:
            expired = self._check_expiry_locked(self._clock())
        if expired:
            self._notify([("expired", expired)])
        return expired is not None

    def expire_session(self) -> None:
        """Mark the current session as expired."""
        with self._lock:
            expired = self._expire_locked(self._clock())
        if expired:
            self._notify([("expired", expired)])

    def clear_session(self) -> None:
        """Mark the current session as cleared; its id is never reused."""
        with self._lock:
            session = self._session
            if session is None or session.state is SessionState.CLEARED:
                return
            if session.ended_at is None:
                session.ended_at = self._clock()
            session.state = SessionState.CLEARED
            snapshot = session.to_dict()
            logger.info(f"Session cleared: {session.id}")
        self._notify([("cleared", snapshot)])

    def set_user(self, user_id: Optional[str]) -> bool:
        """Apply the authenticated user reported by the auth collaborator.

        Returns True when the change signed the user out and cleared the
        session.
        """
        with self._lock:
            previous = self._user_id
            self._user_id = user_id
            if user_id is not None:
                session = self._session
                if session is not None and session.state is not SessionState.CLEARED:
                    session.user_id = user_id
                return False
            signed_out = previous is not None
        if signed_out:
            self.clear_session()
        return signed_out

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------

    def count_page_view(self) -> None:
        with self._lock:
            if self._session is not None and self._session.is_active:
                self._session.pages_viewed += 1

    def count_action(self) -> None:
        with self._lock:
            if self._session is not None and self._session.is_active:
                self._session.actions_taken += 1

    def snapshot(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self._session.to_dict() if self._session else None


class ExpiryMonitor:
    """Background thread that periodically checks a session for expiry."""

    def __init__(self, session_manager: SessionManager, interval: float = DEFAULT_EXPIRY_CHECK_INTERVAL):
        self.session_manager = session_manager
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, daemon=True, name="SessionExpiryMonitor"
        )
        self._thread.start()

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.session_manager.check_expiry()
            except Exception as exc:
                logger.warning(f"Session expiry check failed: {exc}")

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval + 1)
            self._thread = None
