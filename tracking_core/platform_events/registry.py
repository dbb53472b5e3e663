"""
Platform Event Source

Observer registry for host platform signals (pointer, keyboard, scroll,
visibility, intersection, unload). Subscriptions are indexed by owner so a
component can drop every callback it registered when it detaches.
"""

import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple

logger = logging.getLogger(__name__)

Callback = Callable[[Any], None]


class PlatformSignal(Enum):
    """Signals a host platform can emit."""

    POINTER = "pointer"
    KEYDOWN = "keydown"
    SCROLL = "scroll"
    VISIBILITY_CHANGE = "visibility_change"
    INTERSECTION = "intersection"
    BEFORE_UNLOAD = "before_unload"


class Subscription:
    """Handle returned by ``subscribe``; ``cancel()`` removes the callback."""

    def __init__(self, source: "PlatformEventSource", owner: Hashable, signal: PlatformSignal, callback: Callback):
        self.source = source
        self.owner = owner
        self.signal = signal
        self.callback = callback

    def cancel(self) -> bool:
        return self.source.unsubscribe(self.owner, self.signal, self.callback) > 0


class PlatformEventSource:
    """Owner-indexed registry of platform signal callbacks."""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: Dict[Hashable, List[Tuple[PlatformSignal, Callback]]] = {}

    def subscribe(self, owner: Hashable, signal: PlatformSignal, callback: Callback) -> Subscription:
        """Register ``callback`` for ``signal`` on behalf of ``owner``."""
        signal = PlatformSignal(signal)
        with self._lock:
            self._subscribers.setdefault(owner, []).append((signal, callback))
        return Subscription(self, owner, signal, callback)

    def unsubscribe(
        self,
        owner: Hashable,
        signal: Optional[PlatformSignal] = None,
        callback: Optional[Callback] = None,
    ) -> int:
        """Remove matching callbacks of ``owner``; with no filters, all of them.

        Returns:
            Number of callbacks removed
        """
        signal = PlatformSignal(signal) if signal is not None else None
        with self._lock:
            entries = self._subscribers.get(owner)
            if not entries:
                return 0
            kept = [
                (s, cb) for s, cb in entries
                if not ((signal is None or s is signal) and (callback is None or cb == callback))
            ]
            removed = len(entries) - len(kept)
            if kept:
                self._subscribers[owner] = kept
            else:
                del self._subscribers[owner]
        return removed

    def emit(self, signal: PlatformSignal, payload: Any = None) -> int:
        """Deliver ``payload`` to every callback registered for ``signal``.

        Callback failures are logged and do not reach the emitter.

        Returns:
            Number of callbacks invoked
        """
        signal = PlatformSignal(signal)
        with self._lock:
            targets = [
                cb for entries in self._subscribers.values()
                for s, cb in entries if s is signal
            ]
        for callback in targets:
            try:
                callback(payload)
            except Exception as exc:
                logger.warning(f"Platform listener for {signal.value} failed: {exc}")
        return len(targets)

    def subscriber_count(self, owner: Optional[Hashable] = None) -> int:
        with self._lock:
            if owner is not None:
                return len(self._subscribers.get(owner, ()))
            return sum(len(entries) for entries in self._subscribers.values())
