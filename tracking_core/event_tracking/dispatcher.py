"""
Event Dispatcher

Hands events to a single background worker so tracking calls never block
the caller. One worker keeps events from one tracker in submission order.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from .models import Event

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Fire-and-forget delivery of events through ``send``."""

    def __init__(self, send: Callable[[Event], object], name: str = "event-dispatch"):
        """Initialize the dispatcher.

        Args:
            send: Callable performing one delivery attempt; may raise
            name: Thread name prefix for the worker
        """
        self._send = send
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    def dispatch(self, event: Event) -> Optional[Future]:
        """Queue ``event`` for delivery. Never raises."""
        if self._closed:
            return None
        try:
            return self._executor.submit(self._deliver, event)
        except RuntimeError:
            # Executor already shut down (interpreter exit or detach race)
            return None

    def submit(self, fn: Callable[..., object], *args) -> Optional[Future]:
        """Run ``fn(*args)`` on the worker, after everything queued so far."""
        if self._closed:
            return None
        try:
            return self._executor.submit(self._call, fn, *args)
        except RuntimeError:
            return None

    def _call(self, fn: Callable[..., object], *args) -> bool:
        try:
            fn(*args)
            return True
        except Exception as exc:
            logger.debug(f"Dropping background delivery {getattr(fn, '__name__', fn)}: {exc}")
            return False

    def _deliver(self, event: Event) -> bool:
        try:
            self._send(event)
            return True
        except Exception as exc:
            logger.debug(f"Dropping {event.kind.value} event for session {event.session_id}: {exc}")
            return False

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting events; queued and in-flight sends are not cancelled."""
        self._closed = True
        self._executor.shutdown(wait=wait)
