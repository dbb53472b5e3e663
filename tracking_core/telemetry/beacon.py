"""
Beacon transport.

A non-blocking, best-effort sender: ``send()`` only enqueues and reports
whether the payload was accepted. A worker thread drains the queue, and the
queue is flushed when the interpreter exits so reports queued during
shutdown still go out.
"""

import atexit
import logging
import queue
import threading
from typing import Optional

import requests

logger = logging.getLogger(__name__)

_STOP = object()


class BeaconSender:
    """Queue-backed fire-and-forget POST sender."""

    def __init__(
        self,
        http_session: Optional[requests.Session] = None,
        timeout: float = 5.0,
        queue_size: int = 64,
    ):
        self.http_session = http_session or requests.Session()
        self.timeout = timeout
        self._queue: "queue.Queue" = queue.Queue(maxsize=queue_size)
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._closed = False
        atexit.register(self.close)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def _ensure_worker(self) -> None:
        with self._lock:
            if self._thread is None or not self._thread.is_alive():
                self._thread = threading.Thread(target=self._run, daemon=True, name="TelemetryBeacon")
                self._thread.start()

    def send(self, url: str, payload: str) -> bool:
        """Queue ``payload`` for POSTing to ``url``.

        Returns False when the beacon is closed or its queue is full.
        """
        if self._closed:
            return False
        self._ensure_worker()
        try:
            self._queue.put_nowait((url, payload))
            return True
        except queue.Full:
            logger.debug("Beacon queue full, payload rejected")
            return False

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                url, payload = item
                try:
                    self.http_session.post(
                        url,
                        data=payload.encode("utf-8"),
                        headers={"Content-Type": "application/json"},
                        timeout=self.timeout
                    )
                except Exception as exc:
                    logger.debug(f"Beacon delivery failed: {exc}")
            finally:
                self._queue.task_done()

    def flush(self) -> None:
        """Block until every accepted payload has been attempted."""
        if self._thread is not None:
            self._queue.join()

    def close(self) -> None:
        """Stop accepting payloads, drain the queue and stop the worker."""
        if self._closed:
            return
        self._closed = True
        atexit.unregister(self.close)
        thread = self._thread
        if thread is not None and thread.is_alive():
            self._queue.put(_STOP)
            thread.join(timeout=self.timeout * 2)
