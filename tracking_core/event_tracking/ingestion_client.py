"""
HTTP client for the event ingestion backend.
"""

import logging
from typing import Any, Dict, Optional

import requests

from .models import Event

logger = logging.getLogger(__name__)


def build_session(user_agent: Optional[str] = None) -> requests.Session:
    """Build a requests session for ingestion calls."""
    session = requests.Session()
    session.headers.update({"Content-Type": "application/json"})
    if user_agent:
        session.headers.update({"User-Agent": user_agent})
    return session


class IngestionClient:
    """Appends events and session snapshots to the ingestion backend.

    Each call is exactly one POST; errors surface as ``requests`` exceptions
    for the dispatcher to drop.
    """

    def __init__(self, base_url: str, timeout: float = 5.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or build_session()

    def _post(self, route: str, body: Dict[str, Any]) -> requests.Response:
        resp = self.session.post(f"{self.base_url}{route}", json=body, timeout=self.timeout)
        resp.raise_for_status()
        return resp

    def send_event(self, event: Event) -> requests.Response:
        return self._post("/events", event.to_dict())

    def send_session(self, transition: str, snapshot: Dict[str, Any]) -> requests.Response:
        body = dict(snapshot)
        body["transition"] = transition
        return self._post("/sessions", body)

    def close(self) -> None:
        self.session.close()
