"""
Factory for creating the event tracking module.
"""
from typing import Optional

import requests

from ..session.manager import SessionManager
from .dispatcher import EventDispatcher
from .event_tracker import EventTracker
from .ingestion_client import IngestionClient, build_session


def create_event_tracking_module(
    session_manager: SessionManager,
    ingestion_url: str,
    enabled: bool = True,
    timeout: float = 5.0,
    user_agent: Optional[str] = None,
    http_session: Optional[requests.Session] = None,
) -> dict:
    """Create event tracking module with tracker, dispatcher and client.

    Tracking is disabled when no ingestion URL is configured.

    Args:
        session_manager: Session manager shared with the tracking context
        ingestion_url: Base URL of the ingestion backend
        enabled: Master switch for tracking
        timeout: Per-request timeout in seconds
        user_agent: User-Agent header for ingestion requests
        http_session: Optional preconfigured requests session

    Returns:
        Dictionary containing the tracker, dispatcher and client
    """
    client = None
    if ingestion_url:
        client = IngestionClient(
            ingestion_url,
            timeout=timeout,
            session=http_session or build_session(user_agent)
        )

    dispatcher = EventDispatcher(client.send_event if client else _discard)

    tracker = EventTracker(
        session_manager=session_manager,
        dispatcher=dispatcher,
        enabled=enabled and client is not None
    )

    return {
        "service": tracker,
        "dispatcher": dispatcher,
        "client": client
    }


def _discard(event) -> None:
    return None
