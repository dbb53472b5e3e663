"""
Event Tracking Subsystem

Deduplicated page-view, activity and interaction recording with
fire-and-forget delivery to the ingestion backend.
"""

from .dispatcher import EventDispatcher
from .event_tracker import EventTracker
from .event_types import ActivityCategory, ActivityType, EventKind
from .ingestion_client import IngestionClient
from .models import Event, EventPayload

__all__ = [
    'ActivityCategory',
    'ActivityType',
    'Event',
    'EventDispatcher',
    'EventKind',
    'EventPayload',
    'EventTracker',
    'IngestionClient',
]
