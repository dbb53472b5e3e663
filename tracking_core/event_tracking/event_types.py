"""
Event Types for the Event Tracking System

Defines event kinds and the shared activity vocabularies as enums for type
safety and consistency.
"""

from enum import Enum


class _ValueEnum(Enum):

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Check if a string is one of the enum values."""
        try:
            cls(value)
            return True
        except ValueError:
            return False

    @classmethod
    def get_allowed_types(cls) -> set[str]:
        """Get all allowed value strings."""
        return {e.value for e in cls}


class EventKind(_ValueEnum):
    """Kinds of events sent to the ingestion backend."""

    PAGE_VIEW = "page_view"
    INTERACTION = "interaction"
    CUSTOM_ACTIVITY = "custom_activity"


class ActivityType(_ValueEnum):
    """Predefined activity types used across the site."""

    # Content
    PHOTO_UPLOAD = "photo_upload"
    PHOTO_LIKE = "photo_like"
    PHOTO_FAVORITE = "photo_favorite"
    GUESTBOOK_POST = "guestbook_post"
    GUESTBOOK_REACTION = "guestbook_reaction"

    # Engagement
    HUNT_HINT_FOUND = "hunt_hint_found"
    HUNT_COMPLETED = "hunt_completed"
    RSVP_SUBMIT = "rsvp_submit"
    TOURNAMENT_REGISTER = "tournament_register"
    POTLUCK_ADD = "potluck_add"
    POTLUCK_DELETE = "potluck_delete"


class ActivityCategory(_ValueEnum):
    """Predefined activity categories."""

    ENGAGEMENT = "engagement"
    CONTENT = "content"
    NAVIGATION = "navigation"
    AUTHENTICATION = "authentication"
    INTERACTION = "interaction"
