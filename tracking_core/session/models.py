"""
Data Models for Session Tracking

Defines the session record owned by the SessionManager.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class SessionState(Enum):
    """Lifecycle states of a tracking session."""

    ACTIVE = "active"
    EXPIRED = "expired"
    CLEARED = "cleared"


@dataclass
class Session:
    """A bounded period of user activity identified by a stable id.

    Only SessionManager mutates instances; everything else receives the id
    by value or a ``to_dict()`` snapshot.
    """

    id: str
    started_at: datetime
    last_activity_at: datetime
    state: SessionState = SessionState.ACTIVE
    user_id: Optional[str] = None
    browser: str = "Unknown"
    os: str = "Unknown"
    device: str = "Unknown"
    pages_viewed: int = 0
    actions_taken: int = 0
    ended_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    def duration_seconds(self, now: datetime) -> int:
        """Seconds between start and end (or ``now`` while still open)."""
        end = self.ended_at or now
        return max(0, int((end - self.started_at).total_seconds()))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "state": self.state.value,
            "started_at": self.started_at.isoformat(),
            "last_activity_at": self.last_activity_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "user_id": self.user_id,
            "browser": self.browser,
            "os": self.os,
            "device": self.device,
            "pages_viewed": self.pages_viewed,
            "actions_taken": self.actions_taken,
        }
