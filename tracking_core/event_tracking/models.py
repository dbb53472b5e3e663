"""
Data Models for Event Tracking

Defines the data structures used by the event tracking system.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from .event_types import EventKind

Scalar = Union[str, int, float, bool, None]


def freeze_details(details: Optional[Mapping[str, Any]]) -> Mapping[str, Scalar]:
    """Copy ``details`` into a read-only mapping of str keys to scalars.

    Non-scalar values are stored as their ``str()`` form.
    """
    frozen: Dict[str, Scalar] = {}
    for key, value in (details or {}).items():
        if value is None or isinstance(value, (str, int, float, bool)):
            frozen[str(key)] = value
        else:
            frozen[str(key)] = str(value)
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class Event:
    """A single recorded occurrence tied to exactly one session."""

    session_id: str
    kind: EventKind
    category: str
    timestamp: str
    action_type: Optional[str] = None
    interaction_type: Optional[str] = None
    details: Mapping[str, Scalar] = field(default_factory=lambda: MappingProxyType({}))
    value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the ingestion wire format."""
        data: Dict[str, Any] = {
            "session_id": self.session_id,
            "kind": self.kind.value,
            "category": self.category,
            "details": dict(self.details),
            "value": self.value,
            "timestamp": self.timestamp,
        }
        if self.kind is EventKind.INTERACTION:
            data["interaction_type"] = self.interaction_type
        else:
            data["action_type"] = self.action_type
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Event':
        """Create Event from dictionary."""
        return cls(
            session_id=data.get("session_id", ""),
            kind=EventKind(data.get("kind", EventKind.CUSTOM_ACTIVITY.value)),
            category=data.get("category", ""),
            timestamp=data.get("timestamp", ""),
            action_type=data.get("action_type"),
            interaction_type=data.get("interaction_type"),
            details=freeze_details(data.get("details")),
            value=data.get("value")
        )


@dataclass
class EventPayload:
    """Payload structure for incoming events at the collector."""

    session_id: str
    kind: str
    category: str
    timestamp: str
    action_type: Optional[str] = None
    interaction_type: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    value: Optional[str] = None

    def validate(self) -> bool:
        """Validate the payload structure."""
        if not (
            isinstance(self.session_id, str) and self.session_id and
            isinstance(self.kind, str) and EventKind.is_valid(self.kind) and
            isinstance(self.category, str) and
            isinstance(self.timestamp, str) and
            isinstance(self.details, dict) and
            (self.value is None or isinstance(self.value, str))
        ):
            return False
        if self.kind == EventKind.INTERACTION.value:
            return isinstance(self.interaction_type, str)
        return isinstance(self.action_type, str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EventPayload':
        return cls(
            session_id=data.get("session_id"),
            kind=data.get("kind"),
            category=data.get("category"),
            timestamp=data.get("timestamp"),
            action_type=data.get("action_type"),
            interaction_type=data.get("interaction_type"),
            details=data.get("details") or {},
            value=data.get("value")
        )
