"""
Session Tracking Subsystem

Session identity, activity and expiry state for one browsing context.
"""

from .manager import (
    DEFAULT_SESSION_TIMEOUT,
    ExpiryMonitor,
    SessionManager,
    generate_session_id,
)
from .models import Session, SessionState
from .user_agent import parse_user_agent

__all__ = [
    'DEFAULT_SESSION_TIMEOUT',
    'ExpiryMonitor',
    'Session',
    'SessionManager',
    'SessionState',
    'generate_session_id',
    'parse_user_agent',
]
