"""
Platform event source: owner-scoped subscribe/unsubscribe for host signals.
"""

from .registry import PlatformEventSource, PlatformSignal, Subscription

__all__ = ['PlatformEventSource', 'PlatformSignal', 'Subscription']
