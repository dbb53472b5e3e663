"""
Fault boundary.

Catches exceptions raised inside a block, reports each one exactly once and
decides whether the caller recovers (suppress) or sees the exception again.
"""

import contextvars
import functools
import logging
from typing import Callable, List, Optional, Tuple

from .transport import TelemetryTransport

logger = logging.getLogger(__name__)

_component_chain: contextvars.ContextVar = contextvars.ContextVar("component_chain", default=())
# Faults already reported inside the outermost active boundary
_reported_errors: contextvars.ContextVar = contextvars.ContextVar("reported_errors", default=None)


def component_stack() -> str:
    """Render the active boundary names innermost first."""
    return "".join(f"\n    in {name}" for name in reversed(_component_chain.get()))


class ErrorBoundary:
    """Context manager / decorator that reports faults to a TelemetryTransport.

    Usage::

        with ErrorBoundary(transport, "Gallery"):
            render_gallery()

        @ErrorBoundary(transport, "RSVP", suppress=False)
        def submit_rsvp(form): ...
    """

    def __init__(
        self,
        transport: TelemetryTransport,
        component: Optional[str] = None,
        suppress: bool = True,
        fallback: Optional[Callable[[Exception], None]] = None,
    ):
        self.transport = transport
        self.component = component or "ErrorBoundary"
        self.suppress = suppress
        self.fallback = fallback
        self.error: Optional[Exception] = None
        self._tokens: List[Tuple[contextvars.Token, Optional[contextvars.Token]]] = []

    @property
    def has_error(self) -> bool:
        return self.error is not None

    def __enter__(self) -> "ErrorBoundary":
        chain_token = _component_chain.set(_component_chain.get() + (self.component,))
        reported_token = _reported_errors.set([]) if _reported_errors.get() is None else None
        self._tokens.append((chain_token, reported_token))
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc is None or not isinstance(exc, Exception):
                return False
            reported = _reported_errors.get()
            # Only the innermost boundary reports a given exception
            if any(seen is exc for seen in reported):
                return self.suppress
            self.error = exc
            logger.error(f"Error caught by boundary {self.component}: {exc!r}")
            self.transport.report_error(exc, {"componentStack": component_stack()})
            reported.append(exc)
            if self.fallback is not None:
                try:
                    self.fallback(exc)
                except Exception as fallback_exc:
                    logger.warning(f"Boundary fallback failed in {self.component}: {fallback_exc}")
            return self.suppress
        finally:
            chain_token, reported_token = self._tokens.pop()
            _component_chain.reset(chain_token)
            if reported_token is not None:
                _reported_errors.reset(reported_token)

    def __call__(self, func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with self:
                return func(*args, **kwargs)
            return None
        return wrapper

    def reset(self) -> None:
        """Clear the recorded error so the guarded block can be retried."""
        self.error = None
