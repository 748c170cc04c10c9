# repertoire_trainer/tracing.py

"""
tracing
~~~~~~~

This module provides components for session-wide traceability and
context-aware logging.
"""

import functools
import uuid
from dataclasses import asdict, dataclass
from typing import Any, Callable

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SessionTrace:
    """Identifies one practice session generation for log correlation."""
    session_id: str
    opening_id: str
    generation: int

    @classmethod
    def new(cls, opening_id: str = "", generation: int = 0) -> "SessionTrace":
        return cls(session_id=uuid.uuid4().hex[:8], opening_id=opening_id, generation=generation)

    @property
    def short_id(self) -> str:
        """A short, human-readable version of the full ID."""
        return f"{self.session_id}:{self.generation}"

    def as_dict(self) -> dict:
        """Returns the ID as a dictionary suitable for logging."""
        return asdict(self)


def trace_transition(func: Callable) -> Callable:
    """A decorator that logs a session transition with the session's trace bound."""
    @functools.wraps(func)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        trace = getattr(self, "trace", None)
        context = trace.as_dict() if trace is not None else {}
        with structlog.contextvars.bound_contextvars(**context):
            logger.debug("Entering session transition.", transition=func.__name__)
            result = func(self, *args, **kwargs)
            logger.debug("Exiting session transition.", transition=func.__name__,
                         state=getattr(getattr(self, "state", None), "value", None))
            return result
    return wrapper
