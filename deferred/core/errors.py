"""Error Hierarchy — typed usage errors raised by the deferred primitives.

Invariants:
    - Rejection is a state, never an exception: nothing here models a rejected Deferred
    - Every error has a code (str) and category (ErrorCategory)
    - Usage errors also subclass the matching builtin (TypeError / ValueError)

Design Decisions:
    - Single hierarchy with DeferredError base: callers catch one type (ADR: uniform error shape)
    - ErrorContext as dataclass: rich debugging info without coupling to logging
    - Exceptions raised by user callbacks are never wrapped — they propagate untouched
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """High-level error categories."""
    VALIDATION = "validation"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    deferred_id: int | None = None
    state: str | None = None
    debug_info: dict[str, Any] | None = None


class DeferredError(Exception):
    """Base exception for all deferred usage errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.context = context or ErrorContext()

    def to_dict(self) -> dict:
        """Structured representation of the error and its context."""
        return {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "deferred_id": self.context.deferred_id,
                "state": self.context.state,
                "debug_info": self.context.debug_info,
            },
        }


# ─── Validation Errors ──────────────────────────────────────────

class InvalidListenerError(DeferredError, TypeError):
    """A non-callable was registered as a listener."""
    def __init__(self, listener: object, context: ErrorContext | None = None):
        super().__init__(
            f"Listener must be callable, got {type(listener).__name__}",
            "INVALID_LISTENER", ErrorCategory.VALIDATION, context,
        )
        self.listener = listener


class InvalidInitializerError(DeferredError, TypeError):
    """Deferred(init) was given a non-callable initializer."""
    def __init__(self, init: object, context: ErrorContext | None = None):
        super().__init__(
            f"Deferred initializer must be callable, got {type(init).__name__}",
            "INVALID_INITIALIZER", ErrorCategory.VALIDATION, context,
        )
        self.init = init


class InvalidStateOptionsError(DeferredError, ValueError):
    """Per-state FSM options could not be validated."""
    def __init__(self, state: str, details: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.state = state
        super().__init__(
            f"Invalid options for state '{state}': {details}",
            "INVALID_STATE_OPTIONS", ErrorCategory.VALIDATION, ctx,
        )
