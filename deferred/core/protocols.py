"""Capability Contracts — what makes a value "promise-capable".

Invariants:
    - then() and when() dispatch through promise_view(): a Thenable, or an object
      decorated by Deferred.promise(obj) and carrying its Promise under PROMISE_VIEW_ATTR
    - Every Thenable can produce its read-only Promise view via promise()

Design Decisions:
    - ABC over Protocol: dispatch needs a nominal marker, and a runtime_checkable
      Protocol would be the same structural probe it replaces (ADR: explicit capability)
    - Foreign promise types opt in with Thenable.register(cls)
    - Decorated objects are marked per instance, not by class registration
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

# Set on objects decorated by Deferred.promise(obj)
PROMISE_VIEW_ATTR = "_promise_view"


class Thenable(ABC):
    """Consumer capability shared by Deferred and its Promise view."""

    @abstractmethod
    def promise(self) -> "Thenable": ...

    @abstractmethod
    def state(self) -> str: ...

    @abstractmethod
    def done(self, cb: Callable) -> "Thenable": ...

    @abstractmethod
    def fail(self, cb: Callable) -> "Thenable": ...

    @abstractmethod
    def progress(self, cb: Callable) -> "Thenable": ...

    @abstractmethod
    def then(
        self,
        on_resolved: Callable | None = None,
        on_rejected: Callable | None = None,
        on_progress: Callable | None = None,
    ) -> "Thenable": ...


def promise_view(value: Any) -> Thenable | None:
    """The Promise to subscribe to for value, or None when value is a plain value."""
    if isinstance(value, Thenable):
        return value.promise()
    view = getattr(value, PROMISE_VIEW_ATTR, None)
    if isinstance(view, Thenable):
        return view
    return None
