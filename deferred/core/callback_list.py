"""Callback List — ordered listeners fired with a context and arguments.

Invariants:
    - Listeners fire in insertion order; duplicates allowed
    - once=True: the list is empty after every fire returns
    - memory=True: the last (context, args) is replayed to listeners added later
    - The firing context is visible through current_context() only while a listener runs

Design Decisions:
    - ContextVar for the receiver: Python callables have no rebindable `this`,
      so the context is published for the duration of the call (ADR: plain cb(*args) signature)
    - MemoryStatus flag over truthiness of stored args: empty args are a valid memory
    - Replay on add invokes only the new listener, never re-fires existing ones
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from deferred.core.domain_types import CallbackOptions, MemoryStatus
from deferred.core.errors import InvalidListenerError

_firing_context: ContextVar[Any] = ContextVar("deferred_firing_context", default=None)


def current_context() -> Any:
    """Context of the firing currently invoking the caller, or None outside a firing."""
    return _firing_context.get()


@contextmanager
def published_context(context: Any) -> Iterator[Any]:
    """Publish context to current_context() for the duration of the block."""
    token = _firing_context.set(context)
    try:
        yield context
    finally:
        _firing_context.reset(token)


class CallbackList:
    """Listener collection with once/memory firing policy."""

    def __init__(self, options: CallbackOptions | None = None):
        self.options = options or CallbackOptions()
        self._callbacks: list[Callable] = []
        self._memory = (
            MemoryStatus.EMPTY if self.options.memory else MemoryStatus.DISABLED
        )
        self._fired_context: Any = None
        self._fired_args: tuple = ()

    def __len__(self) -> int:
        return len(self._callbacks)

    @property
    def fired(self) -> bool:
        """True when a firing is remembered for replay."""
        return self._memory is MemoryStatus.REMEMBERED

    def add(self, cb: Callable) -> "CallbackList":
        """Register cb. Replays the remembered firing to it if there is one."""
        if not callable(cb):
            raise InvalidListenerError(cb)
        self._callbacks.append(cb)
        if self.fired:
            self._invoke([cb], self._fired_context, self._fired_args)
            if self.options.once:
                self._callbacks.clear()
        return self

    def fire_with(self, context: Any, *args: Any) -> "CallbackList":
        """Invoke every listener with context published and args passed."""
        if self._memory is not MemoryStatus.DISABLED:
            self._memory = MemoryStatus.REMEMBERED
            self._fired_context = context
            self._fired_args = args
        self._invoke(list(self._callbacks), context, args)
        if self.options.once:
            self._callbacks.clear()
        return self

    def fire(self, *args: Any) -> "CallbackList":
        return self.fire_with(None, *args)

    @staticmethod
    def _invoke(callbacks: list[Callable], context: Any, args: tuple) -> None:
        with published_context(context):
            for cb in callbacks:
                cb(*args)
