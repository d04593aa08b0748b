"""Deferred & Promise — three-state producer/consumer pair built on one FSM.

Invariants:
    - A Deferred starts "pending"; "resolved" and "rejected" are final
    - done/fail fire at most once and replay to late listeners; progress repeats
    - Promise exposes consumer operations only — no resolve/reject/notify in any form
    - deferred.promise() always returns the same Promise instance
    - then() forwards plain values on the channel they arrived on and adopts promises

Design Decisions:
    - Producer/consumer methods written out per state instead of generated from
      STATES by name (ADR: every mapping visible, no getattr generation)
    - Promise delegates and returns itself where the Deferred would return the Deferred,
      so chaining through a Promise never leaks the producer
    - Exceptions raised by then() filters propagate to the caller of the transition
"""

import itertools
import logging
from collections.abc import Callable
from typing import Any

from deferred.core.callback_list import published_context
from deferred.core.domain_types import STATES, DeferredState
from deferred.core.errors import ErrorContext, InvalidInitializerError
from deferred.core.fsm import FiniteStateMachine
from deferred.core.protocols import PROMISE_VIEW_ATTR, Thenable, promise_view

logger = logging.getLogger(__name__)

# Consumer surface copied onto foreign objects by Deferred.promise(obj);
# promise() itself is replaced by one returning the object
PROMISE_FUNCTIONS = (
    "state", "then", "done", "fail", "always", "pipe", "progress",
    "is_resolved", "is_rejected",
)

_ids = itertools.count(1)


class Promise(Thenable):
    """Read-only view over a Deferred."""

    def __init__(self, deferred: "Deferred"):
        self.__deferred = deferred

    def __repr__(self) -> str:
        return f"<Promise of Deferred #{self.__deferred.id} {self.state()}>"

    def promise(self) -> "Promise":
        return self

    def state(self) -> str:
        return self.__deferred.state()

    def is_resolved(self) -> bool:
        return self.__deferred.is_resolved()

    def is_rejected(self) -> bool:
        return self.__deferred.is_rejected()

    def done(self, cb: Callable) -> "Promise":
        self.__deferred.done(cb)
        return self

    def fail(self, cb: Callable) -> "Promise":
        self.__deferred.fail(cb)
        return self

    def progress(self, cb: Callable) -> "Promise":
        self.__deferred.progress(cb)
        return self

    def always(self, cb: Callable) -> "Promise":
        self.__deferred.always(cb)
        return self

    def then(
        self,
        on_resolved: Callable | None = None,
        on_rejected: Callable | None = None,
        on_progress: Callable | None = None,
    ) -> "Promise":
        return self.__deferred.then(on_resolved, on_rejected, on_progress)

    pipe = then


class Deferred(Thenable):
    """Producer side: can resolve, reject or notify exactly as its state allows."""

    def __init__(self, init: Callable[["Deferred"], Any] | None = None):
        self.id = next(_ids)
        if init is not None and not callable(init):
            err = InvalidInitializerError(init, ErrorContext(deferred_id=self.id))
            logger.warning(
                err.message,
                extra={"deferred_id": self.id, "error_code": err.code},
            )
            raise err
        self._fsm = FiniteStateMachine(
            DeferredState.PENDING,
            {definition.state: definition.options for definition in STATES.values()},
        )
        self._promise: Promise | None = None
        logger.debug("Deferred created", extra={"deferred_id": self.id})
        if init is not None:
            with published_context(self):
                init(self)

    def __repr__(self) -> str:
        return f"<Deferred #{self.id} {self.state()}>"

    # ─── Promise view ───────────────────────────────────────────

    def promise(self, obj: Any = None) -> Any:
        """The shared Promise view, or obj decorated with the consumer surface.

        A decorated obj answers promise() with itself and is adopted by then()
        and when() like any Promise.
        """
        if self._promise is None:
            self._promise = Promise(self)
        if obj is None:
            return self._promise
        for name in PROMISE_FUNCTIONS:
            setattr(obj, name, getattr(self._promise, name))
        obj.promise = lambda: obj
        setattr(obj, PROMISE_VIEW_ATTR, self._promise)
        return obj

    # ─── Queries ────────────────────────────────────────────────

    def state(self) -> str:
        return self._fsm.state()

    def is_resolved(self) -> bool:
        return self._fsm.state() == DeferredState.RESOLVED.value

    def is_rejected(self) -> bool:
        return self._fsm.state() == DeferredState.REJECTED.value

    # ─── Listeners ──────────────────────────────────────────────

    def done(self, cb: Callable) -> "Deferred":
        self._fsm.on(DeferredState.RESOLVED, cb)
        return self

    def fail(self, cb: Callable) -> "Deferred":
        self._fsm.on(DeferredState.REJECTED, cb)
        return self

    def progress(self, cb: Callable) -> "Deferred":
        self._fsm.on(DeferredState.PENDING, cb)
        return self

    def always(self, cb: Callable) -> "Deferred":
        return self.done(cb).fail(cb)

    # ─── Producers ──────────────────────────────────────────────

    def resolve(self, *args: Any) -> "Deferred":
        return self.resolve_with(self, *args)

    def resolve_with(self, context: Any, *args: Any) -> "Deferred":
        self._fsm.state(DeferredState.RESOLVED, context, *args)
        return self

    def reject(self, *args: Any) -> "Deferred":
        return self.reject_with(self, *args)

    def reject_with(self, context: Any, *args: Any) -> "Deferred":
        self._fsm.state(DeferredState.REJECTED, context, *args)
        return self

    def notify(self, *args: Any) -> "Deferred":
        return self.notify_with(self, *args)

    def notify_with(self, context: Any, *args: Any) -> "Deferred":
        self._fsm.state(DeferredState.PENDING, context, *args)
        return self

    # ─── Chaining ───────────────────────────────────────────────

    def then(
        self,
        on_resolved: Callable | None = None,
        on_rejected: Callable | None = None,
        on_progress: Callable | None = None,
    ) -> Promise:
        """Chain a new Promise fed by filtered outcomes of this one.

        Each channel is wired independently. A filter's plain return value is
        forwarded on the same channel with this Deferred's Promise as the
        context; a promise-capable return value is adopted. Without a filter the
        original arguments are forwarded unchanged.
        """
        filters = (on_resolved, on_rejected, on_progress)
        chained = Deferred()
        source = self.promise()
        listen = {
            DeferredState.RESOLVED: self.done,
            DeferredState.REJECTED: self.fail,
            DeferredState.PENDING: self.progress,
        }
        forward_with = {
            DeferredState.RESOLVED: chained.resolve_with,
            DeferredState.REJECTED: chained.reject_with,
            DeferredState.PENDING: chained.notify_with,
        }
        for definition in STATES.values():
            filter_ = filters[definition.then_index]
            listen[definition.state](_chain_listener(
                filter_ if callable(filter_) else None,
                source, chained, forward_with[definition.state],
            ))
        return chained.promise()

    pipe = then


def _chain_listener(
    filter_: Callable | None,
    source: Promise,
    chained: Deferred,
    forward_with: Callable[..., Deferred],
) -> Callable:
    def listener(*args: Any) -> None:
        if filter_ is None:
            forward_with(source, *args)
            return
        result = filter_(*args)
        adopted = promise_view(result)
        if adopted is not None:
            adopted.done(chained.resolve)
            adopted.fail(chained.reject)
            adopted.progress(chained.notify)
        else:
            forward_with(source, result)
    return listener

