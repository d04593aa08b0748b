"""Aggregator — combine many Thenables or plain values into one Promise.

Invariants:
    - Results are ordered by argument position, not completion order
    - The first rejection rejects the aggregate; other inputs are never cancelled
    - A single promise-capable argument is returned as its own Promise, unwrapped
    - Completion can happen before when() returns if every input is already settled

Design Decisions:
    - when() with no arguments resolves with [] (same shape as the N>1 case)
    - Each successful input also notifies the aggregate's progress channel with
      (index, value) before the completion check
"""

import logging
from typing import Any

from deferred.core.deferred import Deferred
from deferred.core.domain_types import DeferredState
from deferred.core.helpers import to_list
from deferred.core.protocols import promise_view

logger = logging.getLogger(__name__)


def settled_value(args: tuple) -> Any:
    """Collapse the arguments of a done firing into one recorded value."""
    if not args:
        return None
    if len(args) == 1:
        return args[0]
    return args


def when(*inputs: Any) -> Any:
    """Promise resolved with every input's value, or rejected by the first failure."""
    if len(inputs) == 1:
        single = inputs[0]
        if promise_view(single) is not None:
            return single.promise()
        return Deferred().resolve(single).promise()

    args = to_list(inputs)
    aggregate = Deferred()
    results: list[Any] = [None] * len(args)
    remaining = len(args)
    logger.debug(
        "Aggregate created",
        extra={"deferred_id": aggregate.id, "input_count": len(args)},
    )

    def record(index: int, value: Any) -> None:
        nonlocal remaining
        results[index] = value
        remaining -= 1
        aggregate.notify(index, value)
        if remaining == 0:
            aggregate.resolve(results)

    def on_done(index: int):
        return lambda *values: record(index, settled_value(values))

    def on_fail(index: int):
        def reject(*reasons: Any) -> None:
            if aggregate.state() == DeferredState.PENDING.value:
                logger.debug(
                    f"Aggregate rejected by input {index}",
                    extra={"deferred_id": aggregate.id},
                )
            aggregate.reject(*reasons)
        return reject

    for index, arg in enumerate(args):
        view = promise_view(arg)
        if view is not None:
            view.done(on_done(index))
            view.fail(on_fail(index))
        else:
            record(index, arg)

    if not args:
        aggregate.resolve(results)
    return aggregate.promise()

