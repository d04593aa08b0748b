"""deferred — synchronous Deferred/Promise primitives.

Invariants:
    - Importing the package configures nothing (no logging handlers, no settings reads)

Design Decisions:
    - Public names re-exported here explicitly; internals stay under deferred.core
"""

from deferred.core.callback_list import CallbackList, current_context
from deferred.core.deferred import Deferred, Promise
from deferred.core.fsm import FiniteStateMachine
from deferred.core.protocols import Thenable
from deferred.core.when import when

__all__ = [
    "CallbackList",
    "Deferred",
    "FiniteStateMachine",
    "Promise",
    "Thenable",
    "current_context",
    "when",
]
