"""Core Layer — synchronous Deferred/Promise primitives, no IO, no async.

Invariants:
    - No module in core/ imports from infrastructure/
    - Every firing runs listeners synchronously on the caller's stack

Design Decisions:
    - Leaves first: CallbackList <- FiniteStateMachine <- Deferred <- when
"""
