"""Domain Types — state names, option models and the Deferred state table.

Invariants:
    - The three Deferred states are encoded as DeferredState — no raw string matching
    - Option models are frozen: effective options never change after first use
    - STATES is the single source of truth for listen/fire names and per-state policy

Design Decisions:
    - str Enum for states: compares equal to the plain state name returned by FSM.state()
    - Pydantic models for options: boolean coercion and unknown-key rejection at the boundary
      (ADR: options arrive as plain mappings from callers)
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict


# ─── States ──────────────────────────────────────────────────────

class DeferredState(str, Enum):
    """The three fixed Deferred states."""
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class MemoryStatus(str, Enum):
    """Whether a CallbackList remembers its last firing."""
    DISABLED = "disabled"      # memory=False
    EMPTY = "empty"            # memory=True, never fired
    REMEMBERED = "remembered"  # memory=True, (context, args) stored


# ─── Options ─────────────────────────────────────────────────────

class CallbackOptions(BaseModel):
    """Firing policy of a single CallbackList."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    once: bool = False
    memory: bool = True


class StateOptions(CallbackOptions):
    """Per-state FSM policy — CallbackList policy plus the final flag."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    final_state: bool = False

    def callback_options(self) -> CallbackOptions:
        return CallbackOptions(once=self.once, memory=self.memory)


# ─── State table ─────────────────────────────────────────────────

@dataclass(frozen=True)
class StateDefinition:
    """One row of the Deferred state table."""
    state: DeferredState
    listen: str
    fire: str
    then_index: int
    options: StateOptions


STATES: dict[DeferredState, StateDefinition] = {
    DeferredState.RESOLVED: StateDefinition(
        DeferredState.RESOLVED, "done", "resolve", 0,
        StateOptions(once=True, memory=True, final_state=True),
    ),
    DeferredState.REJECTED: StateDefinition(
        DeferredState.REJECTED, "fail", "reject", 1,
        StateOptions(once=True, memory=True, final_state=True),
    ),
    DeferredState.PENDING: StateDefinition(
        DeferredState.PENDING, "progress", "notify", 2,
        StateOptions(once=False, memory=True, final_state=False),
    ),
}
