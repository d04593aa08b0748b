"""Finite State Machine — named state holder that fires per-state callback lists.

Invariants:
    - Effective options of a state are computed once and cached
    - A transition is gated by the CURRENT state's final_state flag, not the target's
    - From a final state, state(x, ...) returns False and fires nothing
    - Transitioning to the current state is allowed and fires its list again

Design Decisions:
    - Per-state options instead of one global triple: pending stays repeatable while
      resolved/rejected stay terminal (ADR: one mechanism for all three Deferred states)
    - CallbackLists created lazily on first listener or first fire
"""

import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any, Literal

from pydantic import ValidationError

from deferred.config import get_settings
from deferred.core.callback_list import CallbackList
from deferred.core.domain_types import StateOptions
from deferred.core.errors import InvalidStateOptionsError
from deferred.core.helpers import merge, nvl

logger = logging.getLogger(__name__)


def state_name(state: Any) -> str:
    """Normalise a state given as str or str-valued Enum to its plain name."""
    if isinstance(state, Enum):
        return str(state.value)
    return str(state)


class FiniteStateMachine:
    """A current state plus one CallbackList per state name."""

    def __init__(
        self,
        state: Any = None,
        states_options: Mapping[Any, StateOptions | Mapping[str, Any]] | None = None,
        once: bool | None = None,
        memory: bool | None = None,
        final_state: bool | None = None,
    ):
        settings = get_settings()
        self._state = state_name(nvl(state, settings.fsm_initial_state))
        self._listeners: dict[str, CallbackList] = {}
        self._state_opts: dict[str, StateOptions | Mapping[str, Any]] = {
            state_name(name): opts for name, opts in (states_options or {}).items()
        }
        self._actual_state_opts: dict[str, StateOptions] = {}
        self._defaults = StateOptions(
            once=nvl(once, settings.fsm_once),
            memory=nvl(memory, settings.fsm_memory),
            final_state=nvl(final_state, settings.fsm_final_state),
        )

    def state_options(self, state: Any) -> StateOptions:
        """Effective options for state: defaults overridden by the explicit entry."""
        state = state_name(state)
        actual = self._actual_state_opts.get(state)
        if actual is None:
            overrides = self._state_opts.get(state)
            if isinstance(overrides, StateOptions):
                overrides = overrides.model_dump(exclude_unset=True)
            try:
                actual = StateOptions(
                    **merge({}, self._defaults.model_dump(), overrides),
                )
            except ValidationError as exc:
                err = InvalidStateOptionsError(state, str(exc))
                logger.warning(
                    err.message, extra={"state": state, "error_code": err.code},
                )
                raise err from exc
            self._actual_state_opts[state] = actual
        return actual

    def _callback_list(self, state: str) -> CallbackList:
        cb_list = self._listeners.get(state)
        if cb_list is None:
            options = self.state_options(state).callback_options()
            cb_list = self._listeners[state] = CallbackList(options)
        return cb_list

    def on(self, state: Any, cb: Callable) -> "FiniteStateMachine":
        """Listen for transitions into state."""
        self._callback_list(state_name(state)).add(cb)
        return self

    add_listener = on

    def state(
        self, new_state: Any = None, context: Any = None, *args: Any,
    ) -> str | Literal[False]:
        """Get the current state, or transition to new_state firing its listeners.

        Returns the state after the change, or False when the current state
        is final and the transition was refused.
        """
        if new_state is None:
            return self._state
        if self.state_options(self._state).final_state:
            logger.debug(
                f"Transition refused: '{self._state}' is final",
                extra={"state": self._state, "target_state": state_name(new_state)},
            )
            return False
        self._state = new_state = state_name(new_state)
        self._callback_list(new_state).fire_with(context, *args)
        return self._state
