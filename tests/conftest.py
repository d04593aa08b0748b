"""Root conftest — shared test configuration."""

import pytest

from deferred.config import get_settings
from deferred.core.callback_list import current_context


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Isolate every test from DEFERRED_* variables and the settings cache."""
    for key in (
        "DEFERRED_FSM_INITIAL_STATE", "DEFERRED_FSM_ONCE", "DEFERRED_FSM_MEMORY",
        "DEFERRED_FSM_FINAL_STATE", "DEFERRED_LOG_LEVEL", "DEFERRED_LOG_FORMAT",
    ):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class Recorder:
    """Listener that records (current_context(), args) for every call."""

    def __init__(self):
        self.calls: list[tuple] = []

    def __call__(self, *args):
        self.calls.append((current_context(), args))

    @property
    def args(self) -> list[tuple]:
        return [args for _, args in self.calls]

    @property
    def contexts(self) -> list:
        return [context for context, _ in self.calls]


@pytest.fixture
def make_recorder():
    return Recorder


@pytest.fixture
def recorder():
    return Recorder()
