"""Helpers — the small utility collaborator used by the FSM and Deferred.

Only the helpers without a Python builtin equivalent live here; iteration,
binding and callable checks use the language directly.
"""

from collections.abc import Mapping, MutableMapping, Sequence
from typing import Any, TypeVar

T = TypeVar("T")


def merge(target: MutableMapping, *sources: Mapping | None) -> MutableMapping:
    """Shallow merge into target. Later sources override earlier; None is skipped."""
    for source in sources:
        if source is None:
            continue
        for key, value in source.items():
            target[key] = value
    return target


def to_list(args: Sequence, start: int = 0, *prepend: Any) -> list:
    """Coerce args[start:] into a new list, with prepend values in front."""
    return [*prepend, *args[start:]]


def nvl(value: T | None, default: T) -> T:
    """Return default when value is None."""
    return default if value is None else value
