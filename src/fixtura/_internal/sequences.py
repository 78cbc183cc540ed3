from __future__ import annotations

import threading
from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext
from typing import Any

from fixtura.lock_mode import LockMode

SequenceFunction = Callable[..., Any]
"""Callable receiving the sequence number followed by resolved dependencies."""


def _identity(number: int, *_args: Any) -> int:
    return number


class SequenceCounters:
    """Per-factory counters keyed by sequence attribute name.

    A counter starts at 0 and is incremented before use, so the first value
    handed to a sequence function is 1.
    """

    def __init__(self, lock_mode: LockMode = LockMode.THREAD) -> None:
        self._values: dict[str, int] = {}
        self._lock_mode = lock_mode
        self._lock = threading.Lock()

    def _guard(self) -> AbstractContextManager[Any]:
        if self._lock_mode is LockMode.THREAD:
            return self._lock
        return nullcontext()

    def next(self, name: str) -> int:
        """Advance the counter for ``name`` and return the new value."""
        with self._guard():
            value = self._values.get(name, 0) + 1
            self._values[name] = value
        return value

    def current(self, name: str) -> int:
        """Return the last value emitted for ``name`` (0 when none yet)."""
        return self._values.get(name, 0)

    def reset(self) -> None:
        """Restart every counter so the next value is 1 again."""
        with self._guard():
            self._values.clear()

    def snapshot(self) -> dict[str, int]:
        """Return a copy of the current counter values."""
        return dict(self._values)


def sequence_builder(
    counters: SequenceCounters,
    name: str,
    function: SequenceFunction | None = None,
) -> Callable[..., Any]:
    """Wrap ``function`` so each call receives the next value of ``name``.

    The counter advances only when the wrapped builder runs, so a provided
    (and not self-dependent) value leaves it untouched. ``counters`` belongs
    to the declaring factory; factories copying this builder through
    ``extend`` share the same counter.
    """
    function = function or _identity

    def build_sequence_value(*args: Any) -> Any:
        return function(counters.next(name), *args)

    return build_sequence_value


__all__ = ["SequenceCounters", "SequenceFunction", "sequence_builder"]
