from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for sequence counters.

    Use these values for factory-level ``lock_mode`` or registry-level
    defaults. Sequence counters are the only state a build mutates on the
    factory, so the lock mode decides whether concurrent builds on one
    factory can observe a partial increment.
    """

    THREAD = "thread"
    """Guard sequence increments with ``threading.Lock``."""

    NONE = "none"
    """Disable locking around sequence increments."""
