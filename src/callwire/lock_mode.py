from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for singleton materialization.

    The registry stores are always guarded. The lock mode only decides whether
    the first resolution of a singleton is serialized per key.
    """

    THREAD = "thread"
    """Guard singleton materialization with a per-key ``threading.RLock``."""

    NONE = "none"
    """Skip the per-key lock. Concurrent first access may run a factory twice."""
