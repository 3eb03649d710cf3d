from callwire.lock_mode import LockMode

DEFAULT_LOCK_MODE = LockMode.THREAD

DEFAULT_MAX_RESOLUTION_DEPTH = 64
"""How many nested resolutions a single call may open before giving up."""

ZERO_VALUE_TYPES: frozenset[type] = frozenset(
    {
        bool,
        int,
        float,
        complex,
        str,
        bytes,
        bytearray,
        list,
        dict,
        set,
        frozenset,
        tuple,
    },
)
"""Builtin types whose zero value is produced by calling them without arguments."""
