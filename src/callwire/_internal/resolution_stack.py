from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from callwire.exceptions import CallwireResolutionDepthError

# Context variable for resolution tracking; every thread starts with an empty chain
_resolution_stack: ContextVar[tuple[str, ...]] = ContextVar("resolution_stack", default=())


def current_chain() -> tuple[str, ...]:
    """Return the type keys being resolved in this context, outermost first."""
    return _resolution_stack.get()


@contextmanager
def resolving(key: str, max_depth: int) -> Iterator[None]:
    """Track ``key`` as being resolved for the duration of the block.

    Raises ``CallwireResolutionDepthError`` when entering the block would make
    the chain longer than ``max_depth``.
    """
    stack = _resolution_stack.get()
    if len(stack) >= max_depth:
        raise CallwireResolutionDepthError([*stack, key], max_depth)
    token = _resolution_stack.set((*stack, key))
    try:
        yield
    finally:
        _resolution_stack.reset(token)


__all__ = ["current_chain", "resolving"]
