"""Assignment compatibility between runtime values and declared types."""

from __future__ import annotations

import types
from typing import Annotated, Any, Literal, Union, get_args, get_origin

from typing_extensions import get_protocol_members, is_protocol

_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)

# target -> source types that convert to it through an explicit ``target(value)`` call
_NUMERIC_WIDENING: dict[type, tuple[type, ...]] = {
    float: (int,),
    complex: (int, float),
}


def is_convertible(value: Any, target: Any) -> bool:
    """Return whether ``value`` may be assigned to something declared as ``target``.

    This is assignment compatibility, never parsing: ``"1"`` is not convertible
    to ``int``.

    Args:
        value: Runtime value being checked.
        target: Declared type of the parameter or field receiving the value.

    """
    if target is Any or target is object:
        return True
    if target is None or target is type(None):
        return value is None

    origin = get_origin(target)
    if origin is Annotated:
        return is_convertible(value, get_args(target)[0])
    if origin in _UNION_ORIGINS:
        return any(is_convertible(value, arm) for arm in get_args(target))
    if origin is Literal:
        return value in get_args(target)
    if origin is not None:
        return is_convertible(value, origin)

    supertype = getattr(target, "__supertype__", None)
    if supertype is not None:
        return is_convertible(value, supertype)

    if not isinstance(target, type):
        return False
    if _widens_to(value, target):
        return True
    if is_protocol(target) and not getattr(target, "_is_runtime_protocol", False):
        return all(hasattr(value, member) for member in get_protocol_members(target))
    return isinstance(value, target)


def convert(value: Any, target: Any) -> Any:
    """Convert ``value`` to ``target``.

    Only numeric widening changes the value; every other compatible value is
    already usable as is and is returned unchanged.
    """
    origin = get_origin(target)
    if origin is Annotated:
        return convert(value, get_args(target)[0])
    if origin in _UNION_ORIGINS:
        arms = get_args(target)
        if any(_is_instance_of(value, arm) for arm in arms):
            return value
        for arm in arms:
            if is_convertible(value, arm):
                return convert(value, arm)
        return value
    if isinstance(target, type) and _widens_to(value, target):
        return target(value)
    return value


def _widens_to(value: Any, target: type) -> bool:
    sources = _NUMERIC_WIDENING.get(target)
    if sources is None or isinstance(value, bool):
        return False
    return isinstance(value, sources)


def _is_instance_of(value: Any, target: Any) -> bool:
    if target is None or target is type(None):
        return value is None
    return isinstance(target, type) and not is_protocol(target) and isinstance(value, target)


__all__ = ["convert", "is_convertible"]
