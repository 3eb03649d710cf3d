from __future__ import annotations

import types
from typing import Annotated, Any, ForwardRef, Literal, TypeVar, Union, get_args, get_origin

from typing_extensions import TypeAliasType

from callwire.markers import Inject

NONE_KEY = "None"
ANY_KEY = "typing.Any"

_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)


def type_key(annotation: Any) -> str:
    """Return the canonical string identity of a runtime type.

    Keys are stable for the process lifetime and distinct types get distinct
    keys. ``typing.NewType`` aliases get their own key, different from the
    supertype. Classes defined inside functions carry their ``id`` so that two
    local classes sharing a qualified name never collide.

    ``Inject`` markers are ignored: ``Injected[Service]`` and ``Service`` share
    a key. Other ``Annotated`` metadata is part of the key.

    Args:
        annotation: A class, ``NewType``, generic alias, union, ``Annotated``
            hint, ``TypeVar``, ``None`` or ``typing.Any``.

    """
    if annotation is None or annotation is type(None):
        return NONE_KEY
    if annotation is Any:
        return ANY_KEY

    origin = get_origin(annotation)
    if origin is Annotated:
        return _annotated_key(annotation)
    if origin in _UNION_ORIGINS:
        arm_keys = sorted(type_key(arm) for arm in get_args(annotation))
        return f"typing.Union[{', '.join(arm_keys)}]"
    if origin is Literal:
        return f"typing.Literal[{', '.join(repr(arg) for arg in get_args(annotation))}]"
    if origin is not None:
        args = get_args(annotation)
        if not args:
            return type_key(origin)
        return f"{type_key(origin)}[{', '.join(_arg_key(arg) for arg in args)}]"

    if isinstance(annotation, TypeVar):
        return f"~{annotation.__name__}"
    if isinstance(annotation, ForwardRef):
        return annotation.__forward_arg__
    if isinstance(annotation, TypeAliasType):
        return _qualified_name(annotation)
    if _is_new_type(annotation):
        return _qualified_name(annotation)
    if isinstance(annotation, type):
        return _qualified_name(annotation)
    return repr(annotation)


def _annotated_key(annotation: Any) -> str:
    inner, *metadata = get_args(annotation)
    extra = [repr(item) for item in metadata if not isinstance(item, Inject)]
    inner_key = type_key(inner)
    if not extra:
        return inner_key
    return f"typing.Annotated[{inner_key}, {', '.join(extra)}]"


def _arg_key(arg: Any) -> str:
    if arg is Ellipsis:
        return "..."
    if isinstance(arg, list):
        return f"[{', '.join(_arg_key(item) for item in arg)}]"
    return type_key(arg)


def _is_new_type(annotation: Any) -> bool:
    return callable(annotation) and hasattr(annotation, "__supertype__")


def _qualified_name(annotation: Any) -> str:
    module = getattr(annotation, "__module__", None)
    qualname = getattr(annotation, "__qualname__", None) or annotation.__name__
    name = qualname if module in (None, "builtins") else f"{module}.{qualname}"
    if "<locals>" in qualname:
        return f"{name}@{id(annotation):x}"
    return name


__all__ = ["ANY_KEY", "NONE_KEY", "type_key"]
