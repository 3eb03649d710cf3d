from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Any, Final

from callwire._internal.conversion import convert, is_convertible
from callwire._internal.type_keys import type_key


class _Absent:
    """Sentinel type for "no value" in the resolution pipeline."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT: Final = _Absent()
"""Returned by lookups that found nothing. ``None`` stays a legitimate value."""


class ArgumentsTypeMap:
    """Index externally supplied call arguments by the type key of their runtime type.

    A map is built once per top-level ``call``/``get``/``inject_fields`` and is
    shared by every nested resolution of that call, so a factory several levels
    down can still consume an argument the caller passed in.

    Values of the same type key are consumed first-supplied-first. The
    ``implicit`` value (the container itself) comes after every supplied value
    and is never consumed.
    """

    __slots__ = ("_buckets", "_implicit", "_implicit_key")

    def __init__(self, arguments: Iterable[Any] = (), *, implicit: Any = ABSENT) -> None:
        self._buckets: dict[str, deque[Any]] = {}
        for argument in arguments:
            self._buckets.setdefault(type_key(type(argument)), deque()).append(argument)
        self._implicit = implicit
        self._implicit_key = None if implicit is ABSENT else type_key(type(implicit))

    def pull(self, key: str) -> Any:
        """Remove and return the first supplied value whose type key equals ``key``.

        Falls back to the implicit value, left in place, when its type key
        matches. Returns ``ABSENT`` when no such value is left.
        """
        bucket = self._buckets.get(key)
        if bucket:
            return bucket.popleft()
        if key == self._implicit_key:
            return self._implicit
        return ABSENT

    def find_convertible_arg(self, target_key: str, target_type: Any) -> Any:
        """Return the first supplied value assignable to ``target_type``.

        Buckets are scanned in the order their first value was supplied, then
        the implicit value is tried. A value found under a key other than
        ``target_key`` is converted to ``target_type`` before it is returned.
        The value is not consumed.

        Args:
            target_key: Type key of the requested parameter or field.
            target_type: Declared type of the requested parameter or field.

        """
        for key, bucket in self._buckets.items():
            for argument in bucket:
                if is_convertible(argument, target_type):
                    if key != target_key:
                        return convert(argument, target_type)
                    return argument
        if self._implicit_key is not None and is_convertible(self._implicit, target_type):
            return self._implicit
        return ABSENT

    def __repr__(self) -> str:
        counts = ", ".join(f"{key}={len(bucket)}" for key, bucket in self._buckets.items())
        return f"ArgumentsTypeMap({counts})"


__all__ = ["ABSENT", "ArgumentsTypeMap"]
