from __future__ import annotations

import dataclasses
import inspect
import logging
import types
from dataclasses import dataclass
from typing import Any, ClassVar, get_origin, get_type_hints

from typing_extensions import is_protocol

from callwire._internal.integrations.attrs import attrs_field_defaults, is_attrs_class
from callwire._internal.integrations.pydantic import (
    construct_pydantic_model,
    is_frozen_pydantic_model,
    is_pydantic_model,
    pydantic_field_annotations,
)
from callwire.defaults import ZERO_VALUE_TYPES
from callwire.exceptions import CallwireInjectionTargetError
from callwire.markers import Inject, find_inject_marker, strip_annotated

logger = logging.getLogger(__name__)

_NOT_STRUCT_TYPES: tuple[type[Any], ...] = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.ModuleType,
    tuple,
)


@dataclass(frozen=True, slots=True)
class FieldInfo:
    """Structural metadata about one declared field of an aggregate class."""

    name: str
    annotation: Any
    """Declared annotation, including ``Annotated`` metadata."""
    directive: Inject | None

    @property
    def declared_type(self) -> Any:
        return strip_annotated(self.annotation)

    @property
    def has_directive(self) -> bool:
        return self.directive is not None


class StructMetadataReader:
    """Read declared fields of struct-like classes and build zero-valued instances.

    Dataclasses, attrs classes, pydantic models and plain classes with
    annotated attributes are supported. Field lists are cached per class.
    """

    def __init__(self) -> None:
        self._fields_cache: dict[type[Any], tuple[FieldInfo, ...]] = {}

    def fields(self, cls: type[Any]) -> tuple[FieldInfo, ...]:
        """Return the declared fields of ``cls`` in declaration order, base classes first."""
        cached = self._fields_cache.get(cls)
        if cached is not None:
            return cached

        if is_pydantic_model(cls):
            hints = pydantic_field_annotations(cls)
        else:
            hints = self._type_hints(cls)
        names = [name for name, hint in hints.items() if not _is_class_var(hint)]

        result = tuple(
            FieldInfo(name=name, annotation=hints[name], directive=find_inject_marker(hints[name]))
            for name in names
            if not isinstance(hints[name], dataclasses.InitVar)
        )
        self._fields_cache[cls] = result
        return result

    def validate_target(self, target: Any) -> None:
        """Raise ``CallwireInjectionTargetError`` unless ``target`` can receive fields."""
        if isinstance(target, type):
            raise CallwireInjectionTargetError(target, "expected an instance, got a class")
        if target is None or type(target) in ZERO_VALUE_TYPES:
            raise CallwireInjectionTargetError(target, "builtin values have no injectable fields")
        if isinstance(target, _NOT_STRUCT_TYPES):
            raise CallwireInjectionTargetError(target, "not a struct-like object")
        if not hasattr(target, "__dict__") and not hasattr(type(target), "__slots__"):
            raise CallwireInjectionTargetError(target, "object has no attribute storage")
        if self.is_frozen(type(target)):
            raise CallwireInjectionTargetError(target, "frozen objects cannot be modified")

    def is_frozen(self, cls: type[Any]) -> bool:
        params = getattr(cls, "__dataclass_params__", None)
        if params is not None and params.frozen:
            return True
        return is_frozen_pydantic_model(cls)

    def allocate(self, cls: Any) -> Any:
        """Return a zero-valued instance of ``cls`` without running ``__init__``.

        Builtin scalars and containers are created empty. Aggregates get every
        declared field set to its default, or to the zero value of its type when
        there is no default. Types that cannot be allocated (``Any``, abstract
        classes, protocols, unknown typing constructs) yield ``None``.
        """
        zero = zero_value(cls)
        if zero is not None or not isinstance(cls, type):
            return zero
        if inspect.isabstract(cls) or is_protocol(cls) or issubclass(cls, _NOT_STRUCT_TYPES):
            return None

        if is_pydantic_model(cls):
            instance = construct_pydantic_model(cls)
            defaults: dict[str, Any] = {}
        else:
            try:
                instance = cls.__new__(cls)
            except TypeError:
                logger.debug("Cannot allocate %r without arguments", cls)
                return None
            defaults = self._defaults(cls)

        for field_info in self.fields(cls):
            if field_info.name in defaults:
                value = defaults[field_info.name]
            elif _has_value(instance, field_info.name):
                continue
            else:
                value = zero_value(field_info.declared_type)
            object.__setattr__(instance, field_info.name, value)
        return instance

    def _defaults(self, cls: type[Any]) -> dict[str, Any]:
        if dataclasses.is_dataclass(cls):
            defaults: dict[str, Any] = {}
            for field in dataclasses.fields(cls):
                if field.default is not dataclasses.MISSING:
                    defaults[field.name] = field.default
                elif field.default_factory is not dataclasses.MISSING:
                    defaults[field.name] = field.default_factory()
            return defaults
        if is_attrs_class(cls):
            return attrs_field_defaults(cls)
        return {}

    def _type_hints(self, cls: type[Any]) -> dict[str, Any]:
        try:
            return get_type_hints(cls, include_extras=True)
        except (AttributeError, NameError, TypeError):
            logger.debug("Falling back to raw annotations for %r", cls)

        hints: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            for name, annotation in vars(klass).get("__annotations__", {}).items():
                if not isinstance(annotation, str):
                    hints[name] = annotation
        return hints


def zero_value(annotation: Any) -> Any:
    """Return the zero value of a builtin type, or ``None`` for anything else."""
    annotation = strip_annotated(annotation)
    if annotation in ZERO_VALUE_TYPES:
        return annotation()
    origin = get_origin(annotation)
    if origin in ZERO_VALUE_TYPES:
        return origin()
    supertype = getattr(annotation, "__supertype__", None)
    if supertype is not None:
        return zero_value(supertype)
    return None


def _is_class_var(hint: Any) -> bool:
    hint = strip_annotated(hint)
    return hint is ClassVar or get_origin(hint) is ClassVar


def _has_value(instance: Any, name: str) -> bool:
    try:
        getattr(instance, name)
    except AttributeError:
        return False
    return True


__all__ = ["FieldInfo", "StructMetadataReader", "zero_value"]
