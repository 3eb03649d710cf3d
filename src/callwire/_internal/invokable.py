from __future__ import annotations

import inspect
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from inspect import Parameter
from typing import Any, get_args, get_origin, get_type_hints

from callwire.exceptions import CallwireNotCallableError

_MISSING_ANNOTATION = object()
_VARIADIC_KINDS = (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)
_POSITIONAL_KINDS = (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True, slots=True)
class InvokableParameter:
    """A parameter the container has to supply when invoking a callable."""

    name: str
    annotation: Any
    """Declared type, including ``Annotated`` metadata. ``Any`` when unannotated."""
    kind: Any
    default: Any = Parameter.empty

    @property
    def is_positional(self) -> bool:
        return self.kind in _POSITIONAL_KINDS


class Invokable:
    """Uniform wrapper over a callable.

    Exposes the ordered parameter types and the return types of the wrapped
    callable, and invokes it from an ordered list of argument values. Functions,
    bound methods, classes and callable objects are supported; ``*args`` and
    ``**kwargs`` parameters are never supplied.

    Return types follow the return annotation: ``-> None`` produces no value,
    ``-> tuple[A, B]`` produces two values, anything else (including a missing
    annotation) produces one.
    """

    __slots__ = ("_func", "_has_return_annotation", "_parameters", "_return_types")

    def __init__(self, func: Callable[..., Any]) -> None:
        if not callable(func):
            raise CallwireNotCallableError(func)

        self._func = func
        annotations = self._resolved_type_hints(func)
        self._parameters = self._extract_parameters(func, annotations)

        return_annotation = self._return_annotation(func, annotations)
        self._has_return_annotation = return_annotation is not _MISSING_ANNOTATION
        self._return_types = self._split_return_types(return_annotation)

    @property
    def func(self) -> Callable[..., Any]:
        return self._func

    @property
    def name(self) -> str:
        return getattr(self._func, "__qualname__", repr(self._func))

    @property
    def parameters(self) -> tuple[InvokableParameter, ...]:
        return self._parameters

    @property
    def has_return_annotation(self) -> bool:
        return self._has_return_annotation

    def parameter_types(self) -> tuple[Any, ...]:
        """Return the declared parameter types in call order."""
        return tuple(parameter.annotation for parameter in self._parameters)

    def return_types(self) -> tuple[Any, ...]:
        """Return the declared result types in order."""
        return self._return_types

    def return_count(self) -> int:
        return len(self._return_types)

    def invoke(self, arguments: Sequence[Any]) -> tuple[Any, ...]:
        """Call the wrapped callable and return its results as a tuple.

        Args:
            arguments: One value per entry of ``parameters``, in the same order.
                Keyword-only parameters are passed by name.

        """
        if len(arguments) != len(self._parameters):
            msg = (
                f"'{self.name}' expects {len(self._parameters)} arguments, "
                f"got {len(arguments)}."
            )
            raise TypeError(msg)

        positional: list[Any] = []
        keywords: dict[str, Any] = {}
        for parameter, value in zip(self._parameters, arguments):
            if parameter.is_positional:
                positional.append(value)
            else:
                keywords[parameter.name] = value

        result = self._func(*positional, **keywords)

        count = self.return_count()
        if count == 0:
            return ()
        if count == 1:
            return (result,)
        return tuple(result)

    def __repr__(self) -> str:
        return f"Invokable({self._func!r})"

    def _extract_parameters(
        self,
        func: Callable[..., Any],
        annotations: dict[str, Any],
    ) -> tuple[InvokableParameter, ...]:
        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError):
            return ()

        parameters: list[InvokableParameter] = []
        for parameter in signature.parameters.values():
            if parameter.kind in _VARIADIC_KINDS:
                continue
            annotation = annotations.get(parameter.name, _MISSING_ANNOTATION)
            if annotation is _MISSING_ANNOTATION:
                raw_annotation = parameter.annotation
                if raw_annotation is Parameter.empty or isinstance(raw_annotation, str):
                    annotation = Any
                else:
                    annotation = raw_annotation
            parameters.append(
                InvokableParameter(
                    name=parameter.name,
                    annotation=annotation,
                    kind=parameter.kind,
                    default=parameter.default,
                ),
            )
        return tuple(parameters)

    def _resolved_type_hints(self, func: Callable[..., Any]) -> dict[str, Any]:
        annotations: dict[str, Any] = {}
        targets: list[Any] = [func]
        if inspect.isclass(func):
            targets = [func.__init__]
        elif not (inspect.isfunction(func) or inspect.ismethod(func)):
            targets.append(getattr(type(func), "__call__", None))  # noqa: B004

        for target in targets:
            if target is None:
                continue
            try:
                hints = get_type_hints(target, include_extras=True)
            except (AttributeError, NameError, TypeError):
                continue
            for name, hint in hints.items():
                annotations.setdefault(name, hint)
        return annotations

    def _return_annotation(self, func: Callable[..., Any], annotations: dict[str, Any]) -> Any:
        if inspect.isclass(func):
            return func

        annotation = annotations.get("return", _MISSING_ANNOTATION)
        if annotation is not _MISSING_ANNOTATION:
            return annotation

        try:
            raw_annotation = inspect.signature(func).return_annotation
        except (TypeError, ValueError):
            return _MISSING_ANNOTATION
        if raw_annotation is inspect.Signature.empty or isinstance(raw_annotation, str):
            return _MISSING_ANNOTATION
        return raw_annotation

    def _split_return_types(self, annotation: Any) -> tuple[Any, ...]:
        if annotation is _MISSING_ANNOTATION:
            return (Any,)
        if annotation is None or annotation is type(None):
            return ()
        if get_origin(annotation) is tuple:
            args = get_args(annotation)
            if args and Ellipsis not in args:
                return args
        return (annotation,)


__all__ = ["Invokable", "InvokableParameter"]
