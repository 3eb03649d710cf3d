from __future__ import annotations

import logging
import types
from collections.abc import Callable
from inspect import Parameter
from typing import Any, TypeVar, Union, get_args, get_origin

from callwire._internal.arguments import ABSENT, ArgumentsTypeMap
from callwire._internal.conversion import convert, is_convertible
from callwire._internal.fields import FieldInfo, StructMetadataReader
from callwire._internal.invokable import Invokable
from callwire._internal.registry import Registry
from callwire._internal.resolution_stack import resolving
from callwire._internal.type_keys import type_key
from callwire.defaults import DEFAULT_LOCK_MODE, DEFAULT_MAX_RESOLUTION_DEPTH, ZERO_VALUE_TYPES
from callwire.exceptions import (
    CallwireFieldTypeMismatchError,
    CallwireInjectionTargetError,
    CallwireInvalidRegistrationError,
)
from callwire.lock_mode import LockMode
from callwire.markers import SelfAssembling, strip_annotated

T = TypeVar("T")

logger = logging.getLogger(__name__)

ArgumentProvider = Callable[[str, Any, ArgumentsTypeMap], Any]
"""One step of the argument resolution pipeline: ``(type key, declared type, arguments)``."""

_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)


class Container:
    """Resolve callables and struct fields from registered providers.

    A container holds three stores (instances, singleton factories and
    transient bindings) plus an alias table. Keys are strings or types; types
    are turned into their type key, so ``container.get(Service)`` and
    ``container.get(type_key(Service))`` are the same lookup.

    ``call`` invokes any callable and fills each parameter by trying, in order:

    1. a caller-supplied argument of exactly the parameter type (consumed),
    2. a caller-supplied argument assignable to the parameter type,
    3. the registry, keyed by the parameter type,
    4. the parameter default, when one is declared,
    5. auto-construction of a zero-valued instance whose ``Inject`` fields are
       injected recursively.

    ``inject_fields`` runs the same pipeline for every field marked with
    ``Inject``. The container itself is always available as an implicit last
    argument, so a parameter typed ``Container`` receives the container.

    The container is safe to share between threads. Singleton materialization
    runs at most once per key unless ``lock_mode=LockMode.NONE``.
    """

    def __init__(
        self,
        *,
        lock_mode: LockMode = DEFAULT_LOCK_MODE,
        max_depth: int = DEFAULT_MAX_RESOLUTION_DEPTH,
    ) -> None:
        """Initialize an empty container.

        Args:
            lock_mode: ``LockMode.THREAD`` serializes the first materialization of
                each singleton. ``LockMode.NONE`` skips that lock.
            max_depth: Maximum number of nested resolutions a single call may
                open. Guards against self-referential object graphs.

        Examples:
            .. code-block:: python

                def make_repository(settings: Settings) -> Repository:
                    return Repository(settings.dsn)


                container = Container()
                container.singleton("settings", load_settings)
                container.bind(Repository, make_repository)

                (report,) = container.call(build_report, date.today())

        """
        if max_depth < 1:
            msg = f"max_depth must be a positive integer, got {max_depth!r}."
            raise ValueError(msg)

        self._lock_mode = lock_mode
        self._max_depth = max_depth
        self._registry = Registry()
        self._metadata_reader = StructMetadataReader()
        self._argument_providers: tuple[ArgumentProvider, ...] = (
            self._pull_supplied_argument,
            self._find_convertible_argument,
            self._lookup_registered_argument,
        )

    @property
    def lock_mode(self) -> LockMode:
        return self._lock_mode

    @property
    def max_depth(self) -> int:
        return self._max_depth

    # region Registration Methods
    def bind(self, key: Any, factory: Callable[..., Any] | Invokable) -> None:
        """Register a transient factory, invoked on every resolution of ``key``.

        The factory's return type key is aliased to ``key``, so resolving a
        parameter of that type reaches this binding without naming ``key``.
        Factories without a return annotation are registered under ``key`` only.

        Args:
            key: Registry key (string or type).
            factory: Callable or ``Invokable`` producing exactly one value.

        Raises:
            CallwireInvalidRegistrationError: If the factory does not declare
                exactly one return value.

        """
        invokable = self._factory_invokable(factory, kind="binding")
        canonical_key = self._canonical_key(key)
        self._registry.set_binding(canonical_key, invokable)
        self._alias_return_type(canonical_key, invokable)
        logger.debug("Bound %s to %s", canonical_key, invokable.name)

    def singleton(self, key: Any, factory: Callable[..., Any] | Invokable) -> None:
        """Register a factory whose first result is cached and reused forever.

        Same contract as ``bind``. Once computed, the cached value lives in the
        instance store and the factory is never consulted again.
        """
        invokable = self._factory_invokable(factory, kind="singleton")
        canonical_key = self._canonical_key(key)
        self._registry.set_singleton(canonical_key, invokable)
        self._alias_return_type(canonical_key, invokable)
        logger.debug("Registered singleton %s from %s", canonical_key, invokable.name)

    def instance(self, key: Any, value: Any) -> None:
        """Store ``value`` under ``key``; it is returned verbatim on every lookup.

        Instances take precedence over singletons and bindings, so this can pin
        a value for a key without touching its factory.
        """
        canonical_key = self._canonical_key(key)
        self._registry.set_instance(canonical_key, value)
        logger.debug("Stored instance for %s", canonical_key)

    def alias(self, key: Any, alias: Any) -> None:
        """Make ``alias`` resolve to ``key``. Overwrites an existing alias of the same name."""
        self._registry.set_alias(self._key(alias), self._key(key))

    # endregion Registration Methods

    def resolve_key(self, name: Any) -> str:
        """Return the canonical key for ``name``, or ``name`` itself when not aliased."""
        return self._registry.resolve_key(self._key(name))

    def has_bound(self, key: Any) -> bool:
        """Return whether ``key`` (after alias normalization) has an instance, singleton or binding."""
        return self._registry.has(self._canonical_key(key))

    def get(self, key: Any, *args: Any) -> Any:
        """Look ``key`` up in the registry.

        Instances win over singletons, singletons over bindings. Factories are
        called through the resolution pipeline with ``args`` as supplied
        arguments.

        Returns:
            The resolved value, or ``None`` when nothing is registered for ``key``.

        """
        value = self._lookup(self._key(key), self._arguments(args))
        return None if value is ABSENT else value

    def resolve(self, annotation: type[T] | Any, *args: Any) -> T | Any:
        """Run the full resolution pipeline for a single type.

        Unlike ``get``, this never reports "not found": when nothing is supplied
        or registered the type is auto-constructed. ``None`` is returned only for
        types that cannot be allocated, such as protocols or abstract classes.
        """
        value = self._find_argument(annotation, self._arguments(args))
        return None if value is ABSENT else value

    def call(self, fn: Callable[..., Any] | Invokable, *args: Any) -> tuple[Any, ...]:
        """Invoke ``fn`` with every parameter resolved by the container.

        Args:
            fn: Any callable, or a prebuilt ``Invokable`` to skip introspection.
            *args: Values preferred over the registry for parameters of
                matching type. Each value is consumed by at most one exact match.

        Returns:
            The results of ``fn`` as a tuple: empty for ``-> None``, the elements
            for ``-> tuple[A, B]``, a single element otherwise.

        Raises:
            CallwireNotCallableError: If ``fn`` is not callable.

        """
        invokable = fn if isinstance(fn, Invokable) else Invokable(fn)
        return self._call_with(invokable, self._arguments(args))

    def inject_fields(self, target: T, *args: Any) -> T:
        """Populate every ``Inject``-marked field of ``target``.

        Fields without a marker are left untouched. ``SelfAssembling`` targets
        are handed the container and nothing else happens.

        Returns:
            ``target`` itself.

        Raises:
            CallwireInjectionTargetError: If ``target`` is not a mutable
                struct-like instance.
            CallwireFieldTypeMismatchError: If a resolved value cannot be
                assigned to its field. Fields assigned earlier keep their values.

        """
        self._inject(target, self._arguments(args), constructing=False)
        return target

    def flush(self) -> None:
        """Discard all bindings, singletons, instances and aliases."""
        self._registry.flush()
        logger.debug("Flushed container %r", self)

    def __repr__(self) -> str:
        return f"Container(registrations={len(self._registry)}, lock_mode={self._lock_mode.name})"

    # region Resolution pipeline
    def _lookup(self, key: str, arguments: ArgumentsTypeMap) -> Any:
        key = self._registry.resolve_key(key)

        instance = self._registry.find_instance(key)
        if instance is not ABSENT:
            return instance

        singleton_factory = self._registry.find_singleton(key)
        if singleton_factory is not None:
            with self._registry.singleton_lock(key, self._lock_mode):
                instance = self._registry.find_instance(key)
                if instance is not ABSENT:
                    return instance
                value = self._call_with(singleton_factory, arguments)[0]
                self._registry.set_instance(key, value)
                logger.debug("Materialized singleton %s", key)
                return value

        binding_factory = self._registry.find_binding(key)
        if binding_factory is not None:
            return self._call_with(binding_factory, arguments)[0]

        return ABSENT

    def _call_with(self, invokable: Invokable, arguments: ArgumentsTypeMap) -> tuple[Any, ...]:
        values = []
        for parameter in invokable.parameters:
            value = self._find_argument(parameter.annotation, arguments, parameter.default)
            values.append(None if value is ABSENT else value)
        return invokable.invoke(values)

    def _find_argument(
        self,
        annotation: Any,
        arguments: ArgumentsTypeMap,
        default: Any = Parameter.empty,
    ) -> Any:
        key = type_key(annotation)
        declared_type = strip_annotated(annotation)
        with resolving(key, self._max_depth):
            for provider in self._argument_providers:
                value = provider(key, declared_type, arguments)
                if value is not ABSENT:
                    return value
            if default is not Parameter.empty:
                return default
            return self._construct(declared_type, arguments)

    def _pull_supplied_argument(
        self,
        key: str,
        declared_type: Any,
        arguments: ArgumentsTypeMap,
    ) -> Any:
        return arguments.pull(key)

    def _find_convertible_argument(
        self,
        key: str,
        declared_type: Any,
        arguments: ArgumentsTypeMap,
    ) -> Any:
        return arguments.find_convertible_arg(key, declared_type)

    def _lookup_registered_argument(
        self,
        key: str,
        declared_type: Any,
        arguments: ArgumentsTypeMap,
    ) -> Any:
        return self._lookup(key, arguments)

    def _construct(self, declared_type: Any, arguments: ArgumentsTypeMap) -> Any:
        target_type = _unwrap_optional(declared_type)
        instance = self._metadata_reader.allocate(target_type)
        if instance is None:
            return ABSENT
        if type(instance) in ZERO_VALUE_TYPES:
            return instance
        logger.debug("Auto-constructing %s", type_key(target_type))
        self._inject(instance, arguments, constructing=True)
        return instance

    # endregion Resolution pipeline

    # region Field injection
    def _inject(self, target: Any, arguments: ArgumentsTypeMap, *, constructing: bool) -> None:
        if isinstance(target, SelfAssembling):
            target.construct(self)
            return

        if not constructing:
            self._metadata_reader.validate_target(target)

        for field_info in self._metadata_reader.fields(type(target)):
            if not field_info.has_directive:
                continue
            value = self._resolve_field(field_info, arguments)
            if value is ABSENT:
                continue
            self._assign(target, field_info, value, constructing=constructing)

    def _resolve_field(self, field_info: FieldInfo, arguments: ArgumentsTypeMap) -> Any:
        directive = field_info.directive
        if directive is not None and directive.key:
            value = self._lookup(self._key(directive.key), self._arguments(()))
            if value is not ABSENT:
                return value
        return self._find_argument(field_info.annotation, arguments)

    def _assign(
        self,
        target: Any,
        field_info: FieldInfo,
        value: Any,
        *,
        constructing: bool,
    ) -> None:
        declared_type = field_info.declared_type
        if not is_convertible(value, declared_type):
            raise CallwireFieldTypeMismatchError(field_info.name, declared_type, type(value))
        if type_key(type(value)) != type_key(declared_type):
            value = convert(value, declared_type)

        if constructing:
            object.__setattr__(target, field_info.name, value)
            return
        try:
            setattr(target, field_info.name, value)
        except AttributeError as error:
            raise CallwireInjectionTargetError(
                target,
                f"field '{field_info.name}' is read-only",
            ) from error

    # endregion Field injection

    def _arguments(self, args: tuple[Any, ...]) -> ArgumentsTypeMap:
        return ArgumentsTypeMap(args, implicit=self)

    def _key(self, key: Any) -> str:
        return key if isinstance(key, str) else type_key(key)

    def _canonical_key(self, key: Any) -> str:
        return self._registry.resolve_key(self._key(key))

    def _alias_return_type(self, canonical_key: str, invokable: Invokable) -> None:
        return_type = invokable.return_types()[0]
        # unannotated factories declare Any; Any is never aliased
        if return_type is Any:
            return
        return_key = type_key(return_type)
        if return_key != canonical_key:
            self._registry.set_alias(return_key, canonical_key)

    def _factory_invokable(self, factory: Callable[..., Any] | Invokable, *, kind: str) -> Invokable:
        invokable = factory if isinstance(factory, Invokable) else Invokable(factory)
        if invokable.return_count() != 1:
            msg = (
                f"A {kind} factory must return exactly one value, "
                f"but '{invokable.name}' declares {invokable.return_count()}."
            )
            raise CallwireInvalidRegistrationError(msg)
        return invokable


def _unwrap_optional(declared_type: Any) -> Any:
    """Strip one level of ``Optional``: ``T | None`` becomes ``T``."""
    if get_origin(declared_type) not in _UNION_ORIGINS:
        return declared_type
    arms = [arm for arm in get_args(declared_type) if arm is not type(None)]
    if len(arms) == 1:
        return arms[0]
    return declared_type


__all__ = ["Container"]
