from __future__ import annotations

from typing import Any


class CallwireError(Exception):
    """Represent a base class for all callwire-specific failures.

    Catch this type when you want to handle any callwire error path without
    matching each concrete exception class individually.
    """


class CallwireInvalidRegistrationError(CallwireError):
    """Signal an invalid factory registration.

    Raised by ``Container.bind`` and ``Container.singleton`` when the factory
    does not produce exactly one value: it is annotated ``-> None`` or
    ``-> tuple[A, B]``.

    Typical fixes include returning a single value and registering each
    element of a tuple result under its own key.
    """


class CallwireNotCallableError(CallwireInvalidRegistrationError):
    """Signal that a value passed where a callable is expected is not callable.

    Raised by ``Invokable`` construction, and therefore by ``Container.call``,
    ``Container.bind`` and ``Container.singleton``.
    """

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Expected a callable, got {value!r}.")


class CallwireInjectionTargetError(CallwireError):
    """Signal that ``inject_fields`` was given something it cannot populate.

    Field injection needs an instance of a mutable aggregate: a dataclass, an
    attrs class, a pydantic model or a plain class with annotated attributes.
    Classes themselves, builtin values, tuples and frozen models are rejected.
    """

    def __init__(self, target: Any, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"Cannot inject fields into {target!r}: {reason}.")


class CallwireFieldTypeMismatchError(CallwireError):
    """Signal that a resolved value cannot be assigned to a directive field.

    Carries the field name, the declared field type and the runtime type of the
    value that was resolved for it. Fields assigned before the failing one keep
    their new values.

    Typical fixes include registering a provider whose return type matches the
    field annotation, or pointing ``Inject("key")`` at a compatible registration.
    """

    def __init__(self, field_name: str, declared_type: Any, resolved_type: type[Any]) -> None:
        self.field_name = field_name
        self.declared_type = declared_type
        self.resolved_type = resolved_type
        declared_name = getattr(declared_type, "__qualname__", repr(declared_type))
        super().__init__(
            f"Cannot inject field '{field_name}': declared type is {declared_name}, "
            f"but the resolved value has type {resolved_type.__qualname__}.",
        )


class CallwireResolutionDepthError(CallwireError):
    """Signal that nested resolution went deeper than the container allows.

    Usually caused by a self-referential object graph, for example a class
    whose ``Injected`` field has the class itself as type. ``chain`` holds the
    type keys being resolved, outermost first.

    Typical fixes include breaking the cycle with a registered instance or
    raising ``max_depth`` for legitimately deep graphs.
    """

    def __init__(self, chain: list[str], max_depth: int) -> None:
        self.chain = chain
        self.max_depth = max_depth
        path = " -> ".join(chain)
        super().__init__(f"Resolution depth exceeded {max_depth}: {path}")
