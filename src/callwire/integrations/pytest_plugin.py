"""Resolve ``Injected[...]`` test parameters from a per-test container.

Enable the plugin from a test module or the root ``conftest.py``:

.. code-block:: python

    pytest_plugins = ["callwire.integrations.pytest_plugin"]


    def test_handler(value: int, service: Injected[Service]) -> None: ...

Override the ``callwire_container`` fixture to register test doubles.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable, Iterator
from typing import Any, cast

import pytest

from callwire._internal.invokable import Invokable, InvokableParameter
from callwire.container import Container
from callwire.markers import find_inject_marker

_CALLWIRE_CONTAINER_ATTR = "_callwire_container"
_CALLWIRE_INJECTED_PARAMETERS_ATTR = "__callwire_pytest_injected_parameters__"


@pytest.fixture()
def callwire_container() -> Container:
    """Create a per-test container used by the plugin.

    The fixture is function-scoped, so registrations are isolated between tests
    unless users override fixture scope explicitly.
    """
    return Container()


@pytest.fixture(autouse=True)
def _callwire_state(
    request: pytest.FixtureRequest,
    callwire_container: Container,
) -> None:
    """Store plugin state on the test node for hook access."""
    node = cast("Any", request.node)
    setattr(node, _CALLWIRE_CONTAINER_ATTR, callwire_container)


def injected_parameters(func: Callable[..., Any]) -> tuple[InvokableParameter, ...]:
    """Return the parameters of ``func`` marked with ``Inject``."""
    return tuple(
        parameter
        for parameter in Invokable(func).parameters
        if find_inject_marker(parameter.annotation) is not None
    )


def pytest_pycollect_makeitem(
    collector: Any,
    name: str,
    obj: object,
) -> Any | None:
    """Hide ``Injected[...]`` parameters from pytest fixture name matching.

    Returns:
        ``None`` to continue default collection flow.

    """
    if not callable(obj):
        return None
    if not collector.istestfunction(obj, name):
        return None

    parameters = injected_parameters(cast("Callable[..., Any]", obj))
    if not parameters:
        return None

    hidden = {parameter.name for parameter in parameters}
    signature = inspect.signature(cast("Callable[..., Any]", obj))
    obj_as_any = cast("Any", obj)
    obj_as_any.__dict__[_CALLWIRE_INJECTED_PARAMETERS_ATTR] = parameters
    obj_as_any.__signature__ = signature.replace(
        parameters=[p for p in signature.parameters.values() if p.name not in hidden],
    )
    return None


@pytest.hookimpl(hookwrapper=True, tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> Iterator[None]:
    """Swap the test function for one that resolves its injected parameters.

    If no container state is attached to the node, this hook is a no-op.
    """
    original_callable = cast("Callable[..., Any]", pyfuncitem.obj)
    parameters = cast(
        "tuple[InvokableParameter, ...] | None",
        getattr(original_callable, _CALLWIRE_INJECTED_PARAMETERS_ATTR, None),
    )
    if parameters is None:
        parameters = injected_parameters(original_callable)
    if not parameters:
        yield
        return

    container = cast("Container | None", getattr(pyfuncitem, _CALLWIRE_CONTAINER_ATTR, None))
    if container is None:
        yield
        return

    pyfuncitem.obj = _resolving_injected(original_callable, container, parameters)
    try:
        yield
    finally:
        pyfuncitem.obj = original_callable


def _resolving_injected(
    func: Callable[..., Any],
    container: Container,
    parameters: tuple[InvokableParameter, ...],
) -> Callable[..., Any]:
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        for parameter in parameters:
            if parameter.name not in kwargs:
                kwargs[parameter.name] = container.resolve(parameter.annotation)
        return func(*args, **kwargs)

    return wrapper


__all__ = [
    "callwire_container",
    "injected_parameters",
    "pytest_pycollect_makeitem",
    "pytest_pyfunc_call",
]
