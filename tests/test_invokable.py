from dataclasses import dataclass
from typing import Any

import pytest

from callwire import Injected, Invokable
from callwire.exceptions import CallwireNotCallableError


@dataclass
class Param:
    id: str = ""


class Service:
    def __init__(self, param: Param, *, label: str = "service") -> None:
        self.param = param
        self.label = label


class Handler:
    def __call__(self, param: Param) -> str:
        return param.id


class Repository:
    def find(self, key: str) -> Param:
        return Param(key)


def pair(first: Param, second: Injected[Param]) -> tuple[str, str]:
    return first.id, second.id


def variadic(param: Param, *args: Any, **kwargs: Any) -> int:
    return len(args) + len(kwargs)


def test_parameter_types_follow_declaration_order() -> None:
    invokable = Invokable(pair)

    assert invokable.parameter_types()[0] is Param
    assert [parameter.name for parameter in invokable.parameters] == ["first", "second"]
    assert invokable.return_types() == (str, str)
    assert invokable.return_count() == 2


def test_invoke_packages_tuple_results() -> None:
    invokable = Invokable(pair)

    assert invokable.invoke([Param("a"), Param("b")]) == ("a", "b")


def test_none_return_produces_no_values() -> None:
    def noop(param: Param) -> None:
        pass

    invokable = Invokable(noop)

    assert invokable.return_types() == ()
    assert invokable.invoke([Param()]) == ()


def test_missing_return_annotation_produces_one_value() -> None:
    def untyped(param: Param):  # noqa: ANN202
        return (param.id, param.id)

    invokable = Invokable(untyped)

    assert not invokable.has_return_annotation
    assert invokable.return_types() == (Any,)
    assert invokable.invoke([Param("x")]) == (("x", "x"),)


def test_variable_length_tuple_is_one_value() -> None:
    def many() -> tuple[int, ...]:
        return (1, 2, 3)

    assert Invokable(many).invoke([]) == ((1, 2, 3),)


def test_unannotated_parameter_is_any() -> None:
    invokable = Invokable(lambda value: value)

    assert invokable.parameter_types() == (Any,)


def test_class_returns_itself_and_skips_self() -> None:
    invokable = Invokable(Service)

    assert invokable.return_types() == (Service,)
    assert invokable.parameter_types() == (Param, str)
    assert invokable.parameters[1].default == "service"
    assert not invokable.parameters[1].is_positional

    (service,) = invokable.invoke([Param("p"), "custom"])

    assert service.param == Param("p")
    assert service.label == "custom"


def test_callable_object_uses_call_signature() -> None:
    invokable = Invokable(Handler())

    assert invokable.parameter_types() == (Param,)
    assert invokable.return_types() == (str,)
    assert invokable.invoke([Param("h")]) == ("h",)


def test_bound_method() -> None:
    invokable = Invokable(Repository().find)

    assert invokable.parameter_types() == (str,)
    assert invokable.invoke(["k"]) == (Param("k"),)


def test_variadic_parameters_are_skipped() -> None:
    invokable = Invokable(variadic)

    assert [parameter.name for parameter in invokable.parameters] == ["param"]
    assert invokable.invoke([Param()]) == (0,)


def test_wrong_argument_count_is_rejected() -> None:
    with pytest.raises(TypeError, match="expects 2 arguments"):
        Invokable(pair).invoke([Param()])


def test_non_callable_is_rejected() -> None:
    with pytest.raises(CallwireNotCallableError) as exc_info:
        Invokable("not callable")  # type: ignore[arg-type]

    assert exc_info.value.value == "not callable"
