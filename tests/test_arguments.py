from dataclasses import dataclass

from callwire import type_key
from callwire._internal.arguments import ABSENT, ArgumentsTypeMap


@dataclass
class Param:
    id: str = ""


class Base:
    pass


class Child(Base):
    pass


def test_pull_returns_values_of_one_type_in_supply_order() -> None:
    arguments = ArgumentsTypeMap([Param("1"), "text", Param("2")])

    assert arguments.pull(type_key(Param)) == Param("1")
    assert arguments.pull(type_key(Param)) == Param("2")
    assert arguments.pull(type_key(Param)) is ABSENT


def test_pull_consumes_value() -> None:
    arguments = ArgumentsTypeMap([Param("1")])

    arguments.pull(type_key(Param))

    assert arguments.pull(type_key(Param)) is ABSENT


def test_pull_of_unknown_key_is_absent() -> None:
    arguments = ArgumentsTypeMap()

    assert arguments.pull("missing") is ABSENT


def test_none_is_a_legitimate_supplied_value() -> None:
    arguments = ArgumentsTypeMap([None])

    assert arguments.pull("None") is None
    assert arguments.pull("None") is ABSENT


def test_find_convertible_does_not_consume() -> None:
    child = Child()
    arguments = ArgumentsTypeMap([child])

    assert arguments.find_convertible_arg(type_key(Base), Base) is child
    assert arguments.find_convertible_arg(type_key(Base), Base) is child
    assert arguments.pull(type_key(Child)) is child


def test_find_convertible_scans_in_supply_order() -> None:
    first = Child()
    arguments = ArgumentsTypeMap(["text", first, Child()])

    assert arguments.find_convertible_arg(type_key(Base), Base) is first


def test_find_convertible_widens_numbers() -> None:
    arguments = ArgumentsTypeMap([7])

    value = arguments.find_convertible_arg(type_key(float), float)

    assert value == 7.0
    assert isinstance(value, float)


def test_find_convertible_returns_absent_without_match() -> None:
    arguments = ArgumentsTypeMap(["text", 1])

    assert arguments.find_convertible_arg(type_key(Param), Param) is ABSENT


def test_absent_is_falsy_singleton() -> None:
    assert not ABSENT
    assert type(ABSENT)() is ABSENT
    assert repr(ABSENT) == "ABSENT"


def test_repr_lists_bucket_sizes() -> None:
    arguments = ArgumentsTypeMap([1, 2, "x"])

    assert repr(arguments) == "ArgumentsTypeMap(int=2, str=1)"


def test_implicit_value_is_never_consumed() -> None:
    owner = Base()
    arguments = ArgumentsTypeMap([Param("1")], implicit=owner)

    assert arguments.pull(type_key(Base)) is owner
    assert arguments.pull(type_key(Base)) is owner


def test_supplied_value_of_implicit_type_is_pulled_first() -> None:
    owner = Base()
    supplied = Base()
    arguments = ArgumentsTypeMap([supplied], implicit=owner)

    assert arguments.pull(type_key(Base)) is supplied
    assert arguments.pull(type_key(Base)) is owner


def test_implicit_value_comes_after_supplied_values_in_convertible_scan() -> None:
    owner = Child()
    supplied = Child()
    arguments = ArgumentsTypeMap([supplied], implicit=owner)

    assert arguments.find_convertible_arg(type_key(Base), Base) is supplied
    assert ArgumentsTypeMap(implicit=owner).find_convertible_arg(type_key(Base), Base) is owner
    assert ArgumentsTypeMap(implicit=owner).find_convertible_arg(type_key(Param), Param) is ABSENT
