import pytest

from callwire import (
    CallwireError,
    CallwireFieldTypeMismatchError,
    CallwireInjectionTargetError,
    CallwireInvalidRegistrationError,
    CallwireNotCallableError,
    CallwireResolutionDepthError,
)


@pytest.mark.parametrize(
    "error_type",
    [
        CallwireInvalidRegistrationError,
        CallwireNotCallableError,
        CallwireInjectionTargetError,
        CallwireFieldTypeMismatchError,
        CallwireResolutionDepthError,
    ],
)
def test_all_errors_share_base_class(error_type: type[Exception]) -> None:
    assert issubclass(error_type, CallwireError)


def test_not_callable_is_a_registration_error() -> None:
    error = CallwireNotCallableError(42)

    assert isinstance(error, CallwireInvalidRegistrationError)
    assert error.value == 42
    assert str(error) == "Expected a callable, got 42."


def test_injection_target_error_message() -> None:
    error = CallwireInjectionTargetError(42, "builtin values have no injectable fields")

    assert error.target == 42
    assert str(error) == "Cannot inject fields into 42: builtin values have no injectable fields."


def test_field_type_mismatch_error_message() -> None:
    error = CallwireFieldTypeMismatchError("config", str, int)

    assert (error.field_name, error.declared_type, error.resolved_type) == ("config", str, int)
    assert str(error) == (
        "Cannot inject field 'config': declared type is str, "
        "but the resolved value has type int."
    )


def test_resolution_depth_error_message() -> None:
    error = CallwireResolutionDepthError(["a.Node", "a.Node"], 1)

    assert error.chain == ["a.Node", "a.Node"]
    assert str(error) == "Resolution depth exceeded 1: a.Node -> a.Node"
