from callwire._internal.invokable import Invokable
from callwire._internal.type_keys import type_key
from callwire.container import Container
from callwire.exceptions import (
    CallwireError,
    CallwireFieldTypeMismatchError,
    CallwireInjectionTargetError,
    CallwireInvalidRegistrationError,
    CallwireNotCallableError,
    CallwireResolutionDepthError,
)
from callwire.lock_mode import LockMode
from callwire.markers import Inject, Injected, SelfAssembling

__all__ = [
    "CallwireError",
    "CallwireFieldTypeMismatchError",
    "CallwireInjectionTargetError",
    "CallwireInvalidRegistrationError",
    "CallwireNotCallableError",
    "CallwireResolutionDepthError",
    "Container",
    "Inject",
    "Injected",
    "Invokable",
    "LockMode",
    "SelfAssembling",
    "type_key",
]
