from __future__ import annotations

import importlib
from typing import Annotated, Any


def _load_base_model() -> type[Any] | None:
    try:
        module = importlib.import_module("pydantic")
    except ImportError:
        return None
    base_model = getattr(module, "BaseModel", None)
    if isinstance(base_model, type):
        return base_model
    return None


BASE_MODEL: type[Any] | None = _load_base_model()


def is_pydantic_model(candidate: type[Any]) -> bool:
    """Return whether a class is a pydantic v2 ``BaseModel`` subclass.

    Returns ``False`` for every candidate when pydantic is not installed.
    """
    if BASE_MODEL is None:
        return False
    try:
        return issubclass(candidate, BASE_MODEL)
    except TypeError:
        return False


def is_frozen_pydantic_model(candidate: type[Any]) -> bool:
    return is_pydantic_model(candidate) and bool(candidate.model_config.get("frozen", False))


def pydantic_field_annotations(cls: type[Any]) -> dict[str, Any]:
    """Return declared model fields in declaration order, mapped to their annotations.

    Metadata pydantic does not understand itself (such as ``Inject``) is kept
    and re-attached through ``Annotated``.
    """
    annotations: dict[str, Any] = {}
    for name, field_info in cls.model_fields.items():
        if field_info.metadata:
            annotations[name] = Annotated[(field_info.annotation, *field_info.metadata)]
        else:
            annotations[name] = field_info.annotation
    return annotations


def construct_pydantic_model(cls: type[Any]) -> Any:
    """Build a model without validation, populated with field defaults only."""
    return cls.model_construct()


__all__ = [
    "BASE_MODEL",
    "construct_pydantic_model",
    "is_frozen_pydantic_model",
    "is_pydantic_model",
    "pydantic_field_annotations",
]
