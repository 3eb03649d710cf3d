from __future__ import annotations

import importlib
from types import ModuleType
from typing import Any


def _load_attrs() -> ModuleType | None:
    try:
        return importlib.import_module("attrs")
    except ImportError:
        return None


ATTRS: ModuleType | None = _load_attrs()


def is_attrs_class(candidate: type[Any]) -> bool:
    """Return whether a class was built by ``attrs``.

    Returns ``False`` for every candidate when ``attrs`` is not installed.
    """
    return ATTRS is not None and ATTRS.has(candidate)


def attrs_field_defaults(cls: type[Any]) -> dict[str, Any]:
    """Return a mapping of attribute name to default value for an attrs class.

    ``attrs.Factory`` defaults are called; factories that take ``self`` are
    skipped because no instance exists yet. Attributes without a default are
    omitted. Returns an empty mapping when ``attrs`` is not installed.

    Args:
        cls: Class for which ``is_attrs_class`` returned ``True``.

    """
    if ATTRS is None:
        return {}
    defaults: dict[str, Any] = {}
    for attribute in ATTRS.fields(cls):
        default = attribute.default
        if default is ATTRS.NOTHING:
            continue
        if isinstance(default, ATTRS.Factory):
            if default.takes_self:
                continue
            defaults[attribute.name] = default.factory()
        else:
            defaults[attribute.name] = default
    return defaults


__all__ = ["ATTRS", "attrs_field_defaults", "is_attrs_class"]
