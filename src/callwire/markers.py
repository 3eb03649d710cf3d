from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Annotated, Any, NamedTuple, TypeVar, Union, get_args, get_origin

from typing_extensions import Self

if TYPE_CHECKING:
    from callwire.container import Container

T = TypeVar("T")
_ANNOTATED_MARKER_MIN_ARGS = 2


class Inject(NamedTuple):
    """Mark a field for injection.

    Attach ``Inject`` metadata to ``typing.Annotated``. Without a key the field
    is resolved by its declared type; with a key the container first looks the
    key up in its registry and falls back to the declared type.

    Examples:
        .. code-block:: python

            @dataclass
            class Handler:
                repository: Annotated[Repository, Inject()]
                dsn: Annotated[str, Inject("config.dsn")]
                name: str = "handler"  # never touched

    """

    key: str | None = None


def _build_annotated(params: tuple[object, ...]) -> Any:
    """Return Annotated[...] with a pre-built params tuple (Py 3.10+ compatible)."""
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]


if TYPE_CHECKING:
    Injected = Union[T, T]  # noqa: UP007,PYI016
else:

    class Injected:
        """Shorthand for ``Annotated[T, Inject()]``.

        Usage:
            @dataclass
            class Controller:
                service: Injected[Service]

        At runtime, Injected[T] resolves to Annotated[T, Inject()].
        """

        def __new__(cls, *_args: object, **_kwargs: object) -> Self:
            """Prevent instantiation; use Injected[T] instead."""
            msg = "Injected is a type marker; use Injected[T] in annotations."
            raise TypeError(msg)

        def __class_getitem__(cls, item: T) -> Annotated[T, Inject]:
            if get_origin(item) is Annotated:
                args = get_args(item)
                return _build_annotated((args[0], *args[1:], Inject()))
            return _build_annotated((item, Inject()))


class SelfAssembling(ABC):
    """Opt out of field-by-field injection.

    When ``Container.inject_fields`` (or auto-construction) meets an instance of
    a ``SelfAssembling`` subclass, it calls ``construct`` with the container and
    skips the generic field walk entirely.
    """

    @abstractmethod
    def construct(self, container: Container) -> None:
        """Populate this object using the given container."""


def find_inject_marker(annotation: Any) -> Inject | None:
    """Return the ``Inject`` marker attached to an ``Annotated`` hint, if any.

    The last marker wins when several are stacked.
    """
    if get_origin(annotation) is not Annotated:
        return None
    args = get_args(annotation)
    if len(args) < _ANNOTATED_MARKER_MIN_ARGS:
        return None  # pragma: no cover - Annotated requires at least 2 args
    marker: Inject | None = None
    for metadata in args[1:]:
        if isinstance(metadata, Inject):
            marker = metadata
    return marker


def strip_annotated(annotation: Any) -> Any:
    """Return the bare type behind an ``Annotated`` hint."""
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


__all__ = [
    "Inject",
    "Injected",
    "SelfAssembling",
    "find_inject_marker",
    "strip_annotated",
]
