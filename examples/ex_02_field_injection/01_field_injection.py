"""Field injection: populate marked fields of an existing object.

Only fields marked with ``Injected[...]`` or ``Inject("key")`` are touched.
Unregistered dependencies are auto-constructed with zero values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated

from callwire import Container, Inject, Injected


@dataclass
class Mailer:
    sender: str = "noreply@example.com"


@dataclass
class Handler:
    mailer: Injected[Mailer] = field(default_factory=Mailer)
    api_key: Annotated[str, Inject("api_key")] = ""
    name: str = "signup"


def main() -> None:
    container = Container()
    container.instance("api_key", "secret")

    handler = container.inject_fields(Handler(name="welcome"))

    print(f"sender={handler.mailer.sender}")  # => sender=noreply@example.com
    print(f"api_key={handler.api_key}")  # => api_key=secret
    print(f"name={handler.name}")  # => name=welcome


if __name__ == "__main__":
    main()
