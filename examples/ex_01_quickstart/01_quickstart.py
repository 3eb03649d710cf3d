"""Quickstart: call any function with parameters filled from the container.

Register factories by key, call a plain function, and see how supplied
arguments win over registered providers. A supplied argument is consumed by
the first parameter that asks for its exact type, even inside a factory.
"""

from __future__ import annotations

from dataclasses import dataclass

from callwire import Container


@dataclass
class Settings:
    dsn: str = "sqlite://"


class Repository:
    def __init__(self, settings: Settings) -> None:
        self.dsn = settings.dsn


def load_settings() -> Settings:
    return Settings(dsn="postgres://prod")


def describe(repository: Repository, settings: Settings) -> str:
    return f"{repository.dsn} ({settings.dsn})"


def main() -> None:
    container = Container()
    container.singleton("settings", load_settings)
    container.bind(Repository, Repository)

    (registered,) = container.call(describe)
    print(registered)  # => postgres://prod (postgres://prod)

    (supplied,) = container.call(describe, Settings(dsn="sqlite://test"))
    print(supplied)  # => sqlite://test (postgres://prod)


if __name__ == "__main__":
    main()
