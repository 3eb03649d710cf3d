"""Lock modes: control how singletons are materialized under threads.

``LockMode.THREAD`` runs each singleton factory at most once. ``LockMode.NONE``
skips the lock for single-threaded programs.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from callwire import Container, LockMode


class Client:
    created = 0

    def __init__(self) -> None:
        Client.created += 1


def main() -> None:
    container = Container(lock_mode=LockMode.THREAD)
    container.singleton(Client, Client)

    with ThreadPoolExecutor(max_workers=8) as executor:
        clients = list(executor.map(lambda _: container.get(Client), range(16)))

    print(f"created={Client.created}")  # => created=1
    print(f"same={all(client is clients[0] for client in clients)}")  # => same=True

    single_threaded = Container(lock_mode=LockMode.NONE)
    print(repr(single_threaded))  # => Container(registrations=0, lock_mode=NONE)


if __name__ == "__main__":
    main()
