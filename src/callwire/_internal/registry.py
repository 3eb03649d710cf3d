from __future__ import annotations

import threading
from contextlib import AbstractContextManager, nullcontext
from typing import Any

from callwire._internal.arguments import ABSENT
from callwire._internal.invokable import Invokable
from callwire.lock_mode import LockMode


class Registry:
    """Store bindings, singleton factories, instances and aliases.

    Every read and write goes through one re-entrant lock, so callers never
    need external locking and a write is visible to every later read on any
    thread. Two writers racing on the same key resolve as last write wins.

    Keys are canonical type keys or arbitrary names. ``resolve_key`` maps an
    alias to its canonical key with a single hop and falls back to the name
    itself.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._bindings: dict[str, Invokable] = {}
        self._singletons: dict[str, Invokable] = {}
        self._instances: dict[str, Any] = {}
        self._aliases: dict[str, str] = {}
        self._singleton_locks: dict[str, threading.RLock] = {}

    def set_binding(self, key: str, factory: Invokable) -> None:
        with self._lock:
            self._bindings[key] = factory

    def set_singleton(self, key: str, factory: Invokable) -> None:
        with self._lock:
            self._singletons[key] = factory

    def set_instance(self, key: str, value: Any) -> None:
        with self._lock:
            self._instances[key] = value

    def set_alias(self, alias: str, key: str) -> None:
        with self._lock:
            self._aliases[alias] = key

    def resolve_key(self, name: str) -> str:
        with self._lock:
            return self._aliases.get(name, name)

    def find_instance(self, key: str) -> Any:
        """Return the instance stored under ``key``, or ``ABSENT``."""
        with self._lock:
            return self._instances.get(key, ABSENT)

    def find_singleton(self, key: str) -> Invokable | None:
        with self._lock:
            return self._singletons.get(key)

    def find_binding(self, key: str) -> Invokable | None:
        with self._lock:
            return self._bindings.get(key)

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._bindings or key in self._singletons or key in self._instances

    def singleton_lock(self, key: str, lock_mode: LockMode) -> AbstractContextManager[Any]:
        """Return the lock serializing the first materialization of a singleton.

        The lock is re-entrant: a factory that resolves its own key again is
        stopped by the depth guard rather than a deadlock. Two threads first
        materializing singletons that depend on each other do deadlock.
        """
        if lock_mode is LockMode.NONE:
            return nullcontext()
        with self._lock:
            lock = self._singleton_locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._singleton_locks[key] = lock
            return lock

    def flush(self) -> None:
        """Discard every binding, singleton, instance and alias."""
        with self._lock:
            self._bindings = {}
            self._singletons = {}
            self._instances = {}
            self._aliases = {}
            self._singleton_locks = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._bindings.keys() | self._singletons.keys() | self._instances.keys())


__all__ = ["Registry"]
