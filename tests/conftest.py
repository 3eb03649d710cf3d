"""Shared pytest fixtures for callwire tests."""

import pytest

from callwire import Container, LockMode


@pytest.fixture()
def container() -> Container:
    """Default container with per-key singleton locks."""
    return Container()


@pytest.fixture()
def container_no_lock() -> Container:
    """Container with LockMode.NONE."""
    return Container(lock_mode=LockMode.NONE)


@pytest.fixture()
def shallow_container() -> Container:
    """Container with a small resolution depth limit."""
    return Container(max_depth=8)
