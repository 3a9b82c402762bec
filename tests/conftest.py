"""Pytest configuration and fixtures for advisory lock tests"""

from __future__ import annotations

import pytest

from advisory_locks.core.config import LockConfig
from advisory_locks.core.exceptions import LockHeldError
from advisory_locks.core.perf import ServiceProfiler
from advisory_locks.locks import registry as registry_module
from advisory_locks.locks.base import Lock
from advisory_locks.locks.registry import LockRegistry


class MemoryLock(Lock):
    """In-memory lock for exercising the base state machine.

    ``held_elsewhere`` simulates contention; ``fail_lock``/``fail_unlock``
    inject errors into do_lock()/do_unlock().
    """

    def __init__(self, name: str, **kwargs):
        super().__init__(name, **kwargs)
        self.held_elsewhere = False
        self.fail_lock: Exception | None = None
        self.fail_unlock: Exception | None = None
        self.resource_held = False
        self.calls: list[str] = []

    def do_lock(self) -> None:
        self.calls.append("do_lock")
        if self.fail_lock is not None:
            raise self.fail_lock
        if self.held_elsewhere:
            raise LockHeldError(self.name)
        self.resource_held = True

    def do_unlock(self) -> None:
        self.calls.append("do_unlock")
        self.resource_held = False
        if self.fail_unlock is not None:
            raise self.fail_unlock


@pytest.fixture
def exit_hooks():
    """Collects hooks a registry would hand to atexit.register"""
    return []


@pytest.fixture
def profiler():
    return ServiceProfiler()


@pytest.fixture
def registry(exit_hooks, profiler):
    """Isolated registry whose exit sweep is captured instead of installed"""
    return LockRegistry(LockConfig(), profiler=profiler, at_exit=exit_hooks.append)


@pytest.fixture
def make_registry(exit_hooks):
    """Factory for additional isolated registries (one per simulated process)"""

    def _make(config: LockConfig | None = None) -> LockRegistry:
        return LockRegistry(config or LockConfig(), profiler=ServiceProfiler(), at_exit=exit_hooks.append)

    return _make


@pytest.fixture(autouse=True)
def isolated_default_registry(exit_hooks):
    """Give every test a fresh process-wide registry that never touches atexit"""
    previous = registry_module.reset_default_registry(LockRegistry(LockConfig(), at_exit=exit_hooks.append))
    yield
    registry_module.reset_default_registry(previous)


@pytest.fixture
def memory_lock(profiler):
    return MemoryLock("memory:test", profiler=profiler)


@pytest.fixture
def make_memory_lock(profiler):
    """Factory for MemoryLock instances sharing the test profiler"""

    def _make(name: str) -> MemoryLock:
        return MemoryLock(name, profiler=profiler)

    return _make
