"""Tests for the lock registry and the exit-time unlock sweep."""

from __future__ import annotations

import logging

import pytest

from advisory_locks.core.config import LockConfig
from advisory_locks.core.exceptions import LockMisuseError, LockRegistrationError
from advisory_locks.core.perf import NullProfiler, ServiceProfiler
from advisory_locks.locks import registry as registry_module
from advisory_locks.locks.registry import LockRegistry, create_profiler


def test_get_returns_none_for_unknown_name(registry) -> None:
    assert registry.get("memory:missing") is None
    assert len(registry) == 0


def test_register_and_get(registry, make_memory_lock) -> None:
    lock = make_memory_lock("memory:a")
    registry.register(lock)

    assert registry.get("memory:a") is lock
    assert "memory:a" in registry
    assert registry.names() == ["memory:a"]


def test_duplicate_registration_fails_and_keeps_first(registry, make_memory_lock) -> None:
    first = make_memory_lock("memory:dup")
    second = make_memory_lock("memory:dup")
    registry.register(first)

    with pytest.raises(LockRegistrationError, match="already registered") as exc_info:
        registry.register(second)

    assert isinstance(exc_info.value, LockMisuseError)
    assert exc_info.value.lock_name == "memory:dup"
    assert len(registry) == 1
    assert registry.get("memory:dup") is first


def test_sweep_installed_once_on_first_registration(registry, exit_hooks, make_memory_lock) -> None:
    assert exit_hooks == []
    assert registry.sweep_installed is False

    registry.register(make_memory_lock("memory:a"))
    registry.register(make_memory_lock("memory:b"))
    with pytest.raises(LockRegistrationError):
        registry.register(make_memory_lock("memory:b"))

    assert exit_hooks == [registry.unlock_all]
    assert registry.sweep_installed is True


def test_sweep_not_installed_when_disabled(exit_hooks, make_memory_lock) -> None:
    registry = LockRegistry(LockConfig(sweep_on_exit=False), at_exit=exit_hooks.append)
    registry.register(make_memory_lock("memory:a"))

    assert exit_hooks == []
    assert registry.sweep_installed is False


def test_setdefault_builds_once(registry, make_memory_lock) -> None:
    built = []

    def _factory():
        lock = make_memory_lock("memory:lazy")
        built.append(lock)
        return lock

    first = registry.setdefault("memory:lazy", _factory)
    second = registry.setdefault("memory:lazy", _factory)

    assert first is second
    assert len(built) == 1
    assert len(registry) == 1


def test_iteration_is_snapshot(registry, make_memory_lock) -> None:
    registry.register(make_memory_lock("memory:a"))
    iterator = iter(registry)
    registry.register(make_memory_lock("memory:b"))

    assert [lock.name for lock in iterator] == ["memory:a"]


def test_unlock_all_releases_every_held_lock(registry, make_memory_lock) -> None:
    held = [make_memory_lock(f"memory:{i}") for i in range(3)]
    idle = make_memory_lock("memory:idle")
    for lock in [*held, idle]:
        registry.register(lock)
    for lock in held:
        lock.lock()

    failures = registry.unlock_all()

    assert failures == []
    for lock in held:
        assert lock.is_locked() is False
        assert lock.resource_held is False
    assert idle.calls == []


def test_unlock_all_continues_past_failures(registry, make_memory_lock, caplog) -> None:
    broken = make_memory_lock("memory:broken")
    healthy = make_memory_lock("memory:healthy")
    registry.register(broken)
    registry.register(healthy)
    broken.lock()
    healthy.lock()
    error = RuntimeError("release failed")
    broken.fail_unlock = error

    with caplog.at_level(logging.INFO, logger="advisory_locks.locks.registry"):
        failures = registry.unlock_all()

    assert failures == [("memory:broken", error)]
    assert healthy.is_locked() is False
    assert "Failed to release lock memory:broken during shutdown" in caplog.text
    assert "Released lock memory:healthy during shutdown" in caplog.text


def test_unlock_all_is_noop_when_nothing_held(registry, make_memory_lock) -> None:
    registry.register(make_memory_lock("memory:a"))
    assert registry.unlock_all() == []
    assert registry.unlock_all() == []


def test_captured_exit_hook_runs_sweep(registry, exit_hooks, make_memory_lock) -> None:
    lock = make_memory_lock("memory:exit")
    registry.register(lock)
    lock.lock()

    for hook in exit_hooks:
        hook()

    assert lock.is_locked() is False


class TestProfilerSelection:
    def test_null_profiler_by_default(self) -> None:
        assert isinstance(create_profiler(LockConfig()), NullProfiler)
        assert isinstance(LockRegistry(at_exit=lambda hook: None).profiler, NullProfiler)

    def test_service_profiler_when_enabled(self) -> None:
        profiler = create_profiler(LockConfig(profiling=True, max_spans=7))
        assert isinstance(profiler, ServiceProfiler)
        assert profiler.max_spans == 7

    def test_explicit_profiler_wins(self) -> None:
        profiler = ServiceProfiler()
        registry = LockRegistry(LockConfig(profiling=False), profiler=profiler, at_exit=lambda hook: None)
        assert registry.profiler is profiler


class TestDefaultRegistry:
    def test_default_registry_is_shared(self) -> None:
        assert registry_module.default_registry() is registry_module.default_registry()

    def test_default_registry_built_from_environment(self, monkeypatch: pytest.MonkeyPatch, exit_hooks) -> None:
        monkeypatch.setenv("ADVISORY_LOCKS_SWEEP_ON_EXIT", "false")
        monkeypatch.setenv("ADVISORY_LOCKS_PROFILE", "1")
        registry_module.reset_default_registry(None)

        registry = registry_module.default_registry()

        assert registry.config.sweep_on_exit is False
        assert isinstance(registry.profiler, ServiceProfiler)

    def test_reset_returns_previous(self) -> None:
        current = registry_module.default_registry()
        replacement = LockRegistry(at_exit=lambda hook: None)

        previous = registry_module.reset_default_registry(replacement)

        assert previous is current
        assert registry_module.default_registry() is replacement

    def test_module_unlock_all_sweeps_default_registry(self, make_memory_lock) -> None:
        lock = make_memory_lock("memory:default")
        registry_module.default_registry().register(lock)
        lock.lock()

        assert registry_module.unlock_all() == []
        assert lock.is_locked() is False


class TestForkedProcess:
    def test_sweep_skipped_outside_installing_process(self, registry, make_memory_lock, monkeypatch) -> None:
        lock = make_memory_lock("memory:inherited")
        registry.register(lock)
        lock.lock()
        child_pid = registry_module.os.getpid() + 1
        monkeypatch.setattr(registry_module.os, "getpid", lambda: child_pid)

        assert registry.unlock_all() == []
        assert lock.is_locked() is True
        assert lock.calls == ["do_lock"]

    def test_sweep_runs_again_in_installing_process(self, registry, make_memory_lock, monkeypatch) -> None:
        lock = make_memory_lock("memory:inherited")
        registry.register(lock)
        lock.lock()
        parent_pid = registry_module.os.getpid()
        monkeypatch.setattr(registry_module.os, "getpid", lambda: parent_pid + 1)
        registry.unlock_all()
        monkeypatch.setattr(registry_module.os, "getpid", lambda: parent_pid)

        assert registry.unlock_all() == []
        assert lock.is_locked() is False
