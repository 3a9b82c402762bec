"""Lock registry: one lock object per name, released on process exit."""

from __future__ import annotations

import atexit
import logging
import os
import threading
from collections.abc import Callable, Iterator

from advisory_locks.core.config import LockConfig
from advisory_locks.core.exceptions import LockRegistrationError
from advisory_locks.core.perf import NullProfiler, Profiler, ServiceProfiler
from advisory_locks.locks.base import Lock


def create_profiler(config: LockConfig) -> Profiler:
    """Create the span profiler selected by configuration."""
    if config.profiling:
        return ServiceProfiler(max_spans=config.max_spans)
    return NullProfiler()


class LockRegistry:
    """Registry mapping lock names to their single lock instance.

    Entries are added once and never removed. The first registration installs
    unlock_all() as a process-exit hook (unless disabled by configuration), so
    locks still held when the interpreter exits are released.

    Args:
        config: Lock configuration shared with locks created for this registry
        profiler: Span profiler handed to new locks. Defaults from config.
        at_exit: Hook installer, ``atexit.register`` by default
        logger: Logger for sweep diagnostics
    """

    def __init__(
        self,
        config: LockConfig | None = None,
        *,
        profiler: Profiler | None = None,
        at_exit: Callable[[Callable[[], object]], object] = atexit.register,
        logger: logging.Logger | None = None,
    ):
        self.config = config or LockConfig()
        self.profiler = profiler if profiler is not None else create_profiler(self.config)
        self.logger = logger or logging.getLogger(__name__)
        self._at_exit = at_exit
        self._locks: dict[str, Lock] = {}
        self._sweep_installed = False
        self._owner_pid = os.getpid()
        self._mutex = threading.RLock()

    @property
    def sweep_installed(self) -> bool:
        return self._sweep_installed

    def get(self, name: str) -> Lock | None:
        """Get a named lock, if it has been registered."""
        with self._mutex:
            return self._locks.get(name)

    def register(self, lock: Lock) -> None:
        """Register a lock for deduplication and cleanup on exit.

        Raises:
            LockRegistrationError: If a lock with the same name is registered
        """
        with self._mutex:
            self._install_sweep()
            name = lock.name
            if name in self._locks:
                raise LockRegistrationError(name)
            self._locks[name] = lock
        self.logger.debug("Registered lock %s", name)

    def setdefault(self, name: str, factory: Callable[[], Lock]) -> Lock:
        """Return the lock registered under name, building and registering it if absent."""
        with self._mutex:
            existing = self._locks.get(name)
            if existing is not None:
                return existing
            lock = factory()
            self.register(lock)
            return lock

    def names(self) -> list[str]:
        with self._mutex:
            return list(self._locks)

    def __len__(self) -> int:
        with self._mutex:
            return len(self._locks)

    def __contains__(self, name: object) -> bool:
        with self._mutex:
            return name in self._locks

    def __iter__(self) -> Iterator[Lock]:
        with self._mutex:
            return iter(list(self._locks.values()))

    def _install_sweep(self) -> None:
        if self._sweep_installed or not self.config.sweep_on_exit:
            return
        self._owner_pid = os.getpid()
        self._at_exit(self.unlock_all)
        self._sweep_installed = True

    def unlock_all(self) -> list[tuple[str, Exception]]:
        """Release every registered lock that is still held.

        Runs as the process-exit hook; entry points may also call it as an
        explicit shutdown step. A failure to release one lock is logged and
        does not stop the sweep.

        A child created with os.fork() inherits the registry and the open
        lock files, which share their flock with the parent. The sweep is
        skipped outside the process that installed it, so a child exiting
        does not release the parent's locks.

        Returns:
            (name, exception) pairs for locks whose release failed
        """
        if os.getpid() != self._owner_pid:
            self.logger.debug("Skipping lock sweep in forked process %d", os.getpid())
            return []
        failures: list[tuple[str, Exception]] = []
        for lock in self:
            if not lock.is_locked():
                continue
            try:
                lock.unlock()
            except Exception as e:
                self.logger.error("Failed to release lock %s during shutdown", lock.name, exc_info=True)
                failures.append((lock.name, e))
            else:
                self.logger.info("Released lock %s during shutdown", lock.name)
        return failures


_default_registry: LockRegistry | None = None
_default_registry_mutex = threading.Lock()


def default_registry() -> LockRegistry:
    """Return the process-wide registry, building it from the environment on first use."""
    global _default_registry
    with _default_registry_mutex:
        if _default_registry is None:
            _default_registry = LockRegistry(LockConfig.from_env())
        return _default_registry


def reset_default_registry(registry: LockRegistry | None = None) -> LockRegistry | None:
    """Replace the process-wide registry and return the previous one.

    Locks held through the previous registry stay covered by its exit hook.
    """
    global _default_registry
    with _default_registry_mutex:
        previous = _default_registry
        _default_registry = registry
        return previous


def unlock_all() -> list[tuple[str, Exception]]:
    """Release every held lock in the process-wide registry."""
    return default_registry().unlock_all()
