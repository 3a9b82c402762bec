"""Base class for advisory locks.

Usage:
    lock = FileLock.new_for_path("/path/to/lock.file")
    lock.lock()
    try:
        do_contentious_things()
    finally:
        lock.unlock()

If the lock can't be acquired because it is already held, LockHeldError is
raised. Other exceptions indicate failure unrelated to contention.

Subclasses implement do_lock()/do_unlock() and are built through a factory
that looks the name up in a LockRegistry and registers new instances, so each
name maps to one lock object and every held lock is released by the registry's
exit sweep.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from advisory_locks.core.constants import SPAN_TYPE_LOCK
from advisory_locks.core.exceptions import LockHeldError, LockMisuseError
from advisory_locks.core.logging import with_log_context
from advisory_locks.core.perf import NullProfiler, Profiler


class AcquireStatus(Enum):
    """Outcome of a non-raising acquisition attempt."""

    ACQUIRED = "acquired"
    HELD = "held"  # Another holder owns the lock


@dataclass(frozen=True)
class AcquireResult:
    """Result of Lock.try_lock(). Truthy only when the lock was acquired."""

    status: AcquireStatus
    lock_name: str
    error: LockHeldError | None = None

    @property
    def acquired(self) -> bool:
        return self.status is AcquireStatus.ACQUIRED

    def __bool__(self) -> bool:
        return self.acquired


class Lock(ABC):
    """Exclusive, non-reentrant, non-blocking lock with a globally unique name.

    A lock moves between two states: UNLOCKED -> LOCKED on a successful
    lock(), LOCKED -> UNLOCKED on unlock(). Calling lock() while LOCKED or
    unlock() while UNLOCKED raises LockMisuseError.

    Instances are not thread-safe; share one across threads only with
    external synchronization.
    """

    def __init__(
        self,
        name: str,
        *,
        profiler: Profiler | None = None,
        logger: logging.Logger | None = None,
    ):
        self._name = name
        self._locked = False
        self._span_handle: int | None = None
        self._profiler = profiler if profiler is not None else NullProfiler()
        self.logger = with_log_context(logger or logging.getLogger(__name__), lock=name)

    # -- Lock implementation --------------------------------------------------

    @abstractmethod
    def do_lock(self) -> None:
        """Acquire the underlying resource or raise LockHeldError if it is held."""

    @abstractmethod
    def do_unlock(self) -> None:
        """Release the underlying resource.

        Implementations must leave the resource released when they raise, so
        the lock can be acquired again afterwards.
        """

    # -- Status ---------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    def get_name(self) -> str:
        return self._name

    @property
    def locked(self) -> bool:
        return self._locked

    def is_locked(self) -> bool:
        """True if this instance currently holds the lock."""
        return self._locked

    # -- Locking --------------------------------------------------------------

    def lock(self) -> None:
        """Acquire the lock.

        Raises:
            LockMisuseError: If this instance already holds the lock
            LockHeldError: If another holder owns the lock
        """
        if self._locked:
            raise LockMisuseError(f"Lock '{self._name}' has already been locked by this process", lock_name=self._name)

        span = self._profiler.begin_span({"type": SPAN_TYPE_LOCK, "name": self._name})
        try:
            self.do_lock()
        except Exception:
            self._profiler.end_span(span, {"lock": False})
            raise

        self._span_handle = span
        self._locked = True
        self.logger.debug("Acquired lock %s", self._name)

    def unlock(self) -> None:
        """Release the lock.

        Errors raised by do_unlock() propagate after the lock is marked
        unlocked, since do_unlock() never leaves the resource held.

        Raises:
            LockMisuseError: If this instance does not hold the lock
        """
        if not self._locked:
            raise LockMisuseError(f"Lock '{self._name}' is not locked by this process", lock_name=self._name)

        span = self._span_handle
        try:
            self.do_unlock()
        except Exception:
            self._profiler.end_span(span, {"lock": False})
            self._span_handle = None
            self._locked = False
            raise

        self._profiler.end_span(span, {"lock": True})
        self._span_handle = None
        self._locked = False
        self.logger.debug("Released lock %s", self._name)

    def try_lock(self) -> AcquireResult:
        """Attempt to acquire the lock, reporting contention as a result.

        Misuse and I/O failures still raise.
        """
        try:
            self.lock()
        except LockHeldError as e:
            self.logger.debug("Lock %s is held elsewhere", self._name)
            return AcquireResult(status=AcquireStatus.HELD, lock_name=self._name, error=e)
        return AcquireResult(status=AcquireStatus.ACQUIRED, lock_name=self._name)

    def __enter__(self) -> Lock:
        self.lock()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._locked:
            self.unlock()

    def __repr__(self) -> str:
        state = "locked" if self._locked else "unlocked"
        return f"<{type(self).__name__} {self._name!r} {state}>"
