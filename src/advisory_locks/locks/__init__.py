"""Locking subsystem for cross-process coordination.

This package provides the lock base class, the registry that keeps one lock
object per name and releases held locks on exit, and the flock-backed
file lock.
"""

from advisory_locks.locks.base import AcquireResult, AcquireStatus, Lock
from advisory_locks.locks.file import FileLock
from advisory_locks.locks.registry import (
    LockRegistry,
    create_profiler,
    default_registry,
    reset_default_registry,
    unlock_all,
)

__all__ = [
    "AcquireResult",
    "AcquireStatus",
    "FileLock",
    "Lock",
    "LockRegistry",
    "create_profiler",
    "default_registry",
    "reset_default_registry",
    "unlock_all",
]
