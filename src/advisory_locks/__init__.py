"""
Advisory Locks - process-level advisory locking

Named, exclusive, non-blocking locks for serializing sensitive operations
across cooperating processes, backed by flock() on a lock file.
"""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING, Any

logging.getLogger(__name__).addHandler(logging.NullHandler())

_EXPORTS = {
    "__version__": "advisory_locks.core.version",
    "AdvisoryLockError": "advisory_locks.core.exceptions",
    "LockMisuseError": "advisory_locks.core.exceptions",
    "LockRegistrationError": "advisory_locks.core.exceptions",
    "LockHeldError": "advisory_locks.core.exceptions",
    "LockFileError": "advisory_locks.core.exceptions",
    "LockBackendUnavailableError": "advisory_locks.core.exceptions",
    "LockReleaseError": "advisory_locks.core.exceptions",
    "LockConfig": "advisory_locks.core.config",
    "setup_logging": "advisory_locks.core.logging",
    "AcquireResult": "advisory_locks.locks.base",
    "AcquireStatus": "advisory_locks.locks.base",
    "Lock": "advisory_locks.locks.base",
    "FileLock": "advisory_locks.locks.file",
    "LockRegistry": "advisory_locks.locks.registry",
    "default_registry": "advisory_locks.locks.registry",
    "unlock_all": "advisory_locks.locks.registry",
}

__all__ = list(_EXPORTS)

if TYPE_CHECKING:
    from advisory_locks.core.config import LockConfig
    from advisory_locks.core.exceptions import (
        AdvisoryLockError,
        LockBackendUnavailableError,
        LockFileError,
        LockHeldError,
        LockMisuseError,
        LockRegistrationError,
        LockReleaseError,
    )
    from advisory_locks.core.logging import setup_logging
    from advisory_locks.core.version import __version__
    from advisory_locks.locks.base import AcquireResult, AcquireStatus, Lock
    from advisory_locks.locks.file import FileLock
    from advisory_locks.locks.registry import LockRegistry, default_registry, unlock_all


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        module = importlib.import_module(_EXPORTS[name])
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
