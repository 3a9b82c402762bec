"""Advisory file lock backed by `fcntl.flock`.

Usage:
    lock = FileLock.new_for_path("/path/to/lock.file")
    lock.lock()
    do_contentious_things()
    lock.unlock()

The lock file is created on first lock() and never read or written. Deleting
it while the lock is held is unsupported.
"""

from __future__ import annotations

import contextlib
import errno
import os
from typing import BinaryIO

from advisory_locks.core.config import LockConfig
from advisory_locks.core.constants import FILE_LOCK_NAMESPACE
from advisory_locks.core.exceptions import (
    LockBackendUnavailableError,
    LockFileError,
    LockHeldError,
    LockRegistrationError,
    LockReleaseError,
)
from advisory_locks.core.paths import resolve_path
from advisory_locks.core.perf import Profiler
from advisory_locks.locks.base import Lock
from advisory_locks.locks.registry import LockRegistry, default_registry

try:
    import fcntl
except ImportError:  # pragma: no cover - exercised on non-POSIX only
    fcntl = None

_WOULD_BLOCK_ERRNOS = {errno.EAGAIN, errno.EWOULDBLOCK}

_FLOCK_UNSUPPORTED_ERRNOS = {
    err_no
    for err_no in (
        getattr(errno, "ENOTSUP", None),
        getattr(errno, "EOPNOTSUPP", None),
        getattr(errno, "ENOSYS", None),
    )
    if err_no is not None
}


class FileLock(Lock):
    """Non-blocking exclusive advisory lock on a file.

    Build instances with new_for_path(); two spellings of the same file share
    one instance within a registry.
    """

    def __init__(
        self,
        name: str,
        path: str,
        *,
        config: LockConfig | None = None,
        profiler: Profiler | None = None,
    ):
        super().__init__(name, profiler=profiler)
        self._path = path
        self._config = config or LockConfig()
        self._handle: BinaryIO | None = None

    @classmethod
    def new_for_path(cls, path: str | os.PathLike, *, registry: LockRegistry | None = None) -> FileLock:
        """Return the lock for a lock file, creating it on first request.

        The file need not exist yet.

        Args:
            path: Lock file path; relative paths resolve against the current directory
            registry: Registry to use. Defaults to the process-wide registry.

        Raises:
            LockRegistrationError: If a lock of another type holds the name
        """
        if registry is None:
            registry = default_registry()
        lockfile = resolve_path(path)
        name = FILE_LOCK_NAMESPACE + lockfile

        def _build() -> FileLock:
            return cls(name, lockfile, config=registry.config, profiler=registry.profiler)

        lock = registry.setdefault(name, _build)
        if not isinstance(lock, FileLock):
            raise LockRegistrationError(name)
        return lock

    @property
    def path(self) -> str:
        return self._path

    def get_path(self) -> str:
        return self._path

    @staticmethod
    def is_supported() -> bool:
        return fcntl is not None

    def _opener(self, path: str, flags: int) -> int:
        return os.open(path, flags, self._config.file_mode)

    def do_lock(self) -> None:
        path = self._path
        if fcntl is None:
            raise LockBackendUnavailableError("flock is unavailable on this platform", path=path)

        if self._config.create_parent_dirs:
            try:
                os.makedirs(os.path.dirname(path), exist_ok=True)
            except OSError as e:
                raise LockFileError(
                    "Unable to create lock directory", path=path, details=str(e), original_error=e
                ) from e

        try:
            handle = open(path, "ab+", buffering=0, opener=self._opener)
        except OSError as e:
            raise LockFileError("Unable to open lock for writing", path=path, details=str(e), original_error=e) from e

        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            with contextlib.suppress(OSError):
                handle.close()
            if isinstance(e, BlockingIOError) or e.errno in _WOULD_BLOCK_ERRNOS:
                raise LockHeldError(self.name) from e
            if e.errno in _FLOCK_UNSUPPORTED_ERRNOS:
                raise LockBackendUnavailableError(
                    "flock is unsupported for lock path", path=path, details=str(e), original_error=e
                ) from e
            raise LockFileError("Unable to lock file", path=path, details=str(e), original_error=e) from e

        self._handle = handle

    def do_unlock(self) -> None:
        # The handle is dropped before anything can fail; closing the
        # descriptor releases the flock even when LOCK_UN errors out.
        handle, self._handle = self._handle, None
        if handle is None:
            raise LockReleaseError(self.name, "unlock")

        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        except OSError as e:
            with contextlib.suppress(OSError):
                handle.close()
            raise LockReleaseError(self.name, "unlock", e) from e

        try:
            handle.close()
        except OSError as e:
            raise LockReleaseError(self.name, "close", e) from e
