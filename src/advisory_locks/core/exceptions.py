"""Custom exceptions for advisory locks.

Three kinds of failure matter to callers:

- misuse (double lock, double unlock, duplicate registration): a bug in the
  calling code, never retried;
- I/O failure on the backing file: surfaced unchanged, never retried;
- lock held elsewhere: the expected, recoverable outcome that callers catch
  to implement their own retry or backoff.
"""


class AdvisoryLockError(Exception):
    """Base exception for all advisory lock errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(AdvisoryLockError):
    """Exception raised for invalid configuration values.

    Examples:
        - Non-boolean value in ADVISORY_LOCKS_SWEEP_ON_EXIT
        - File mode that is not an octal string
    """

    def __init__(self, message: str, field: str | None = None, details: str | None = None):
        self.field = field
        super().__init__(message, details)


class LockMisuseError(AdvisoryLockError):
    """Raised when a lock is driven through an invalid state transition.

    Examples:
        - lock() on a lock already held by this process
        - unlock() on a lock that is not held
    """

    def __init__(self, message: str, lock_name: str | None = None, details: str | None = None):
        self.lock_name = lock_name
        super().__init__(message, details)


class LockRegistrationError(LockMisuseError):
    """Raised when a second lock is registered under an existing name."""

    def __init__(self, lock_name: str):
        super().__init__(f"Lock '{lock_name}' is already registered", lock_name=lock_name)


class LockHeldError(AdvisoryLockError):
    """Raised when the lock is currently held by another holder.

    This is the recoverable condition: catch it to retry, back off or abort.

    Attributes:
        lock_name: Name of the contended lock
    """

    def __init__(self, lock_name: str, details: str | None = None):
        self.lock_name = lock_name
        super().__init__(f"Lock '{lock_name}' is held by another process", details)


class LockFileError(AdvisoryLockError):
    """Exception raised when the backing lock file cannot be used.

    Examples:
        - Permission denied when opening the lock file
        - Parent directory does not exist
        - Unexpected flock() failure unrelated to contention
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: str | None = None,
        original_error: Exception | None = None,
    ):
        self.path = path
        self.original_error = original_error
        super().__init__(message, details)

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"path {self.path}")
        if self.details:
            parts.append(self.details)
        return " - ".join(parts)


class LockBackendUnavailableError(LockFileError):
    """Raised when flock() is unsupported for the platform or lock path."""


class LockReleaseError(AdvisoryLockError):
    """Exception raised when releasing a held lock fails.

    Attributes:
        lock_name: Name of the lock being released
        operation: Step that failed ("unlock" or "close")
        original_error: Underlying OS error
    """

    def __init__(
        self,
        lock_name: str,
        operation: str,
        original_error: Exception | None = None,
    ):
        self.lock_name = lock_name
        self.operation = operation
        self.original_error = original_error
        details = str(original_error) if original_error is not None else None
        super().__init__(f"Unable to {operation} lock '{lock_name}'", details)
