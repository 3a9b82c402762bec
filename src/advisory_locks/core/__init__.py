"""Core module - Foundation components with no lock dependencies.

This module provides the building blocks used by the lock implementations:
- Version information
- Custom exceptions
- Configuration dataclass
- Constants and defaults
- Logging helpers
- Path canonicalization
- Span profiling
"""

from advisory_locks.core.version import __version__

from advisory_locks.core.exceptions import (
    AdvisoryLockError,
    ConfigurationError,
    LockMisuseError,
    LockRegistrationError,
    LockHeldError,
    LockFileError,
    LockBackendUnavailableError,
    LockReleaseError,
)

from advisory_locks.core.config import LockConfig

from advisory_locks.core.constants import (
    FILE_LOCK_NAMESPACE,
    SPAN_TYPE_LOCK,
    DEFAULT_FILE_MODE,
    DEFAULT_MAX_SPANS,
    ENV_VAR_MAPPING,
)

from advisory_locks.core.logging import (
    JSONFormatter,
    ContextLoggerAdapter,
    setup_logging,
    with_log_context,
)

from advisory_locks.core.paths import resolve_path

from advisory_locks.core.perf import (
    NullProfiler,
    Profiler,
    ServiceProfiler,
    SpanRecord,
)

__all__ = [
    # Version
    '__version__',
    # Exceptions
    'AdvisoryLockError',
    'ConfigurationError',
    'LockMisuseError',
    'LockRegistrationError',
    'LockHeldError',
    'LockFileError',
    'LockBackendUnavailableError',
    'LockReleaseError',
    # Config
    'LockConfig',
    # Constants
    'FILE_LOCK_NAMESPACE',
    'SPAN_TYPE_LOCK',
    'DEFAULT_FILE_MODE',
    'DEFAULT_MAX_SPANS',
    'ENV_VAR_MAPPING',
    # Logging
    'JSONFormatter',
    'ContextLoggerAdapter',
    'setup_logging',
    'with_log_context',
    # Paths
    'resolve_path',
    # Profiling
    'NullProfiler',
    'Profiler',
    'ServiceProfiler',
    'SpanRecord',
]
