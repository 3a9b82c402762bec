"""Constants and default values for advisory locks."""

# ==================== LOCK NAMES ====================

# Namespace tag prefixed to canonical paths to build file lock names
FILE_LOCK_NAMESPACE = "file:"

# Tags attached to every lock span
SPAN_TYPE_LOCK = "lock"

# ==================== DEFAULTS ====================

BANNER_WIDTH = 72

DEFAULT_FILE_MODE = 0o644
DEFAULT_MAX_SPANS = 500
DEFAULT_LOG_LEVEL = "INFO"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10MB
LOG_FILE_BACKUP_COUNT = 5

# ==================== ENVIRONMENT ====================

ENV_PREFIX = "ADVISORY_LOCKS_"

# Maps LockConfig field names to environment variables
ENV_VAR_MAPPING: dict[str, str] = {
    "file_mode": f"{ENV_PREFIX}FILE_MODE",
    "create_parent_dirs": f"{ENV_PREFIX}CREATE_DIRS",
    "sweep_on_exit": f"{ENV_PREFIX}SWEEP_ON_EXIT",
    "profiling": f"{ENV_PREFIX}PROFILE",
    "max_spans": f"{ENV_PREFIX}MAX_SPANS",
    "log_level": f"{ENV_PREFIX}LOG_LEVEL",
}

TRUTHY_VALUES = frozenset({"1", "true", "yes", "on"})
FALSY_VALUES = frozenset({"0", "false", "no", "off", ""})
