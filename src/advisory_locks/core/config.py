"""Configuration dataclass for advisory locks.

LockConfig centralizes the tunables of the lock registry and file locks.
It can be built directly in code or read from ADVISORY_LOCKS_* environment
variables, with an optional .env file read through python-dotenv.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from dotenv import dotenv_values, find_dotenv

from advisory_locks.core.constants import (
    DEFAULT_FILE_MODE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_SPANS,
    ENV_VAR_MAPPING,
    FALSY_VALUES,
    TRUTHY_VALUES,
    VALID_LOG_LEVELS,
)
from advisory_locks.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _parse_bool(field_name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in TRUTHY_VALUES:
        return True
    if value in FALSY_VALUES:
        return False
    raise ConfigurationError(
        f"Invalid boolean for {ENV_VAR_MAPPING[field_name]}",
        field=field_name,
        details=repr(raw),
    )


def _parse_int(field_name: str, raw: str, base: int = 10) -> int:
    try:
        return int(raw.strip(), base)
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid integer for {ENV_VAR_MAPPING[field_name]}",
            field=field_name,
            details=repr(raw),
        ) from e


def _own_variables(values: Mapping[str, str | None]) -> dict[str, str]:
    names = set(ENV_VAR_MAPPING.values())
    return {key: value for key, value in values.items() if key in names and value is not None}


def _read_dotenv(dotenv_path: str | os.PathLike | None) -> dict[str, str]:
    path = dotenv_path or find_dotenv(usecwd=True)
    if not path or not os.path.isfile(path):
        return {}
    values = _own_variables(dotenv_values(path))
    if values:
        logger.debug("Read %d lock setting(s) from %s", len(values), path)
    return values


@dataclass
class LockConfig:
    """Configuration for lock registries and file locks.

    Attributes:
        file_mode: Permission bits for newly created lock files (default: 0o644)
        create_parent_dirs: Create missing parent directories on lock (default: False)
        sweep_on_exit: Install the process-exit unlock sweep (default: True)
        profiling: Record lock spans with ServiceProfiler (default: False)
        max_spans: Maximum number of completed spans kept (default: 500)
        log_level: Level used by setup_logging (default: "INFO")
    """

    file_mode: int = DEFAULT_FILE_MODE
    create_parent_dirs: bool = False
    sweep_on_exit: bool = True
    profiling: bool = False
    max_spans: int = DEFAULT_MAX_SPANS
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self):
        if not 0 <= self.file_mode <= 0o7777:
            raise ConfigurationError("file_mode must be a permission mask", field="file_mode", details=oct(self.file_mode))
        if self.max_spans < 1:
            raise ConfigurationError("max_spans must be at least 1", field="max_spans", details=str(self.max_spans))
        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                "Invalid log level", field="log_level", details=f"{self.log_level!r} not in {VALID_LOG_LEVELS}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for diagnostics."""
        return {
            "file_mode": oct(self.file_mode),
            "create_parent_dirs": self.create_parent_dirs,
            "sweep_on_exit": self.sweep_on_exit,
            "profiling": self.profiling,
            "max_spans": self.max_spans,
            "log_level": self.log_level,
        }

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        dotenv_path: str | os.PathLike | None = None,
    ) -> LockConfig:
        """Create configuration from ADVISORY_LOCKS_* environment variables.

        When reading the real process environment, ADVISORY_LOCKS_* entries of
        a .env file fill in variables the environment does not set. The file is
        only read; ``os.environ`` is left untouched. Passing ``environ`` skips
        the .env step.

        Raises:
            ConfigurationError: If a variable holds an unparseable value
        """
        if environ is None:
            environ = {**_read_dotenv(dotenv_path), **_own_variables(os.environ)}

        kwargs: dict[str, Any] = {}
        for field_name, env_var in ENV_VAR_MAPPING.items():
            raw = environ.get(env_var)
            if raw is None:
                continue
            if field_name == "file_mode":
                kwargs[field_name] = _parse_int(field_name, raw, base=8)
            elif field_name == "max_spans":
                kwargs[field_name] = _parse_int(field_name, raw)
            elif field_name == "log_level":
                kwargs[field_name] = raw.strip()
            else:
                kwargs[field_name] = _parse_bool(field_name, raw)

        return cls(**kwargs)
