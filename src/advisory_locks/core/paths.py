"""Path canonicalization used to derive lock names."""

from __future__ import annotations

import os


def resolve_path(path: str | os.PathLike, relative_to: str | os.PathLike | None = None) -> str:
    """Return the canonical absolute form of ``path``.

    Relative paths are joined onto ``relative_to`` (default: the current
    working directory). ``~`` is expanded, ``.``/``..`` segments are collapsed
    and symlinks in any existing prefix are resolved, so two spellings of the
    same file map to the same string. The file itself need not exist.
    """
    raw = os.path.expanduser(os.fspath(path))
    if not raw:
        raise ValueError("path must not be empty")
    if not os.path.isabs(raw):
        base = os.fspath(relative_to) if relative_to is not None else os.getcwd()
        raw = os.path.join(os.path.expanduser(base), raw)
    return os.path.realpath(raw)
