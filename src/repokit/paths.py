"""Path resolution for file-backed databases and config files."""

from __future__ import annotations

from pathlib import Path

from repokit.errors import StorageError


def resolve_path(path: str | Path) -> Path:
    """Return *path* as an absolute path.

    ``~`` is expanded; relative paths are resolved against the current
    working directory.
    """
    return Path(path).expanduser().resolve()


def ensure_parent_dir(path: str | Path) -> Path:
    """Resolve *path* and create its parent directories.

    Returns the resolved path.  Raises :class:`StorageError` if the
    directories cannot be created (permissions, a file in the way, ...).
    """
    resolved = resolve_path(path)
    try:
        resolved.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(
            f"Cannot create directory {resolved.parent}: {e}",
            cause=e,
        ).with_context(path=str(resolved)) from e
    return resolved


__all__ = [
    "resolve_path",
    "ensure_parent_dir",
]
