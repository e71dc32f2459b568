from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


def missing_assets(paths: Iterable[Path]) -> list[Path]:
    """Return the paths that are not existing regular files."""
    return [Path(path) for path in paths if not Path(path).is_file()]


def assets_exist(paths: Iterable[Path]) -> bool:
    """Check that every expected output is already on disk.

    No locking is taken; another process may create or remove files between
    this check and whatever the caller does next.
    """
    paths = list(paths)
    if not paths:
        return False
    return not missing_assets(paths)


__all__ = ["assets_exist", "missing_assets"]
