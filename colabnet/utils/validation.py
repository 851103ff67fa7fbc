"""
Input validation utilities.

Converts user-supplied paths into the repository-relative form used
as file names in the snapshot.
"""

import os
from pathlib import Path
from typing import Optional, Tuple

from colabnet.core.exceptions import QueryError


def validate_path(path: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a local directory path.

    Args:
        path: Path to validate.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not path:
        return False, "Path cannot be empty"

    path_obj = Path(path).resolve()

    if not path_obj.exists():
        return False, f"Path does not exist: {path}"

    if not path_obj.is_dir():
        return False, f"Path is not a directory: {path}"

    if not os.access(path_obj, os.R_OK):
        return False, f"Path is not readable: {path}"

    return True, None


def to_repo_relative(path: str, repo_root: Path, cwd: Optional[Path] = None) -> str:
    """
    Express a path relative to the repository root.

    Relative paths are resolved against ``cwd`` (the working directory by
    default). The file does not need to exist, since deleted files keep
    their history.

    Args:
        path: User-supplied path.
        repo_root: Repository root.
        cwd: Directory relative paths are taken from.

    Returns:
        POSIX-style path relative to ``repo_root``.

    Raises:
        QueryError: If the path lies outside the repository.
    """
    if not path:
        raise QueryError("Path cannot be empty")

    base = Path(cwd) if cwd else Path.cwd()
    candidate = Path(path)
    if not candidate.is_absolute():
        candidate = base / candidate

    root = Path(repo_root).resolve()
    resolved = Path(os.path.normpath(candidate.absolute()))
    if resolved != root and root not in resolved.parents:
        resolved = candidate.resolve()

    try:
        relative = resolved.relative_to(root)
    except ValueError:
        raise QueryError(
            f"Path is outside the repository: {path}",
            details={"path": path, "repo_root": str(root)},
        )

    return relative.as_posix()
