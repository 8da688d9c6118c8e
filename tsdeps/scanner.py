"""Source file enumeration for a project root."""

from __future__ import annotations

import fnmatch
from pathlib import Path

from tsdeps.language_map import SOURCE_EXTENSIONS

DEFAULT_EXCLUDE_DIRS = ["node_modules", ".git", "dist", "build"]


def find_source_files(
    root: str | Path,
    extensions: list[str] | tuple[str, ...] | None = None,
    exclude_dirs: list[str] | None = None,
    max_depth: int = 10,
) -> list[Path]:
    """Recursively list source files under ``root``.

    Directories matching any ``exclude_dirs`` pattern are pruned, and nothing
    more than ``max_depth`` directory levels below ``root`` is visited.
    """
    root_path = Path(root).absolute()
    if not root_path.exists():
        raise FileNotFoundError(f"Directory not found: {root_path}")
    if not root_path.is_dir():
        raise NotADirectoryError(f"Not a directory: {root_path}")

    allowed = set(extensions if extensions is not None else SOURCE_EXTENSIONS)
    skip = exclude_dirs if exclude_dirs is not None else DEFAULT_EXCLUDE_DIRS

    files: list[Path] = []
    _walk(root_path, 0, max_depth, allowed, skip, files)
    return files


def _walk(
    directory: Path,
    depth: int,
    max_depth: int,
    allowed: set[str],
    skip: list[str],
    files: list[Path],
) -> None:
    if depth > max_depth:
        return
    for entry in sorted(directory.iterdir()):
        if entry.is_dir() and not entry.is_symlink():
            if _should_skip(entry.name, skip):
                continue
            _walk(entry, depth + 1, max_depth, allowed, skip, files)
        elif entry.is_file() and entry.suffix in allowed:
            files.append(entry)


def _should_skip(name: str, patterns: list[str]) -> bool:
    return any(fnmatch.fnmatch(name, pattern) for pattern in patterns)
