"""
Workspace tree walking.

Yields candidate files depth-first in sorted order, pruning excluded
directories before descending into them, and provides the stat/read
helpers used once a file has passed the cheap checks.
"""

import logging
import os
from pathlib import Path
from typing import FrozenSet, Iterator, Tuple

from gitdigest.core.exceptions import FileAccessError

logger = logging.getLogger(__name__)

# Directories never descended into
EXCLUDED_DIRECTORIES: FrozenSet[str] = frozenset({
    # version control
    ".git", ".svn", ".hg",
    # dependency caches
    "node_modules", "vendor", "bower_components", ".gradle",
    # build output
    ".next", "dist", "build", "target", "out",
    # coverage reports
    "coverage", "htmlcov", ".nyc_output",
    # virtual environments
    "venv", "env", ".venv",
    # compiled artifacts
    "__pycache__", ".pytest_cache", ".mypy_cache", "bin", "obj",
})

HIDDEN_PREFIX = "."


def is_excluded_directory(name: str) -> bool:
    """Check whether a directory name is pruned from the walk."""
    return name in EXCLUDED_DIRECTORIES or name.startswith(HIDDEN_PREFIX)


class TreeWalker:
    """
    Enumerates regular files under a workspace root.

    Names are visited in sorted order so two walks of the same tree
    yield the same sequence. Symbolic links are never followed.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def walk(self) -> Iterator[Tuple[str, Path]]:
        """
        Yield (relative_path, absolute_path) for every candidate file.

        Files and directories share one sorted listing per directory, and
        a directory is descended into where its name falls in that order.
        Relative paths are slash-delimited regardless of platform.
        Unlistable directories and unreadable entries are skipped.
        """
        return self._walk_directory(self.root)

    def _walk_directory(self, directory: Path) -> Iterator[Tuple[str, Path]]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            self._on_error(e)
            return

        for entry in entries:
            try:
                if entry.is_symlink():
                    continue
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file(follow_symlinks=False)
            except OSError as e:
                logger.debug(f"Skipping unreadable entry {entry.path}: {e}")
                continue

            entry_path = Path(entry.path)
            if is_dir:
                if not is_excluded_directory(entry.name):
                    yield from self._walk_directory(entry_path)
            elif is_file:
                yield entry_path.relative_to(self.root).as_posix(), entry_path

    def __iter__(self) -> Iterator[Tuple[str, Path]]:
        return self.walk()

    @staticmethod
    def _on_error(error: OSError) -> None:
        logger.debug(f"Skipping unreadable directory {error.filename}: {error.strerror}")


def file_size(path: Path, relative_path: str = None) -> int:
    """
    Return the on-disk size of a regular file.

    Raises:
        FileAccessError: If the file vanished, is not regular, or cannot be stat'ed.
    """
    label = relative_path or str(path)
    try:
        stat = path.stat()
    except OSError as e:
        raise FileAccessError(label, e.strerror or str(e)) from e

    if not path.is_file():
        raise FileAccessError(label, "not a regular file")
    return stat.st_size


def read_text(path: Path, relative_path: str = None) -> str:
    """
    Read a file as UTF-8 text, replacing undecodable bytes.

    Raises:
        FileAccessError: If the file cannot be read.
    """
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as e:
        raise FileAccessError(relative_path or str(path), e.strerror or str(e)) from e
    return raw.decode("utf-8", errors="replace")
