"""
Ephemeral workspace lifecycle.

A Workspace is a uniquely named temporary directory owned by exactly
one request. It is created on entry and removed recursively on every
exit path; removal problems are logged and never replace the error
that ended the request.
"""

import logging
import os
import shutil
import stat
import sys
import tempfile
from pathlib import Path
from typing import Optional

from gitdigest.core.config import WorkspaceConfig
from gitdigest.core.exceptions import WorkspaceError

logger = logging.getLogger(__name__)


def _make_writable_and_retry(func, path, _exc) -> None:
    """Clear the read-only bit (git pack files) and retry the removal."""
    os.chmod(path, stat.S_IWRITE | stat.S_IREAD | stat.S_IEXEC)
    func(path)


def remove_tree(path: Path) -> None:
    """Forcefully remove a directory tree."""
    if sys.version_info >= (3, 12):
        shutil.rmtree(path, onexc=_make_writable_and_retry)
    else:
        shutil.rmtree(path, onerror=_make_writable_and_retry)


class Workspace:
    """
    Scoped ephemeral directory for one repository checkout.

    Usage:
        with Workspace(config) as workspace:
            fetch_into(workspace.path)
    """

    def __init__(self, config: WorkspaceConfig = None):
        self.config = config or WorkspaceConfig()
        self._path: Optional[Path] = None
        self._released = False

    @property
    def path(self) -> Path:
        if self._path is None:
            raise WorkspaceError("Workspace has not been created")
        return self._path

    @property
    def exists(self) -> bool:
        return self._path is not None and self._path.exists()

    def create(self) -> Path:
        """
        Allocate the workspace directory.

        Raises:
            WorkspaceError: If the directory cannot be created.
        """
        if self._path is not None:
            raise WorkspaceError("Workspace already created", details={"path": str(self._path)})

        base_dir = self.config.base_dir
        try:
            if base_dir:
                Path(base_dir).mkdir(parents=True, exist_ok=True)
            self._path = Path(tempfile.mkdtemp(prefix=self.config.prefix, dir=base_dir))
        except OSError as e:
            raise WorkspaceError(
                f"Cannot create workspace: {e}",
                details={"base_dir": base_dir},
            ) from e

        logger.debug(f"Created workspace: {self._path}")
        return self._path

    def cleanup(self) -> bool:
        """
        Remove the workspace. Runs at most once.

        Returns:
            True if the directory is gone afterwards.
        """
        if self._released or self._path is None:
            return True
        self._released = True

        if not self._path.exists():
            return True

        try:
            remove_tree(self._path)
            logger.debug(f"Removed workspace: {self._path}")
            return True
        except OSError as e:
            logger.warning(f"Failed to remove workspace {self._path}: {e}")
            return False

    def __enter__(self) -> "Workspace":
        self.create()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self.cleanup()
        return False
