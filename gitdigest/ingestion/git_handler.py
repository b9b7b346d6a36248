"""
Git operations for repository fetching.

Produces a shallow, single-branch checkout of a remote repository
inside a workspace directory.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional

from gitdigest.core.config import FetchConfig
from gitdigest.core.exceptions import FetchError
from gitdigest.ingestion.source import RepositorySource

logger = logging.getLogger(__name__)


class GitHandler:
    """
    Clones repositories with the system git executable.

    Authentication failures, unknown repositories and network errors all
    surface as a single FetchError.
    """

    def __init__(self, config: FetchConfig = None):
        self.config = config or FetchConfig()
        self._git_available: Optional[bool] = None

    @property
    def git_available(self) -> bool:
        if self._git_available is None:
            self._git_available = self._check_git_available()
        return self._git_available

    def _check_git_available(self) -> bool:
        """Check if git is available on the system."""
        try:
            result = subprocess.run(
                [self.config.git_binary, "--version"],
                capture_output=True,
                text=True,
                timeout=10,
            )
            return result.returncode == 0
        except (subprocess.TimeoutExpired, OSError):
            return False

    def fetch(self, source: RepositorySource, destination: Path) -> Path:
        """
        Shallow-clone a repository's default branch.

        Args:
            source: Validated repository source.
            destination: Empty directory to clone into.

        Returns:
            Path to the checkout.

        Raises:
            FetchError: If cloning fails.
        """
        logger.info(f"Cloning repository: {source.clone_url}")
        return self.clone(
            source.authenticated_clone_url(),
            destination,
            redact=source.redact,
        )

    def clone(self, url: str, destination: Path, redact=None) -> Path:
        """
        Clone ``url`` into ``destination``.

        Args:
            url: Clone URL, possibly carrying credentials.
            destination: Target directory (empty or missing).
            redact: Callable removing secrets from text before it is logged.

        Raises:
            FetchError: If git is missing, fails, or times out.
        """
        redact = redact or (lambda text: text)

        if not self.git_available:
            raise FetchError("Git is not available on this system")

        cmd = self._build_clone_command(url, destination)
        logger.debug(f"Clone command: {redact(' '.join(cmd))}")

        timeout = self.config.git_timeout or None
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
                env=self._clone_environment(),
            )
        except subprocess.TimeoutExpired:
            raise FetchError(
                f"Git clone timed out after {self.config.git_timeout} seconds",
                details={"url": redact(url)},
            )
        except OSError as e:
            raise FetchError(
                f"Git clone could not be started: {e}",
                details={"url": redact(url)},
            ) from e

        if result.returncode != 0:
            stderr = redact(result.stderr.strip())
            logger.warning(f"Git clone failed for {redact(url)}: {stderr}")
            raise FetchError(
                "Git clone failed",
                details={"url": redact(url), "stderr": stderr},
            )

        logger.info(f"Repository cloned to: {destination}")
        return destination

    def _build_clone_command(self, url: str, destination: Path) -> List[str]:
        cmd = [self.config.git_binary, "clone", "--quiet", "--single-branch"]

        if self.config.clone_depth > 0:
            cmd.extend(["--depth", str(self.config.clone_depth)])

        cmd.extend(["--", url, str(destination)])
        return cmd

    @staticmethod
    def _clone_environment() -> dict:
        env = dict(os.environ)
        # fail instead of prompting for credentials
        env["GIT_TERMINAL_PROMPT"] = "0"
        env["GIT_ASKPASS"] = "echo"
        env["GCM_INTERACTIVE"] = "never"
        return env
