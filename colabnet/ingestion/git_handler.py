"""
Git operations handler for history ingestion.

Provides repository root discovery and commit log extraction
through the git command line.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from colabnet.core.config import IngestionConfig
from colabnet.core.exceptions import IngestionError, RepositoryNotFoundError

logger = logging.getLogger(__name__)


class GitHandler:
    """
    Handles git subprocess calls for a scan.

    The log is read in one synchronous call; nothing is retried.
    """

    def __init__(self, config: IngestionConfig = None):
        self.config = config or IngestionConfig()

    def find_repository_root(self, start: Optional[Path] = None) -> Path:
        """
        Locate the top level of the repository containing ``start``.

        Args:
            start: Directory to search from. Defaults to the working directory.

        Returns:
            Absolute path of the repository root.

        Raises:
            RepositoryNotFoundError: If ``start`` is not inside a git work tree.
        """
        start = Path(start) if start else Path.cwd()

        try:
            result = subprocess.run(
                [self.config.git_executable, "rev-parse", "--show-toplevel"],
                capture_output=True,
                text=True,
                cwd=start,
            )
        except (FileNotFoundError, NotADirectoryError) as e:
            raise RepositoryNotFoundError(str(start), str(e))

        if result.returncode != 0:
            raise RepositoryNotFoundError(
                str(start), result.stderr.strip() or "not a git repository"
            )

        root = Path(result.stdout.strip())
        logger.debug(f"Repository root: {root}")
        return root

    def build_log_command(self, extra_args: List[str] = None) -> List[str]:
        """
        Build the ``git log --stat`` command line.

        Arguments after a ``--`` marker in ``extra_args`` are dropped.
        """
        cmd = [
            self.config.git_executable,
            "--no-pager",
            "log",
            "--stat",
            f"--stat-width={self.config.stat_width}",
            f"--stat-name-width={self.config.stat_name_width}",
        ]
        cmd.extend(self.config.extra_log_args)

        for arg in extra_args or []:
            if arg == "--":
                break
            cmd.append(arg)

        return cmd

    def read_log(self, repo_root: Path, extra_args: List[str] = None) -> str:
        """
        Capture the full commit log of a repository.

        Args:
            repo_root: Repository to read.
            extra_args: Additional ``git log`` arguments (revision ranges, --since, ...).

        Returns:
            Log text, decoded as UTF-8 with invalid bytes replaced.

        Raises:
            IngestionError: If git cannot be launched, fails or times out.
        """
        cmd = self.build_log_command(extra_args)
        logger.debug(f"Log command: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                cwd=repo_root,
                timeout=self.config.git_timeout,
            )
        except FileNotFoundError as e:
            raise IngestionError(
                f"Failed to launch git: {e}",
                details={"command": cmd},
            )
        except subprocess.TimeoutExpired:
            raise IngestionError(
                f"Git log timed out after {self.config.git_timeout} seconds",
                details={"command": cmd},
            )

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace")
            raise IngestionError(
                f"Git log failed: {stderr.strip()}",
                details={"command": cmd, "stderr": stderr},
            )

        return result.stdout.decode("utf-8", errors="replace")
