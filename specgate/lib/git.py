"""Read-only git queries (remote URL for linking bug reports to issues)."""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


@dataclass
class GitResult:
    """Result of a git command."""
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out


def run_git(args: list[str], cwd: Path, timeout: int = DEFAULT_TIMEOUT) -> GitResult:
    """Run git in cwd. A missing git binary or a timeout is a failed result."""
    cmd = ["git", "-C", str(cwd)] + args
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired:
        return GitResult(-1, "", f"Command timed out after {timeout}s", timed_out=True)
    except FileNotFoundError:
        return GitResult(-1, "", "git not found on PATH")
    return GitResult(result.returncode, result.stdout, result.stderr)


def remote_url(repo: Path, remote: str = "origin") -> Optional[str]:
    """URL of the named remote, or None outside a repo / without that remote."""
    result = run_git(["remote", "get-url", remote], repo)
    if not result.success:
        logger.debug(f"No '{remote}' remote for {repo}: {result.stderr.strip()}")
        return None
    return result.stdout.strip() or None
